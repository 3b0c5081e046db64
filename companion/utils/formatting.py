"""Rich output helpers for the terminal"""

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

console = Console()

# role -> (border colour, panel title)
ROLE_STYLES = {
    "user": ("blue", "👤 You"),
    "assistant": ("green", "🤖 Companion"),
    "error": ("red", "⚠ Error"),
}


def print_message(role: str, content: str, timestamp: str | None = None):
    """Print one chat message in a panel; assistant replies render as markdown"""
    role = role.lower()
    color, title = ROLE_STYLES.get(role, ("red", f"⚠ {role.title()}"))
    if timestamp:
        title = f"{title} ({timestamp})"

    body = Markdown(content) if role == "assistant" else Text(content)
    console.print(
        Panel(body, title=title, title_align="left", border_style=color, padding=(0, 1))
    )


def print_error(message: str):
    console.print(f"[red bold]Error:[/red bold] {escape(message)}")


def print_success(message: str):
    console.print(f"[green]✓[/green] {escape(message)}")


def print_info(message: str):
    console.print(f"[blue]ℹ[/blue] {escape(message)}")


def format_file_size(size_bytes: int) -> str:
    """Human readable size, e.g. ``2.0 KB``"""
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
