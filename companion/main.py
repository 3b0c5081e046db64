"""Main entry point for Companion CLI application"""

from pathlib import Path

import typer
from rich.console import Console

from companion.cli.chat import chat_app
from companion.cli.config import config_app
from companion.cli.tools import tools_app

app = typer.Typer(
    name="companion",
    help="Companion - Gemini chat with browser tools",
    add_completion=False,
)

console = Console()


# Global state for sharing between commands
class AppState:
    config_file: Path | None = None
    verbose: bool = False


app.state = AppState()

app.add_typer(chat_app, name="chat", help="Chat commands")
app.add_typer(config_app, name="config", help="Configuration commands")
app.add_typer(tools_app, name="tools", help="Tools commands")


@app.command()
def version():
    """Show Companion version"""
    from companion import __version__

    console.print(f"Companion v{__version__}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output",
    ),
):
    """Companion - Gemini chat with browser tools

    Ask questions, attach images, and let the model open tabs, search,
    read pages and take screenshots on your behalf.
    """
    app.state.config_file = config_file
    app.state.verbose = verbose

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
