"""Chat command handlers"""

from pathlib import Path

import typer
from rich.console import Console

from companion.core.chat import ChatManager
from companion.core.config import ConfigError
from companion.core.logging_config import setup_logging
from companion.utils.formatting import print_error, print_message
from companion.utils.images import ImageAttachmentError

chat_app = typer.Typer()
console = Console()


def _create_manager() -> ChatManager:
    # Import here to avoid circular import
    from companion.main import app

    manager = ChatManager(app.state.config_file)
    setup_logging(manager.config.monitoring, app.state.verbose)
    return manager


@chat_app.command("start")
def start_chat():
    """Start an interactive chat session"""
    try:
        chat_manager = _create_manager()
        chat_manager.start_interactive_chat()

    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e


@chat_app.command("ask")
def ask(
    message: str = typer.Argument(..., help="Message to send"),
    image: Path | None = typer.Option(
        None, "--image", "-i", help="Image file to analyze with the message"
    ),
):
    """Send a single message and print the reply"""
    try:
        chat_manager = _create_manager()
        reply = chat_manager.ask_once(message, image)

    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e
    except ImageAttachmentError as e:
        print_error(str(e))
        raise typer.Exit(1) from e

    if reply is None:
        print_error("Message is empty")
        raise typer.Exit(1)

    print_message(reply.role.value, reply.content)
    if reply.is_error:
        raise typer.Exit(1)


@chat_app.callback(invoke_without_command=True)
def chat_callback(ctx: typer.Context):
    """Chat-related commands"""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()
