"""Configuration command handlers"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from companion.core.config import ConfigError, config_manager
from companion.utils.formatting import print_error, print_info, print_success

config_app = typer.Typer()
console = Console()


def _resolve_config_file(config_file: Optional[Path]) -> Optional[Path]:
    if config_file:
        return config_file
    # Import here to avoid circular import
    from companion.main import app
    return app.state.config_file


@config_app.command("show")
def show_config(
    config_file: Optional[Path] = typer.Option(
        None,
        "--file", "-f",
        help="Configuration file to show"
    )
):
    """Show current configuration"""
    try:
        config = config_manager.load_config(_resolve_config_file(config_file))

        print_info("Current Configuration:")

        table = Table()
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="white")

        model = config.get_selected_model()
        table.add_row("API Base URL", config.api.base_url)
        table.add_row("API Key", "***" if config.api.api_key else "Not set")
        table.add_row("Request Timeout", f"{config.api.request_timeout}s")
        table.add_row("Selected Model", model.id if model else "None")
        table.add_row("Max History Length", str(config.chat.max_history_length))
        table.add_row("Max Image Size", f"{config.chat.max_image_bytes} bytes")
        table.add_row(
            "Saved State", config.chat.state_file if config.chat.auto_save else "Off"
        )
        table.add_row("Tools Enabled", str(config.tools.enabled))
        table.add_row("Tool Modules", ", ".join(config.tools.enabled_built_in_modules) or "None")
        table.add_row("Log Level", config.monitoring.log_level)

        console.print(table)

    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)


@config_app.command("init")
def init_config(
    output_path: Optional[Path] = typer.Option(
        Path("companion-config.yaml"),
        "--output", "-o",
        help="Output path for configuration file"
    )
):
    """Initialize a new configuration file"""
    try:
        config = config_manager._load_default_config()
        config_manager.save_config(config, output_path)

        print_success(f"Configuration file created: {output_path}")
        print_info("Set COMPANION_API_KEY or GEMINI_API_KEY for the Gemini API")

    except ConfigError as e:
        print_error(f"Failed to create configuration: {e}")
        raise typer.Exit(1)


@config_app.command("models")
def list_models(
    config_file: Optional[Path] = typer.Option(
        None,
        "--file", "-f",
        help="Configuration file to use"
    )
):
    """List configured models"""
    try:
        config = config_manager.load_config(_resolve_config_file(config_file))
    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    table = Table(title="Models")
    table.add_column("", width=1)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("Description", style="dim")

    for model in config.models:
        selected = "*" if model.id == config.selected_model else ""
        table.add_row(selected, model.id, model.name, model.description)

    console.print(table)


@config_app.callback(invoke_without_command=True)
def config_callback(ctx: typer.Context):
    """Configuration management commands"""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()
