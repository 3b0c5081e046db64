"""Tools command handlers"""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from companion.core.config import ConfigError, config_manager
from companion.core.tools import ToolRegistry
from companion.utils.formatting import print_error, print_info

tools_app = typer.Typer()
console = Console()


def _load_registry(config_file: Path | None) -> ToolRegistry:
    if not config_file:
        from companion.main import app

        config_file = app.state.config_file

    config = config_manager.load_config(config_file)
    return ToolRegistry(config.tools).initialize()


@tools_app.command("list")
def list_tools(
    config_file: Path | None = typer.Option(
        None, "--file", "-f", help="Configuration file to use"
    ),
):
    """List the tools the model may call"""
    try:
        registry = _load_registry(config_file)
    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e

    names = registry.list_tool_names()
    if not names:
        print_info("No tools enabled")
        return

    table = Table(title=f"Available Tools ({len(names)})")
    table.add_column("Name", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Required", style="yellow")
    table.add_column("Description", style="white")

    for name in names:
        tool_def = registry.get_tool_info(name)
        table.add_row(
            name,
            tool_def.category.value,
            ", ".join(tool_def.required_arguments) or "-",
            tool_def.description,
        )

    console.print(table)


@tools_app.command("info")
def tool_info(
    name: str = typer.Argument(..., help="Tool name"),
    config_file: Path | None = typer.Option(
        None, "--file", "-f", help="Configuration file to use"
    ),
):
    """Show the declaration of one tool"""
    try:
        registry = _load_registry(config_file)
    except ConfigError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1) from e

    tool_def = registry.get_tool_info(name)
    if tool_def is None:
        print_error(f"Tool '{name}' not found")
        raise typer.Exit(1)

    lines = [
        f"[white]Description:[/white] {tool_def.description}",
        f"[white]Category:[/white] {tool_def.category.value}",
        f"[white]Tags:[/white] {', '.join(tool_def.tags) or '-'}",
        "",
        "[cyan]Declaration:[/cyan]",
        json.dumps(tool_def.to_function_declaration(), indent=2),
    ]
    for example in tool_def.examples:
        lines.append("")
        lines.append(f"[cyan]Example:[/cyan] {example.description}")
        lines.append(f"  arguments: {json.dumps(example.arguments)}")
        if example.expected_result:
            lines.append(f"  result: {example.expected_result}")

    console.print(Panel("\n".join(lines), title=tool_def.name, border_style="blue"))


@tools_app.callback(invoke_without_command=True)
def tools_callback(ctx: typer.Context):
    """Tools management commands"""
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()
