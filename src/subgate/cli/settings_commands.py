"""
Plugin settings CLI commands for subgate.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from subgate.container import container
from subgate.exceptions import SubgateError, UnknownSettingError
from subgate.models.flags import normalize_flag
from subgate.plugin.settings import SETTINGS_BY_NAME

logger = logging.getLogger(__name__)

console = Console()

settings_app = typer.Typer(
    name="settings",
    help="Plugin settings management",
    no_args_is_help=True,
)


def _settings_table(values: Dict[str, Any]) -> Table:
    table = Table(title="Plugin Settings", show_header=True, header_style="bold blue")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Description", style="dim")
    for name, value in values.items():
        definition = SETTINGS_BY_NAME.get(name)
        table.add_row(
            name,
            "[green]on[/green]" if value is True else "[yellow]off[/yellow]",
            definition.description_html if definition else "",
        )
    return table


@settings_app.command("show")
def show_settings() -> None:
    """Show every plugin setting with its current value."""

    async def run_show() -> Dict[str, Any]:
        return await container.settings_manager.get_all_settings()

    try:
        values = asyncio.run(run_show())
    except SubgateError as e:
        console.print(
            Panel(f"[red]Error reading settings: {e.message}[/red]", title="Error", border_style="red")
        )
        raise typer.Exit(code=1)

    console.print(_settings_table(values))


@settings_app.command("set")
def set_setting(
    name: str = typer.Argument(..., help="Setting name, e.g. global-subscriber-only"),
    value: str = typer.Argument(..., help="on/off, true/false or 1/0"),
) -> None:
    """Change one plugin setting."""
    normalized = normalize_flag(value)
    if normalized is None:
        console.print(f"[red]Invalid value {value!r}: use on/off, true/false or 1/0[/red]")
        raise typer.Exit(code=1)

    async def run_set() -> Dict[str, Any]:
        return await container.settings_manager.update_settings({name: normalized})

    try:
        values = asyncio.run(run_set())
    except UnknownSettingError as e:
        console.print(f"[red]{e.message}[/red]")
        console.print(f"Available settings: {', '.join(SETTINGS_BY_NAME)}")
        raise typer.Exit(code=1)
    except SubgateError as e:
        console.print(
            Panel(f"[red]Error updating settings: {e.message}[/red]", title="Error", border_style="red")
        )
        raise typer.Exit(code=1)

    console.print(_settings_table(values))
