"""
Per-video flag CLI commands for subgate.

Inspect and change the subscriber-only and deny-download flags stored for
a video, outside of the video update flow.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from subgate.container import container
from subgate.exceptions import SubgateError
from subgate.models.flags import VideoFlags

logger = logging.getLogger(__name__)

console = Console()

flags_app = typer.Typer(
    name="flags",
    help="Per-video flag management",
    no_args_is_help=True,
)


def _format_flag(value: Optional[bool]) -> str:
    if value is None:
        return "[dim]unset[/dim]"
    return "[green]on[/green]" if value else "[yellow]off[/yellow]"


def _flags_table(uuid: str, flags: VideoFlags) -> Table:
    table = Table(title=f"Flags for {uuid}", show_header=True, header_style="bold blue")
    table.add_column("Flag", style="cyan")
    table.add_column("Value")
    table.add_row("subscriber-only", _format_flag(flags.subscriber_only))
    table.add_row("deny-download", _format_flag(flags.deny_download))
    return table


@flags_app.command("show")
def show_flags(
    uuid: str = typer.Argument(..., help="Video uuid"),
) -> None:
    """Show the flags stored for a video."""

    async def run_show() -> Optional[VideoFlags]:
        return await container.create_flag_store().get(uuid)

    try:
        flags = asyncio.run(run_show())
    except SubgateError as e:
        console.print(
            Panel(f"[red]Error reading flags: {e.message}[/red]", title="Error", border_style="red")
        )
        raise typer.Exit(code=1)

    if flags is None:
        console.print(
            Panel(
                f"[yellow]No flags stored for video {uuid}[/yellow]",
                title="No Flags",
                border_style="yellow",
            )
        )
        return

    console.print(_flags_table(uuid, flags))


@flags_app.command("set")
def set_flags(
    uuid: str = typer.Argument(..., help="Video uuid"),
    subscriber_only: bool = typer.Option(
        False,
        "--subscriber-only/--no-subscriber-only",
        help="Restrict playback to channel subscribers",
    ),
    deny_download: bool = typer.Option(
        False,
        "--deny-download/--no-deny-download",
        help="Refuse every download of the video",
    ),
) -> None:
    """Store the flags for a video, replacing any previous values."""
    flags = VideoFlags(subscriber_only=subscriber_only, deny_download=deny_download)

    async def run_set() -> None:
        await container.create_flag_store().set(uuid, flags)

    try:
        asyncio.run(run_set())
    except SubgateError as e:
        console.print(
            Panel(f"[red]Error storing flags: {e.message}[/red]", title="Error", border_style="red")
        )
        raise typer.Exit(code=1)

    console.print(_flags_table(uuid, flags))
    console.print("[green]Flags stored[/green]")
