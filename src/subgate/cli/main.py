"""
Main CLI entry point for subgate.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from subgate import __version__
from subgate.cli.commands.api import api_app
from subgate.cli.flag_commands import flags_app
from subgate.cli.settings_commands import settings_app
from subgate.config.logging import configure_logging
from subgate.config.settings import settings

console = Console()

app = typer.Typer(
    name="subgate",
    help="Subscriber-only visibility and download gating",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(flags_app, name="flags", help="Per-video flag commands")
app.add_typer(settings_app, name="settings", help="Plugin settings commands")
app.add_typer(api_app, name="api", help="API server commands")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]subgate[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
) -> None:
    """
    subgate - subscriber-only videos for a video hosting platform.

    Manage per-video flags and plugin settings, and run the API server.
    """
    if version:
        console.print(f"subgate v{__version__}")
        raise typer.Exit(code=0)

    configure_logging(settings.log_level)

    if ctx.invoked_subcommand is None:
        console.print("[yellow]Use 'subgate --help' for available commands[/yellow]")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
