"""Serve the subgate HTTP API (hook dispatch, flag and settings endpoints)."""

from __future__ import annotations

import typer

from subgate.config.settings import settings

APP_PATH = "subgate.api.main:app"

api_app = typer.Typer(
    name="api",
    help="Run the hook and flag API",
    no_args_is_help=True,
)


def server_options(host: str, port: int, production: bool) -> dict[str, object]:
    """Keyword arguments for ``uvicorn.run``."""
    options: dict[str, object] = {"host": host, "port": port}
    if production:
        options.update(workers=2, log_level="warning")
    else:
        options.update(reload=True, log_level=settings.log_level.lower())
    return options


@api_app.command()
def start(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    production: bool = typer.Option(
        False, "--production", help="Two workers, no reload, warning-level logs"
    ),
) -> None:
    """
    Serve the API the host calls to filter lists, resolve videos and check
    downloads.

    Without --production the server reloads on code changes and logs at
    the configured LOG_LEVEL.

    Examples:
        subgate api start
        subgate api start --host 0.0.0.0 -p 9000 --production
    """
    import uvicorn

    uvicorn.run(APP_PATH, **server_options(host, port, production))
