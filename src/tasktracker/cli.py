"""Command-line entry point."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Annotated, Optional

import typer
from rich.console import Console

app = typer.Typer(
    name="tasktracker",
    help="Task tracker services: auth, boards/tasks and live board updates",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()
error_console = Console(stderr=True)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Service(StrEnum):
    ALL = "all"
    AUTH = "auth"
    TASKS = "tasks"


@app.command("serve")
def serve(
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
    service: Annotated[
        Service, typer.Option("--service", "-s", help="Which service to run")
    ] = Service.ALL,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
):
    """Run the HTTP/WebSocket server."""
    import uvicorn

    from .web.app import SERVICES, create_app
    from .web.config import WebConfig

    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)

    try:
        config = WebConfig.load()
    except RuntimeError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from None

    services = SERVICES if service == Service.ALL else (service.value,)
    application = create_app(config, services=services)

    bind_host = host or config.host
    bind_port = port or config.port
    console.print(
        f"[green]v[/green] Starting {', '.join(services)} on http://{bind_host}:{bind_port}"
    )
    uvicorn.run(
        application,
        host=bind_host,
        port=bind_port,
        log_config=None,
        ws_max_size=config.ws_max_size,
        # Protocol-level ping/pong; clients answer these without app code.
        ws_ping_interval=config.ws_ping_interval,
        ws_ping_timeout=config.ws_write_timeout,
    )


@app.command("version")
def version():
    """Show version information."""
    from . import __version__

    console.print(f"tasktracker version: {__version__}")


if __name__ == "__main__":
    app()
