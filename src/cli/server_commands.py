"""Application server CLI commands."""

import typer
import uvicorn
from rich.panel import Panel

from src.mylibrary.runtime.context import get_config

from .utils import console


def serve(
    host: str | None = typer.Option(None, help="Host to bind the server to"),
    port: int | None = typer.Option(None, help="Port to bind the server to"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
    log_level: str = typer.Option(
        "info", help="Log level (debug, info, warning, error, critical)"
    ),
) -> None:
    """
    🚀 Start the MyLibrary API server.

    Host and port default to the ``app`` section of the configuration.
    """
    app_config = get_config().app
    host = host or app_config.host
    port = port or app_config.port

    console.print(
        Panel.fit(
            "[bold green]Starting MyLibrary API[/bold green]",
            border_style="green",
        )
    )
    console.print(f"[blue]Server will be available at:[/blue] http://{host}:{port}")
    console.print("[dim]Press Ctrl+C to stop the server[/dim]")

    uvicorn.run(
        "src.mylibrary.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        reload_dirs=["src"] if reload else None,
        log_level=log_level,
        access_log=False,  # We handle access logging in middleware
    )
