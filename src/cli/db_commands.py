"""Database management CLI commands."""

import typer

from src.mylibrary.runtime.context import get_config

from .utils import console, get_database_service

db_app = typer.Typer(help="Manage the MyLibrary database", no_args_is_help=True)


@db_app.command("init")
def init_db() -> None:
    """Create all database tables (existing tables are left untouched)."""
    get_database_service().dispose()

    console.print(
        f"[green]✅ Database initialized at {get_config().database.url}[/green]"
    )
