"""Shared helpers for CLI commands."""

import sys

import typer
from loguru import logger
from rich.console import Console

from src.mylibrary.core.services import DbSessionService
from src.mylibrary.runtime.context import get_config

console = Console()


def quiet_logging() -> None:
    """Keep service logs out of command output unless something goes wrong."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


def get_database_service() -> DbSessionService:
    """Database service for the loaded configuration, with tables in place.

    Exits with code 1 when the database cannot be reached.
    """
    database_service = DbSessionService(get_config())
    if not database_service.health_check():
        database_service.dispose()
        console.print("[red]❌ Database is unreachable[/red]")
        raise typer.Exit(code=1)
    database_service.create_all()
    return database_service
