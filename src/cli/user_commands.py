"""User account management CLI commands."""

import typer
from rich.prompt import Confirm
from rich.table import Table

from src.mylibrary.core.errors import ConfigurationError, MyLibraryError, ValidationFailed
from src.mylibrary.core.services import CredentialService, UserManagementService
from src.mylibrary.entities.core.user import UserRepository
from src.mylibrary.runtime.context import get_config

from .utils import console, get_database_service

# Create the users subcommand app
users_app = typer.Typer(help="Manage MyLibrary user accounts", no_args_is_help=True)


@users_app.command("list")
def list_users() -> None:
    """List all users together with the size of their library."""
    database_service = get_database_service()
    try:
        with database_service.session_scope() as session:
            users = UserRepository(session).list_with_book_counts()
    finally:
        database_service.dispose()

    if not users:
        console.print("[yellow]No users found[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("ID", style="cyan")
    table.add_column("Username", style="green")
    table.add_column("Email", style="blue")
    table.add_column("Name", style="magenta")
    table.add_column("Books", style="yellow", justify="right")

    for user, book_count in users:
        name = " ".join(part for part in (user.first_name, user.last_name) if part)
        table.add_row(user.id, user.username, user.email, name, str(book_count))

    console.print(table)
    console.print(f"\n[green]Found {len(users)} users[/green]")


@users_app.command("add")
def add_user(
    username: str = typer.Argument(..., help="Username for the new user"),
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    password: str = typer.Option(
        ..., "--password", "-p", help="Password", prompt=True, hide_input=True
    ),
    first_name: str = typer.Option("", "--first-name", "-f", help="First name"),
    last_name: str = typer.Option("", "--last-name", "-l", help="Last name"),
) -> None:
    """Register a new user, applying the same rules as the API."""
    try:
        credential_service = CredentialService(get_config().auth)
    except ConfigurationError as e:
        console.print(f"[red]❌ {e.message}[/red]")
        raise typer.Exit(code=1) from e

    database_service = get_database_service()
    session = database_service.get_session()
    try:
        result = UserManagementService(credential_service, session).register(
            {
                "username": username,
                "email": email,
                "password": password,
                "first_name": first_name,
                "last_name": last_name,
            }
        )
    except ValidationFailed as e:
        console.print("[red]❌ Invalid user data[/red]")
        for error in e.errors:
            console.print(f"  [red]{error.field}[/red]: {error.message}")
        raise typer.Exit(code=1) from e
    except MyLibraryError as e:
        console.print(f"[red]❌ {e.outward_message()}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        session.close()
        database_service.dispose()

    console.print(f"[green]✅ Successfully created user '{result.user.username}'[/green]")


@users_app.command("delete")
def delete_user(
    username: str = typer.Argument(..., help="Username to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete a user and every book they own."""
    database_service = get_database_service()
    try:
        with database_service.session_scope() as session:
            user = UserRepository(session).find_by_username_or_email(username=username)

        if user is None:
            console.print(f"[red]❌ User '{username}' not found[/red]")
            raise typer.Exit(code=1)

        if not force and not Confirm.ask(
            f"Delete user '{username}' and all of their books?"
        ):
            console.print("[yellow]Deletion cancelled[/yellow]")
            return

        with database_service.session_scope() as session:
            UserRepository(session).delete(user.id)
    finally:
        database_service.dispose()

    console.print(f"[green]✅ Deleted user '{username}'[/green]")
