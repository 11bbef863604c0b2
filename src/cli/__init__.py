"""Main CLI application module."""

import typer

from .db_commands import db_app
from .server_commands import serve
from .user_commands import users_app
from .utils import quiet_logging

# Create the main CLI application
app = typer.Typer(
    help="📚 MyLibrary CLI - run the API and manage its data",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.callback()
def _setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show service logs"),
) -> None:
    if not verbose:
        quiet_logging()


# Register commands
app.command(name="serve")(serve)
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
