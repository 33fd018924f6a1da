"""Main CLI application module."""

import typer
from rich.table import Table

from src.users_api.runtime.context import get_config

from ._common import console, open_repository
from .db_commands import db_app
from .user_commands import users_app

# Create the main CLI application
app = typer.Typer(
    help="Users API - service and database management",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(db_app, name="db")
app.add_typer(users_app, name="users")


@app.command("stats")
def show_stats() -> None:
    """Show user totals and the per-country breakdown."""
    with open_repository() as repository:
        stats = repository.get_stats()

    console.print(f"[bold]Total users:[/bold] {stats.total_users}")
    console.print(f"[bold]Recent registrations:[/bold] {len(stats.recent_registrations)}")

    if stats.users_by_country:
        table = Table(title="Users by country")
        table.add_column("Country", style="green")
        table.add_column("Users", style="cyan", justify="right")
        for country, count in stats.users_by_country.items():
            table.add_row(country, str(count))
        console.print(table)


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "src.users_api.api.http.app:app",
        host=host or config.app.host,
        port=port or config.app.port,
        reload=reload,
        access_log=False,
    )


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
