"""Database management CLI commands."""

import typer
from rich.prompt import Confirm

from src.users_api.runtime.context import get_config
from src.users_api.runtime.init_db import init_db, reset_db, seed_sample_data

from ._common import console, open_gateway

db_app = typer.Typer(help="Create, seed and reset the users database")


@db_app.command("init")
def init(
    seed: bool = typer.Option(False, "--seed", help="Also insert the sample users"),
) -> None:
    """Create the users table and its indexes."""
    with open_gateway() as gateway:
        init_db(gateway)
        console.print(f"[green]✅ Database ready at {gateway.url}[/green]")
        if seed:
            inserted = seed_sample_data(gateway)
            console.print(f"[green]✅ Inserted {inserted} sample users[/green]")


@db_app.command("seed")
def seed() -> None:
    """Insert the sample users if the table is empty."""
    with open_gateway() as gateway:
        inserted = seed_sample_data(gateway)
    if inserted:
        console.print(f"[green]✅ Inserted {inserted} sample users[/green]")
    else:
        console.print("[yellow]Database already contains users; nothing seeded[/yellow]")


@db_app.command("reset")
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Drop all users, recreate the schema and reseed it."""
    url = get_config().database.url
    if not yes and not Confirm.ask(f"Delete every user in {url}?"):
        console.print("[yellow]Reset cancelled[/yellow]")
        raise typer.Exit(code=0)

    with open_gateway() as gateway:
        inserted = reset_db(gateway)
    console.print(f"[green]✅ Database reset with {inserted} sample users[/green]")
