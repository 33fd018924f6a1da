"""User management CLI commands."""

import typer
from rich.prompt import Confirm
from rich.table import Table

from src.users_api.entities.user import User

from ._common import console, open_repository

users_app = typer.Typer(help="Inspect and manage user records")


def _users_table(title: str, users: list[User]) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("First Name", style="magenta")
    table.add_column("Last Name", style="magenta")
    table.add_column("Email", style="blue")
    table.add_column("Phone")
    table.add_column("Country", style="green")
    table.add_column("Created", style="yellow")

    for user in users:
        table.add_row(
            str(user.id),
            user.first_name,
            user.last_name,
            user.email,
            user.phone or "",
            user.country or "",
            user.created_at.strftime("%Y-%m-%d %H:%M"),
        )
    return table


@users_app.command("list")
def list_users(
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
    limit: int | None = typer.Option(None, "--limit", "-l", help="Page size"),
    search: str | None = typer.Option(None, "--search", "-s", help="Search term"),
) -> None:
    """List users, newest first."""
    with open_repository() as repository:
        result = repository.search(search, page, limit)

    if not result.users:
        console.print("[yellow]No users found[/yellow]")
        return

    meta = result.pagination
    title = f"Users (page {meta.current_page}/{meta.total_pages})"
    console.print(_users_table(title, result.users))
    console.print(f"\n[green]{meta.total_count} users in total[/green]")


@users_app.command("show")
def show_user(user_id: int = typer.Argument(..., help="User ID")) -> None:
    """Show a single user."""
    with open_repository() as repository:
        user = repository.find_by_id(user_id)
    console.print(_users_table(f"User #{user.id}", [user]))


@users_app.command("add")
def add_user(
    first_name: str = typer.Option(..., "--first-name", "-f", help="First name"),
    last_name: str = typer.Option(..., "--last-name", "-l", help="Last name"),
    email: str = typer.Option(..., "--email", "-e", help="Email address"),
    phone: str | None = typer.Option(None, "--phone", help="Phone number"),
    country: str | None = typer.Option(None, "--country", "-c", help="Country"),
) -> None:
    """Create a new user."""
    fields = {"first_name": first_name, "last_name": last_name, "email": email}
    if phone is not None:
        fields["phone"] = phone
    if country is not None:
        fields["country"] = country

    with open_repository() as repository:
        user = repository.create(fields)
    console.print(f"[green]✅ Created user #{user.id} ({user.email})[/green]")


@users_app.command("delete")
def delete_user(
    user_id: int = typer.Argument(..., help="User ID to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete a user."""
    if not force and not Confirm.ask(f"Delete user #{user_id}?"):
        console.print("[yellow]Deletion cancelled[/yellow]")
        raise typer.Exit(code=0)

    with open_repository() as repository:
        result = repository.delete(user_id)
    console.print(f"[green]✅ Deleted user #{result.user.id} ({result.user.email})[/green]")
