"""Helpers shared by the CLI command groups."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from rich.console import Console

from src.users_api.core.errors import UsersApiError
from src.users_api.core.services import StorageError, StorageGateway
from src.users_api.entities.user import UserRepository
from src.users_api.runtime.context import get_config

console = Console()


@contextmanager
def open_gateway() -> Iterator[StorageGateway]:
    """Open the configured database for the duration of a command."""
    gateway = StorageGateway(get_config().database)
    try:
        yield gateway
    except (UsersApiError, StorageError) as e:
        console.print(f"[red]❌ {e}[/red]")
        raise typer.Exit(code=1) from e
    finally:
        gateway.close()


@contextmanager
def open_repository() -> Iterator[UserRepository]:
    config = get_config()
    with open_gateway() as gateway:
        yield UserRepository(gateway, config.pagination, config.stats)
