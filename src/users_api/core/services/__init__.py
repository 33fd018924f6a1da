"""Core services exports."""

from src.users_api.core.services.database.storage_gateway import (
    ExecuteResult,
    QueryError,
    StorageConnectionError,
    StorageError,
    StorageGateway,
)

__all__ = [
    "ExecuteResult",
    "QueryError",
    "StorageConnectionError",
    "StorageError",
    "StorageGateway",
]
