"""Entity package: User."""

from .entity import User
from .repository import UpdateBuilder, UserRepository
from .results import DeleteResult, UserPage, UserStats
from .table import UserTable

__all__ = [
    "DeleteResult",
    "UpdateBuilder",
    "User",
    "UserPage",
    "UserRepository",
    "UserStats",
    "UserTable",
]
