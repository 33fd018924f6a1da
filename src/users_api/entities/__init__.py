"""Entities organized by business concept.

Each entity package keeps its domain model (``entity.py``), persistence
model (``table.py``) and data access layer (``repository.py``) together.
"""

from .user import User, UserRepository, UserTable

__all__ = [
    "User",
    "UserTable",
    "UserRepository",
]
