"""User database table model."""

from sqlalchemy import Index
from sqlmodel import Field

from src.users_api.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"
    __table_args__ = (
        Index("idx_users_email", "email", unique=True),
        Index("idx_users_country", "country"),
        Index("idx_users_created_at", "created_at"),
        # Identities are never handed out twice, even after deletes.
        {"sqlite_autoincrement": True},
    )

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    email: str = Field(max_length=100)
    phone: str | None = Field(default=None, max_length=30)
    country: str | None = Field(default=None, max_length=50)
