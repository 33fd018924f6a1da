from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel, ConfigDict
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Current time in UTC, the only clock used for record timestamps."""
    return datetime.now(UTC)


class Entity(BaseModel):
    """Base entity class with a store-assigned integer identifier."""

    model_config = ConfigDict(from_attributes=True)

    id: int = PydanticField(description="Unique identifier assigned by the store")

    created_at: datetime = PydanticField(description="Creation timestamp (UTC)")
    updated_at: datetime = PydanticField(description="Last modification timestamp (UTC)")


class EntityTable(SQLModel, table=False):
    """Base table with an auto-incremented integer primary key and timestamps."""

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="Unique identifier for the entity",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_column_kwargs={"server_default": sa.func.now()},
    )
