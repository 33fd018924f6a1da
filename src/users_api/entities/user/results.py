"""Value objects returned by the user repository."""

from pydantic import BaseModel, Field

from src.users_api.core.models import CamelModel, PaginationMeta

from .entity import User


class UserPage(BaseModel):
    """One page of users plus its navigation metadata."""

    users: list[User]
    pagination: PaginationMeta
    query: str | None = Field(default=None, description="Search term, for searches")
    country: str | None = Field(default=None, description="Country, for country filters")


class DeleteResult(BaseModel):
    """Confirmation of a delete with the record as it was before removal."""

    deleted: bool = True
    user: User


class UserStats(CamelModel):
    """Aggregate figures over the whole users table."""

    total_users: int
    users_by_country: dict[str, int] = Field(
        description="Users per country, largest first; users without a country excluded"
    )
    recent_registrations: list[User]
