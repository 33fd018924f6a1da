"""Statistics API router: summaries derived from the repository aggregates."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import Field
from starlette.responses import JSONResponse

from src.users_api.api.http.deps import get_app_config, get_user_repository
from src.users_api.api.http.responses import success_response
from src.users_api.core.models import CamelModel
from src.users_api.entities.core import utc_now
from src.users_api.entities.user import User, UserRepository, UserStats
from src.users_api.runtime.config.config_data import ConfigData

router = APIRouter(prefix="/stats", tags=["stats"])


class CountryCount(CamelModel):
    country: str
    count: int


class CountryShare(CountryCount):
    percentage: float = Field(description="Share of all users, in percent")


class StatsSummary(CamelModel):
    """Repository aggregates plus figures derived from them."""

    total_users: int
    total_countries: int
    average_users_per_country: float
    users_by_country: dict[str, int]
    top_countries: list[CountryCount]
    recent_registrations: list[User]
    last_updated: datetime

    @classmethod
    def from_stats(cls, stats: UserStats, top_n: int) -> "StatsSummary":
        total_countries = len(stats.users_by_country)
        average = (
            round(stats.total_users / total_countries, 2) if total_countries else 0.0
        )
        return cls(
            total_users=stats.total_users,
            total_countries=total_countries,
            average_users_per_country=average,
            users_by_country=stats.users_by_country,
            top_countries=[
                CountryCount(country=country, count=count)
                for country, count in list(stats.users_by_country.items())[:top_n]
            ],
            recent_registrations=stats.recent_registrations,
            last_updated=utc_now(),
        )


class CountryBreakdown(CamelModel):
    total_countries: int
    countries: list[CountryShare]

    @classmethod
    def from_stats(cls, stats: UserStats) -> "CountryBreakdown":
        countries = [
            CountryShare(
                country=country,
                count=count,
                percentage=round(count / stats.total_users * 100, 2),
            )
            for country, count in stats.users_by_country.items()
        ]
        return cls(total_countries=len(countries), countries=countries)


class RecentRegistrations(CamelModel):
    recent_registrations: list[User]
    count: int


@router.get("")
def get_statistics(
    repository: UserRepository = Depends(get_user_repository),
    config: ConfigData = Depends(get_app_config),
) -> JSONResponse:
    """Totals, per-country counts, top countries and recent registrations."""
    summary = StatsSummary.from_stats(repository.get_stats(), config.stats.top_countries)
    return success_response(summary, message="Statistics retrieved successfully")


@router.get("/countries")
def get_country_statistics(
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Per-country counts with their share of all users."""
    breakdown = CountryBreakdown.from_stats(repository.get_stats())
    return success_response(
        breakdown, message="Country statistics retrieved successfully"
    )


@router.get("/recent")
def get_recent_registrations(
    limit: Annotated[
        int | None, Query(ge=0, description="Maximum records; 0 means the default")
    ] = None,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Users registered within the recent window, newest first."""
    stats = repository.get_stats()
    recent = stats.recent_registrations[: limit or len(stats.recent_registrations)]
    return success_response(
        RecentRegistrations(recent_registrations=recent, count=len(recent)),
        message="Recent registrations retrieved successfully",
    )
