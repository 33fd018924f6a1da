"""User repository: CRUD, pagination, search and statistics over users."""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from datetime import timedelta
from typing import Any, TypeVar

from loguru import logger
from sqlalchemy import ColumnElement, Update, delete, func, insert, or_, update
from sqlmodel import col, select

from src.users_api.core.errors import (
    DatabaseError,
    DuplicateEntryError,
    NotFoundError,
    UsersApiError,
    ValidationError,
)
from src.users_api.core.models import PaginationMeta
from src.users_api.core.services.database.storage_gateway import (
    CONSTRAINT_VIOLATION,
    UNIQUE_VIOLATION,
    QueryError,
    StorageError,
    StorageGateway,
)
from src.users_api.entities.core._base import utc_now
from src.users_api.runtime.config.config_data import PaginationConfig, StatsConfig

from .entity import User
from .results import DeleteResult, UserPage, UserStats
from .table import UserTable
from .validation import normalize_user_fields, sanitize_text, validate_user_fields

# Largest identity representable in a 64-bit INTEGER column
MAX_USER_ID = 2**63 - 1

_SEARCH_COLUMNS = (
    UserTable.first_name,
    UserTable.last_name,
    UserTable.email,
    UserTable.country,
)

F = TypeVar("F", bound=Callable[..., Any])


def _translate_storage_error(error: StorageError) -> UsersApiError:
    if isinstance(error, QueryError):
        if error.code == UNIQUE_VIOLATION:
            return DuplicateEntryError("Email address already exists")
        if error.code == CONSTRAINT_VIOLATION:
            return ValidationError("Invalid data provided")
    return DatabaseError("Database operation failed")


def storage_operation(method: F) -> F:
    """Make sure the store is ready and map storage failures to the error taxonomy."""

    @functools.wraps(method)
    def wrapper(self: UserRepository, *args: Any, **kwargs: Any) -> Any:
        try:
            self._gateway.ensure_ready()
            return method(self, *args, **kwargs)
        except StorageError as e:
            raise _translate_storage_error(e) from e

    return wrapper  # type: ignore[return-value]


class UpdateBuilder:
    """Accumulates column assignments for a single-row UPDATE of ``users``."""

    IMMUTABLE_COLUMNS = frozenset({"id", "created_at"})

    def __init__(self) -> None:
        self._assignments: dict[str, Any] = {}

    def set(self, column: str, value: Any) -> UpdateBuilder:
        if column in self.IMMUTABLE_COLUMNS:
            raise ValueError(f"Column '{column}' cannot be updated")
        if column not in UserTable.__table__.columns:
            raise ValueError(f"Unknown column '{column}'")
        self._assignments[column] = value
        return self

    def touch(self) -> UpdateBuilder:
        """Refresh the modification timestamp."""
        self._assignments["updated_at"] = utc_now()
        return self

    @property
    def columns(self) -> list[str]:
        return list(self._assignments)

    @property
    def is_empty(self) -> bool:
        return not self._assignments

    def build(self, user_id: int) -> Update:
        if self.is_empty:
            raise ValueError("No columns to update")
        return (
            update(UserTable)
            .where(col(UserTable.id) == user_id)
            .values(**self._assignments)
        )


class UserRepository:
    """Data-access layer for users.

    Every public operation validates its input, talks to the store through
    the injected :class:`StorageGateway` and raises only errors from
    :mod:`src.users_api.core.errors`.
    """

    def __init__(
        self,
        gateway: StorageGateway,
        pagination: PaginationConfig | None = None,
        stats: StatsConfig | None = None,
    ) -> None:
        self._gateway = gateway
        self._pagination = pagination or PaginationConfig()
        self._stats = stats or StatsConfig()

    # ── CREATE ────────────────────────────────────────────

    @storage_operation
    def create(self, fields: Mapping[str, Any]) -> User:
        """Validate, normalize and insert a new user.

        Returns:
            The stored record, read back so that it carries the generated
            identity and timestamps.

        Raises:
            ValidationError: If a field violates its constraints.
            DuplicateEntryError: If the email address is already taken.
        """
        self._require_mapping(fields)
        errors = validate_user_fields(fields)
        if errors:
            raise ValidationError("Validation failed", errors)

        values = normalize_user_fields(fields)
        now = utc_now()
        result = self._gateway.execute(
            insert(UserTable).values(**values, created_at=now, updated_at=now)
        )
        if result.last_id is None:
            raise DatabaseError("Database operation failed")

        logger.info("Created user #{}", result.last_id)
        return self._get(result.last_id)

    # ── READ ──────────────────────────────────────────────

    @storage_operation
    def find_by_id(self, user_id: Any) -> User:
        """Fetch a single user.

        Raises:
            ValidationError: If ``user_id`` is not a positive integer.
            NotFoundError: If no user has that identity.
        """
        return self._get(self._parse_id(user_id))

    @storage_operation
    def find_all(self, page: int | None = None, limit: int | None = None) -> UserPage:
        """List users, newest first."""
        page, limit = self._check_paging(page, limit)
        users, pagination = self._paginate(None, page, limit)
        return UserPage(users=users, pagination=pagination)

    @storage_operation
    def search(
        self, term: str | None, page: int | None = None, limit: int | None = None
    ) -> UserPage:
        """Case-insensitive substring search over names, email and country.

        A missing or blank term lists every user, exactly like :meth:`find_all`.
        """
        if term is None or not str(term).strip():
            return self.find_all(page, limit)

        needle = str(term).strip()
        page, limit = self._check_paging(page, limit)
        condition = or_(
            *(col(column).icontains(needle, autoescape=True) for column in _SEARCH_COLUMNS)
        )
        users, pagination = self._paginate(condition, page, limit)
        return UserPage(users=users, pagination=pagination, query=needle)

    @storage_operation
    def find_by_country(
        self, country: str | None, page: int | None = None, limit: int | None = None
    ) -> UserPage:
        """List users whose country matches exactly.

        Raises:
            ValidationError: If ``country`` is missing or blank.
        """
        if not isinstance(country, str) or not country.strip():
            raise ValidationError("Country name is required")

        name = sanitize_text(country)
        page, limit = self._check_paging(page, limit)
        users, pagination = self._paginate(col(UserTable.country) == name, page, limit)
        return UserPage(users=users, pagination=pagination, country=name)

    @storage_operation
    def get_stats(self) -> UserStats:
        """Total users, users per country and the latest registrations."""
        total_users = self._count(None)

        country_count = func.count().label("count")
        country_rows = self._gateway.fetch_many(
            select(UserTable.country, country_count)
            .where(col(UserTable.country).is_not(None))
            .group_by(UserTable.country)
            .order_by(country_count.desc(), col(UserTable.country).asc())
        )

        cutoff = utc_now() - timedelta(days=self._stats.recent_days)
        recent_rows = self._gateway.fetch_many(
            select(UserTable)
            .where(col(UserTable.created_at) >= cutoff)
            .order_by(*self._newest_first())
            .limit(self._stats.recent_limit)
        )

        return UserStats(
            total_users=total_users,
            users_by_country={row["country"]: row["count"] for row in country_rows},
            recent_registrations=[User.model_validate(row) for row in recent_rows],
        )

    # ── UPDATE ────────────────────────────────────────────

    @storage_operation
    def update(self, user_id: Any, fields: Mapping[str, Any]) -> User:
        """Change the supplied fields of an existing user.

        Omitted fields keep their value; a blank optional field is cleared.

        Raises:
            NotFoundError: If the user does not exist.
            ValidationError: If a supplied field is invalid or nothing would change.
            DuplicateEntryError: If the new email address is already taken.
        """
        parsed_id = self._parse_id(user_id)
        self._get(parsed_id)

        self._require_mapping(fields)
        errors = validate_user_fields(fields, partial=True)
        if errors:
            raise ValidationError("Validation failed", errors)

        builder = UpdateBuilder()
        for column, value in normalize_user_fields(fields).items():
            builder.set(column, value)
        if builder.is_empty:
            raise ValidationError("No valid fields to update")

        result = self._gateway.execute(builder.touch().build(parsed_id))
        if result.rowcount == 0:
            raise NotFoundError("User not found")

        logger.info("Updated user #{} ({})", parsed_id, ", ".join(builder.columns))
        return self._get(parsed_id)

    # ── DELETE ────────────────────────────────────────────

    @storage_operation
    def delete(self, user_id: Any) -> DeleteResult:
        """Hard-delete a user.

        Returns:
            Confirmation carrying the record as it was before deletion.

        Raises:
            NotFoundError: If the user does not exist, including when it
                disappeared between the existence check and the delete.
        """
        parsed_id = self._parse_id(user_id)
        user = self._get(parsed_id)

        result = self._gateway.execute(
            delete(UserTable).where(col(UserTable.id) == parsed_id)
        )
        if result.rowcount == 0:
            raise NotFoundError("User not found")

        logger.info("Deleted user #{}", parsed_id)
        return DeleteResult(deleted=True, user=user)

    # ── HELPERS ───────────────────────────────────────────

    def _get(self, user_id: int) -> User:
        row = self._gateway.fetch_one(
            select(UserTable).where(col(UserTable.id) == user_id)
        )
        if row is None:
            raise NotFoundError("User not found")
        return User.model_validate(row)

    def _count(self, condition: ColumnElement[bool] | None) -> int:
        statement = select(func.count().label("total")).select_from(UserTable)
        if condition is not None:
            statement = statement.where(condition)
        row = self._gateway.fetch_one(statement)
        return int(row["total"]) if row else 0

    def _paginate(
        self, condition: ColumnElement[bool] | None, page: int, limit: int
    ) -> tuple[list[User], PaginationMeta]:
        pagination = PaginationMeta.build(page, limit, self._count(condition))

        statement = select(UserTable)
        if condition is not None:
            statement = statement.where(condition)
        rows = self._gateway.fetch_many(
            statement.order_by(*self._newest_first())
            .limit(limit)
            .offset(pagination.offset)
        )
        return [User.model_validate(row) for row in rows], pagination

    @staticmethod
    def _newest_first() -> tuple[Any, ...]:
        return col(UserTable.created_at).desc(), col(UserTable.id).desc()

    def _check_paging(self, page: int | None, limit: int | None) -> tuple[int, int]:
        page = 1 if page is None else page
        limit = self._pagination.default_page_size if limit is None else limit
        max_size = self._pagination.max_page_size

        errors: dict[str, str] = {}
        if not _is_int(page) or page < 1:
            errors["page"] = "Page must be a positive integer"
        if not _is_int(limit) or not 1 <= limit <= max_size:
            errors["limit"] = f"Limit must be between 1 and {max_size}"
        elif "page" not in errors and (page - 1) * limit > MAX_USER_ID:
            # Row offsets are bound as signed 64-bit integers
            errors["page"] = "Page is out of range"
        if errors:
            raise ValidationError("Invalid pagination parameters", errors)
        return page, limit

    @staticmethod
    def _parse_id(user_id: Any) -> int:
        parsed: int | None = None
        if _is_int(user_id):
            parsed = user_id
        elif isinstance(user_id, str) and user_id.strip().isdecimal():
            parsed = int(user_id.strip())

        if parsed is None or not 1 <= parsed <= MAX_USER_ID:
            raise ValidationError("Valid user ID is required")
        return parsed

    @staticmethod
    def _require_mapping(fields: Any) -> None:
        if not isinstance(fields, Mapping):
            raise ValidationError("User data must be an object")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
