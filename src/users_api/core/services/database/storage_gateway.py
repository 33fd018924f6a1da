"""Storage gateway: the single shared handle to the relational store."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger
from sqlalchemy import Engine, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlalchemy.sql import Executable
from sqlmodel import SQLModel, create_engine

from src.users_api.runtime.config.config_data import DatabaseConfig

UNIQUE_VIOLATION = "UNIQUE_VIOLATION"
CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"
UNKNOWN = "UNKNOWN"

# Native codes reported by sqlite3 (Python 3.11+) and Postgres drivers
_UNIQUE_NATIVE_CODES = frozenset(
    {"SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY", "23505"}
)

Params = Mapping[str, Any] | None


class StorageError(Exception):
    """Base class for failures raised by the storage gateway."""


class StorageConnectionError(StorageError):
    """The underlying store could not be opened."""


class QueryError(StorageError):
    """A statement failed.

    ``code`` is one of ``UNIQUE_VIOLATION``, ``CONSTRAINT_VIOLATION`` or
    ``UNKNOWN``; ``native_code`` is the driver's own error code when known.
    """

    def __init__(
        self, message: str, code: str = UNKNOWN, native_code: str | None = None
    ) -> None:
        super().__init__(message)
        self.code = code
        self.native_code = native_code


@dataclass(frozen=True)
class ExecuteResult:
    """Outcome of a data-modifying statement."""

    last_id: int | None
    rowcount: int


class StorageGateway:
    """Owns the engine for the configured database.

    The engine is created lazily on first use (or explicitly with
    :meth:`open`) and released with :meth:`close`. Each primitive runs its
    statement in its own short transaction; there is no multi-statement
    transaction support.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        self._config = config
        self._engine: Engine | None = None
        self._schema_ready = False

    @property
    def url(self) -> str:
        return self._config.url

    @property
    def backend(self) -> str:
        return self._config.backend

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    # ── Lifecycle ─────────────────────────────────────────

    def open(self) -> None:
        """Create the engine and verify that the store is reachable.

        Raises:
            StorageConnectionError: If the database cannot be opened.
        """
        if self._engine is not None:
            return

        logger.info("Opening {} database", self.backend)
        try:
            if self._config.file_path:
                Path(self._config.file_path).parent.mkdir(parents=True, exist_ok=True)
            engine = create_engine(self._config.url, **self._engine_kwargs())
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except (OSError, SQLAlchemyError) as e:
            logger.error(
                "Failed to open database",
                extra={"error_type": type(e).__name__, "error_message": str(e)},
            )
            raise StorageConnectionError(f"Could not open database: {e}") from e

        self._engine = engine
        logger.info("Database connection established")

    def close(self) -> None:
        """Dispose of the engine and every pooled connection."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._schema_ready = False
        logger.info("Database connection closed")

    def ensure_ready(self) -> None:
        """Open the store and apply the schema if that has not happened yet."""
        if self._engine is None:
            self.open()
        if not self._schema_ready:
            self.create_schema()

    def _engine_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"echo": self._config.echo}
        if self.backend == "sqlite":
            kwargs["connect_args"] = {
                "check_same_thread": False,  # handlers run in a thread pool
                "timeout": self._config.timeout,
            }
            if self._config.file_path is None:
                # In-memory databases live as long as their single connection
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True
        return kwargs

    def _require_engine(self) -> Engine:
        if self._engine is None:
            self.open()
        assert self._engine is not None
        return self._engine

    # ── Schema ────────────────────────────────────────────

    def create_schema(self) -> None:
        """Create the users table and its indexes if they do not exist."""
        from src.users_api.entities.user.table import UserTable  # noqa: F401

        engine = self._require_engine()
        try:
            SQLModel.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise self._query_error(e) from e
        self._schema_ready = True
        logger.info("Database schema ready")

    def drop_schema(self) -> None:
        """Drop the users table."""
        from src.users_api.entities.user.table import UserTable

        engine = self._require_engine()
        try:
            SQLModel.metadata.drop_all(engine, tables=[UserTable.__table__])
        except SQLAlchemyError as e:
            raise self._query_error(e) from e
        self._schema_ready = False
        logger.warning("Database schema dropped")

    # ── Primitives ────────────────────────────────────────

    def execute(self, statement: Executable, params: Params = None) -> ExecuteResult:
        """Run an INSERT/UPDATE/DELETE/DDL statement and commit it.

        Returns:
            The generated primary key (inserts only) and the affected row count.

        Raises:
            QueryError: If the statement fails.
        """
        engine = self._require_engine()
        try:
            with engine.begin() as connection:
                result = connection.execute(statement, params)
                return ExecuteResult(
                    last_id=self._last_id(result), rowcount=result.rowcount
                )
        except SQLAlchemyError as e:
            raise self._query_error(e) from e

    def fetch_one(self, statement: Executable, params: Params = None) -> dict[str, Any] | None:
        """Return the first row of ``statement`` as a mapping, or ``None``."""
        engine = self._require_engine()
        try:
            with engine.connect() as connection:
                row = connection.execute(statement, params).mappings().first()
        except SQLAlchemyError as e:
            raise self._query_error(e) from e
        return dict(row) if row is not None else None

    def fetch_many(self, statement: Executable, params: Params = None) -> list[dict[str, Any]]:
        """Return every row of ``statement`` as mappings, in result order."""
        engine = self._require_engine()
        try:
            with engine.connect() as connection:
                rows = connection.execute(statement, params).mappings().all()
        except SQLAlchemyError as e:
            raise self._query_error(e) from e
        return [dict(row) for row in rows]

    # ── Monitoring ────────────────────────────────────────

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            engine = self._require_engine()
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except (StorageError, SQLAlchemyError) as e:
            logger.error(
                "Database health check failed",
                extra={"error_type": type(e).__name__, "error_message": str(e)},
            )
            return False

    def get_pool_status(self) -> dict[str, Any]:
        """Get current connection pool status for monitoring."""
        if self._engine is None:
            return {"open": False}
        pool = self._engine.pool
        return {
            "open": True,
            "class": type(pool).__name__,
            "size": getattr(pool, "size", lambda: 0)(),
            "checked_in": getattr(pool, "checkedin", lambda: 0)(),
            "checked_out": getattr(pool, "checkedout", lambda: 0)(),
            "overflow": getattr(pool, "overflow", lambda: 0)(),
        }

    # ── Helpers ───────────────────────────────────────────

    @staticmethod
    def _last_id(result: CursorResult) -> int | None:
        context = result.context
        if not context.isinsert or context.executemany:
            return None
        primary_key = result.inserted_primary_key
        if primary_key and primary_key[0] is not None:
            return int(primary_key[0])
        return None

    @staticmethod
    def _query_error(error: SQLAlchemyError) -> QueryError:
        original = getattr(error, "orig", None)
        native_code = (
            getattr(original, "sqlite_errorname", None)
            or getattr(original, "pgcode", None)
            or getattr(original, "sqlstate", None)
        )

        code = UNKNOWN
        if isinstance(error, IntegrityError):
            detail = str(original or error).lower()
            if native_code in _UNIQUE_NATIVE_CODES or "unique" in detail:
                code = UNIQUE_VIOLATION
            else:
                code = CONSTRAINT_VIOLATION

        logger.error(
            "Database statement failed",
            extra={
                "error_type": type(error).__name__,
                "code": code,
                "native_code": native_code,
            },
        )
        return QueryError(str(original or error), code=code, native_code=native_code)
