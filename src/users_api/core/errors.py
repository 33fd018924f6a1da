"""Error taxonomy shared by the repository and the HTTP layer.

Every repository operation fails with exactly one of the subclasses of
:class:`UsersApiError`; storage-layer exceptions never escape it.
"""

from __future__ import annotations

from typing import Any


class UsersApiError(Exception):
    """Base class for all errors raised by the data-access layer."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message}


class ValidationError(UsersApiError):
    """Input failed a shape or constraint check.

    ``details`` maps a field name to the violation message for that field.
    """

    default_message = "Validation failed"

    def __init__(
        self, message: str | None = None, details: dict[str, str] | None = None
    ) -> None:
        super().__init__(message)
        self.details = dict(details) if details else None

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(UsersApiError):
    """No record matches the requested identity."""

    default_message = "User not found"


class DuplicateEntryError(UsersApiError):
    """A unique constraint (the email address) was violated."""

    default_message = "Email address already exists"


class DatabaseError(UsersApiError):
    """Any other storage failure."""

    default_message = "Database operation failed"
