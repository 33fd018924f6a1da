"""Field validation and normalization for user records.

Validation runs on the raw client payload and reports every violation at
once as a ``field -> message`` map. Normalization runs only on payloads that
passed validation and produces the values that are actually persisted.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

USER_FIELDS = ("first_name", "last_name", "email", "phone", "country")
REQUIRED_FIELDS = ("first_name", "last_name", "email")
OPTIONAL_FIELDS = ("phone", "country")

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
COUNTRY_MAX_LENGTH = 50

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-()]")
_ANGLE_BRACKETS = re.compile(r"[<>]")

_NAME_LABELS = {"first_name": "First name", "last_name": "Last name"}


def sanitize_text(value: str) -> str:
    """Trim surrounding whitespace and drop angle brackets."""
    return _ANGLE_BRACKETS.sub("", value.strip())


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_PATTERN.match(value.strip()))


def is_valid_phone(value: Any) -> bool:
    """Loose international phone check; blank values count as absent."""
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    if not value.strip():
        return True
    return bool(PHONE_PATTERN.match(_PHONE_SEPARATORS.sub("", value)))


def _validate_name(field: str, value: Any) -> str | None:
    label = _NAME_LABELS[field]
    # Lengths apply to the stored value, after brackets are stripped
    if not isinstance(value, str) or len(sanitize_text(value)) < NAME_MIN_LENGTH:
        return f"{label} must be at least {NAME_MIN_LENGTH} characters long"
    if len(sanitize_text(value)) > NAME_MAX_LENGTH:
        return f"{label} cannot exceed {NAME_MAX_LENGTH} characters"
    return None


def _validate_country(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return "Country must be a string"
    if len(sanitize_text(value)) > COUNTRY_MAX_LENGTH:
        return f"Country cannot exceed {COUNTRY_MAX_LENGTH} characters"
    return None


def validate_user_fields(
    fields: Mapping[str, Any], *, partial: bool = False
) -> dict[str, str]:
    """Check user fields against the record constraints.

    Args:
        fields: Raw field values keyed by column name. Unknown keys are ignored.
        partial: ``False`` for creation (all required fields must be present),
            ``True`` for updates (only the supplied fields are checked).

    Returns:
        Mapping of field name to violation message. Empty when valid.
    """
    errors: dict[str, str] = {}

    for field in _NAME_LABELS:
        if partial and field not in fields:
            continue
        message = _validate_name(field, fields.get(field))
        if message:
            errors[field] = message

    if not partial or "email" in fields:
        if not is_valid_email(fields.get("email")):
            errors["email"] = "Valid email address is required"

    if "phone" in fields and not is_valid_phone(fields["phone"]):
        errors["phone"] = "Invalid phone number format"

    if "country" in fields:
        message = _validate_country(fields["country"])
        if message:
            errors["country"] = message

    return errors


def normalize_user_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Produce the persisted form of already validated fields.

    Only known user columns that are present in ``fields`` appear in the
    result, so an omitted field stays untouched on update. A blank optional
    field is returned as ``None``, which clears the stored value.
    """
    normalized: dict[str, Any] = {}

    for field in USER_FIELDS:
        if field not in fields:
            continue
        value = fields[field]

        if field == "email":
            normalized[field] = value.strip().lower()
        elif field in OPTIONAL_FIELDS:
            cleaned = sanitize_text(value) if isinstance(value, str) else None
            normalized[field] = cleaned or None
        else:
            normalized[field] = sanitize_text(value)

    return normalized
