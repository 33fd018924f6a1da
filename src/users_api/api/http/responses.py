"""JSON response envelope and the exception handlers that produce it.

Every response body has the shape::

    {"success": bool, "message"?, "data"?, "pagination"?, "error"?, "details"?}

with absent members omitted rather than sent as ``null``.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse

from src.users_api.core.errors import (
    DatabaseError,
    DuplicateEntryError,
    NotFoundError,
    UsersApiError,
    ValidationError,
)

STATUS_BY_ERROR: dict[type[UsersApiError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    DuplicateEntryError: 409,
    DatabaseError: 500,
}

INTERNAL_ERROR_MESSAGE = "Internal server error"


def status_for(error: UsersApiError) -> int:
    for error_type in type(error).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return 500


def _envelope(success: bool, members: dict[str, Any]) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success}
    body.update({key: value for key, value in members.items() if value is not None})
    return jsonable_encoder(body, by_alias=True)


def success_response(
    data: Any = None,
    *,
    message: str | None = None,
    status_code: int = 200,
    **extra: Any,
) -> JSONResponse:
    """Build a success envelope.

    Extra keyword members (``pagination``, ``query``, ``country``) are added
    at the top level when not ``None``. Models are serialized by alias, so
    pagination and statistics blocks come out in camelCase.
    """
    members = {"message": message, "data": data, **extra}
    return JSONResponse(status_code=status_code, content=_envelope(True, members))


def error_response(
    error: str,
    status_code: int,
    *,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a failure envelope."""
    return JSONResponse(
        status_code=status_code,
        content=_envelope(False, {"error": error, "details": details}),
        headers=headers,
    )


def _request_validation_details(exc: RequestValidationError) -> dict[str, str]:
    details: dict[str, str] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        key = ".".join(location[1:] if location[:1] in (["query"], ["path"]) else location)
        details.setdefault(key or "body", error.get("msg", "Invalid value"))
    return details


async def users_api_error_handler(request: Request, exc: UsersApiError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        # Storage detail stays in the log, never in the response
        logger.bind(status_code=status_code, error_type=type(exc).__name__).opt(
            exception=exc
        ).error("request.database_error")
    else:
        logger.bind(status_code=status_code, error_type=type(exc).__name__).info(
            "request.rejected: {}", exc.message
        )

    details = exc.details if isinstance(exc, ValidationError) else None
    return error_response(exc.message, status_code, details=details)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = _request_validation_details(exc)
    logger.bind(status_code=400, error_type=type(exc).__name__).info(
        "request.validation_error"
    )
    return error_response("Invalid request", 400, details=details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(str(exc.detail), exc.status_code, headers=exc.headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Translate the error taxonomy and framework errors into envelopes."""
    app.add_exception_handler(UsersApiError, users_api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(
        RequestValidationError, request_validation_error_handler  # type: ignore[arg-type]
    )
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
