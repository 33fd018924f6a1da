"""Users API router with CRUD, search and country filter operations."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query
from starlette.responses import JSONResponse

from src.users_api.api.http.deps import get_user_repository
from src.users_api.api.http.responses import success_response
from src.users_api.core.errors import ValidationError
from src.users_api.entities.user import UserRepository

router = APIRouter(prefix="/users", tags=["users"])

PageParam = Annotated[int | None, Query(description="1-based page number")]
LimitParam = Annotated[int | None, Query(description="Page size")]


@router.get("")
def list_users(
    page: PageParam = None,
    limit: LimitParam = None,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """List users, newest first."""
    result = repository.find_all(page, limit)
    return success_response(result.users, pagination=result.pagination)


@router.get("/search")
def search_users(
    q: str | None = Query(default=None, description="Search term"),
    page: PageParam = None,
    limit: LimitParam = None,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Search users by name, email or country."""
    if q is None:
        raise ValidationError("Search query is required")
    result = repository.search(q, page, limit)
    return success_response(
        result.users, pagination=result.pagination, query=result.query
    )


@router.get("/country/{country}")
def list_users_by_country(
    country: str,
    page: PageParam = None,
    limit: LimitParam = None,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """List users living in ``country``."""
    result = repository.find_by_country(country, page, limit)
    return success_response(
        result.users, pagination=result.pagination, country=result.country
    )


@router.get("/{user_id}")
def get_user(
    user_id: str,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Get a user by ID."""
    return success_response(repository.find_by_id(user_id))


@router.post("")
def create_user(
    payload: dict[str, Any] = Body(...),
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Create a new user."""
    user = repository.create(payload)
    return success_response(
        user, message="User created successfully", status_code=201
    )


@router.put("/{user_id}")
def update_user(
    user_id: str,
    payload: dict[str, Any] = Body(...),
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Update the supplied fields of a user."""
    user = repository.update(user_id, payload)
    return success_response(user, message="User updated successfully")


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    repository: UserRepository = Depends(get_user_repository),
) -> JSONResponse:
    """Delete a user."""
    result = repository.delete(user_id)
    return success_response(result, message="User deleted successfully")
