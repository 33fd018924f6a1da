"""FastAPI dependency implementations."""

from __future__ import annotations

from fastapi import Request

from src.users_api.api.http.app_data import ApplicationDependencies
from src.users_api.core.services import StorageGateway
from src.users_api.entities.user import UserRepository
from src.users_api.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    """Get the dependencies created during application startup."""
    return request.app.state.app_dependencies


def get_app_config(request: Request) -> ConfigData:
    """Get the configuration the application was built with."""
    return get_app_dependencies(request).config


def get_storage_gateway(request: Request) -> StorageGateway:
    """Get the shared storage gateway."""
    return get_app_dependencies(request).storage_gateway


def get_user_repository(request: Request) -> UserRepository:
    """Get the user repository."""
    return get_app_dependencies(request).user_repository
