"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.users_api.api.http.deps import get_app_config, get_storage_gateway
from src.users_api.core.services import StorageError, StorageGateway
from src.users_api.runtime.config.config_data import ConfigData

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health(config: ConfigData = Depends(get_app_config)) -> dict[str, Any]:
    """Liveness probe: 200 as long as the process is running."""
    return {
        "success": True,
        "status": "healthy",
        "service": config.app.name,
        "environment": config.app.environment,
    }


@router.get("/ready", response_model=None)
def readiness(
    gateway: StorageGateway = Depends(get_storage_gateway),
    config: ConfigData = Depends(get_app_config),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 503 until the database answers."""
    db_healthy = gateway.health_check()
    response = {
        "success": db_healthy,
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": gateway.backend,
            }
        },
    }

    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response


@router.get("/database", response_model=None)
def health_database(
    gateway: StorageGateway = Depends(get_storage_gateway),
) -> dict[str, Any] | JSONResponse:
    """Database-specific health check with connection pool status."""
    try:
        gateway.ensure_ready()
    except StorageError as e:
        return JSONResponse(
            status_code=503,
            content={
                "success": False,
                "status": "unhealthy",
                "type": gateway.backend,
                "error": "Database unavailable",
                "error_type": type(e).__name__,
            },
        )

    healthy = gateway.health_check()
    content = {
        "success": healthy,
        "status": "healthy" if healthy else "unhealthy",
        "type": gateway.backend,
        "pool": gateway.get_pool_status(),
    }
    if not healthy:
        return JSONResponse(status_code=503, content=content)
    return content
