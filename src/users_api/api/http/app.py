"""FastAPI application factory and setup."""

import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.responses import Response

from src.users_api import __version__
from src.users_api.api.http.app_data import ApplicationDependencies
from src.users_api.api.http.responses import (
    INTERNAL_ERROR_MESSAGE,
    error_response,
    register_exception_handlers,
)
from src.users_api.api.http.routers import health, stats, users
from src.users_api.api.utils.app_startup import configure_logging
from src.users_api.core.services import StorageGateway
from src.users_api.entities.user import UserRepository
from src.users_api.runtime.config.config_data import ConfigData
from src.users_api.runtime.context import get_config

__all__ = ["app", "create_app"]


def build_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Create the storage gateway and the repository that shares it."""
    gateway = StorageGateway(config.database)
    repository = UserRepository(gateway, config.pagination, config.stats)
    return ApplicationDependencies(
        config=config, storage_gateway=gateway, user_repository=repository
    )


async def log_requests(request: Request, call_next) -> Response:
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return error_response(
                INTERNAL_ERROR_MESSAGE, 500, headers={"X-Request-ID": request_id}
            )


def create_app(config: ConfigData | None = None) -> FastAPI:
    """Build the API application.

    Args:
        config: Configuration to run with; defaults to the current context's.
    """
    app_config = config or get_config()
    is_production = app_config.app.environment == "production"

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(app_config)
        logger.info(
            "Starting up {} in {} environment",
            app_config.app.name,
            app_config.app.environment,
        )

        deps = build_dependencies(app_config)
        # Fail fast when the database cannot be opened
        deps.storage_gateway.ensure_ready()
        app.state.app_dependencies = deps
        try:
            yield
        finally:
            logger.info("Shutting down application")
            deps.storage_gateway.close()

    app = FastAPI(
        title=app_config.app.name,
        version=__version__,
        lifespan=lifespan,
        docs_url=None if is_production else "/docs",
        redoc_url=None if is_production else "/redoc",
    )

    # --- CORS configuration ---
    cors = app_config.app.cors
    if is_production and "*" in cors.origins and cors.allow_credentials:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors.origins,
        allow_credentials=cors.allow_credentials,
        allow_methods=cors.allow_methods,
        allow_headers=cors.allow_headers,
    )
    app.middleware("http")(log_requests)

    register_exception_handlers(app)

    prefix = app_config.app.api_prefix
    app.include_router(health.router, prefix=prefix)
    app.include_router(users.router, prefix=prefix)
    app.include_router(stats.router, prefix=prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # request logging middleware covers access logs
    )
