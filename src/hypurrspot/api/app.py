"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hypurrspot.api.routes import auth, health, sync, tokens
from hypurrspot.config.logging import configure_logging
from hypurrspot.config.settings import get_settings
from hypurrspot.core.exceptions import DatabaseConnectionError
from hypurrspot.core.sync.token_sync import (
    close_token_sync_service,
    get_token_sync_service,
)
from hypurrspot.data.supabase.client import close_supabase_client, get_supabase_client
from hypurrspot.scheduler.jobs import schedule_token_sync_job
from hypurrspot.scheduler.scheduler import shutdown_scheduler, start_scheduler

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    The store is connected before the app accepts traffic; if it cannot be
    reached startup fails.
    """
    # Startup
    configure_logging()
    log.info("application_starting")
    settings = get_settings()

    await get_supabase_client()
    await get_token_sync_service()

    await start_scheduler()
    if settings.sync_enabled:
        schedule_token_sync_job(
            interval_seconds=settings.sync_interval_seconds,
            run_immediately=settings.sync_run_on_startup,
        )
    else:
        log.info("token_sync_disabled")

    log.info("application_started")

    yield

    # Shutdown
    log.info("application_stopping")
    await shutdown_scheduler()
    await close_token_sync_service()
    await close_supabase_client()
    log.info("application_stopped")


async def _database_unavailable(_request: Request, exc: Exception) -> JSONResponse:
    log.error("database_unavailable", error=str(exc))
    return JSONResponse(status_code=503, content={"detail": "Database connection failed"})


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Hyperliquid spot token tracker",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Middleware
    allowed_origins = [settings.cors_origin] if settings.cors_origin else []
    if settings.debug and not allowed_origins:
        allowed_origins = ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DatabaseConnectionError, _database_unavailable)

    # Routes
    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(tokens.router, prefix="/api")
    app.include_router(sync.router, prefix="/api")

    return app
