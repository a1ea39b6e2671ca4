"""ProgressGuard: progress telemetry validation service.

FastAPI application with lifespan management and global error handling.
The validation engine itself is a library (progress_guard.validators);
this module only wires it to a data store and exposes it over HTTP.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import structlog
import redis.asyncio as aioredis
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from progress_guard.config import Settings, get_settings
from progress_guard.api.router import api_router
from progress_guard.errors import DataStoreError
from progress_guard.services.anomaly_feed import AnomalyFeed
from progress_guard.services.redis_store import RedisProgressStore
from progress_guard.services.store import InMemoryProgressStore, ProgressDataStore
from progress_guard.validators import ValidationEngine, ValidationPolicy


def configure_logging(settings: Settings) -> None:
    """Configure structured logging."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer() if settings.DEBUG else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(settings.LOG_LEVEL.upper())
        ),
    )


configure_logging(get_settings())

logger = structlog.get_logger()


def _attach_store(app: FastAPI, store: ProgressDataStore, policy: Optional[ValidationPolicy] = None) -> None:
    app.state.store = store
    app.state.engine = ValidationEngine(store, policy=policy)
    app.state.anomaly_feed = AnomalyFeed()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    settings = get_settings()
    redis_client = None

    # ── Startup ──
    logger.info("app_starting", debug=settings.DEBUG, store_backend=settings.STORE_BACKEND)

    if getattr(app.state, "engine", None) is None:
        if settings.STORE_BACKEND == "redis":
            redis_client = aioredis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                encoding="utf-8",
            )
            try:
                await redis_client.ping()
                logger.info("redis_connected", url=settings.REDIS_URL)
            except Exception as e:
                # App can still start; validations will report system errors
                logger.error("redis_connection_failed", error=str(e))
            store = RedisProgressStore(redis_client, prefix=settings.STORE_KEY_PREFIX)
        else:
            store = InMemoryProgressStore()
        _attach_store(app, store)

    logger.info("app_started")

    yield

    # ── Shutdown ──
    logger.info("app_shutting_down")

    if redis_client is not None:
        await redis_client.aclose()
        logger.info("redis_disconnected")

    logger.info("app_stopped")


def create_app(
    store: Optional[ProgressDataStore] = None,
    policy: Optional[ValidationPolicy] = None,
) -> FastAPI:
    """Build the application. A store passed here replaces the configured backend."""
    app = FastAPI(
        title="ProgressGuard",
        description=(
            "Validation and consistency checks for self-reported learning progress "
            "telemetry, run before an update is persisted."
        ),
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if store is not None:
        _attach_store(app, store, policy)

    # ── Global Exception Handlers ──

    @app.exception_handler(DataStoreError)
    async def data_store_error_handler(request: Request, exc: DataStoreError):
        logger.error("data_store_error", path=request.url.path, operation=exc.operation, error=str(exc))
        return JSONResponse(
            status_code=503,
            content={"error": "store_unavailable", "message": "The data store could not be reached."},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all error handler for unhandled exceptions."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again.",
            },
        )

    # ── Routes ──

    app.include_router(api_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        """Root endpoint: API info."""
        return {
            "name": "ProgressGuard",
            "version": "1.0.0",
            "description": "Progress telemetry validation service",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


app = create_app()
