"""
FastAPI application entry point.

``create_app`` wires the rate limiter, CORS, request logging, the error
envelope and the v1 routers. The lifespan builds the ``Database``, the
custom field registry, the notifier and the record stores and keeps them on
``app.state``; when background jobs are enabled it also runs the archive
cleanup and task reminder sweeps periodically.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from ats.api.v1 import api_router
from ats.core.config import Settings, get_settings
from ats.core.errors import ATSError, validation_message
from ats.core.logging import (
    clear_context,
    configure_logging,
    get_logger,
    log_performance,
    set_request_id,
)
from ats.database.connection import Database
from ats.services.custom_fields.registry import CustomFieldRegistry
from ats.services.maintenance import run_archive_cleanup, run_task_reminders
from ats.services.notifications.service import NotificationService
from ats.services.records import build_record_stores

logger = get_logger(__name__)


async def run_periodically(
    name: str, interval_seconds: int, job: Callable[[], Awaitable[object]]
) -> None:
    """Run ``job`` forever, logging and surviving its failures."""
    while True:
        try:
            await job()
        except Exception as e:
            logger.error(
                "Background job failed",
                job=name,
                error=str(e),
                error_type=type(e).__name__,
            )
        await asyncio.sleep(interval_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Build the shared services on startup and release them on shutdown.

    A ``Database`` or notifier passed to ``create_app`` is used as is and
    not disposed here.
    """
    settings: Settings = app.state.settings

    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        version=settings.app_version,
    )

    with log_performance(logger, "application_startup"):
        database = app.state.database or Database.from_settings(settings)
        owns_database = app.state.database is None

        notifier = app.state.notifier
        if notifier is None and settings.email_enabled:
            notifier = NotificationService.from_settings(settings)

        registry = CustomFieldRegistry(database)
        app.state.database = database
        app.state.notifier = notifier
        app.state.registry = registry
        app.state.stores = build_record_stores(database, registry, notifier)

    tasks: list[asyncio.Task] = []
    if settings.enable_background_jobs:
        tasks.append(
            asyncio.create_task(
                run_periodically(
                    "archive_cleanup",
                    settings.archive_cleanup_interval_seconds,
                    lambda: run_archive_cleanup(
                        app.state.stores, settings.archive_retention_days
                    ),
                )
            )
        )
        tasks.append(
            asyncio.create_task(
                run_periodically(
                    "task_reminders",
                    settings.task_reminder_interval_seconds,
                    lambda: run_task_reminders(database, notifier),
                )
            )
        )
        logger.info("Background jobs started", jobs=len(tasks))

    yield

    logger.info("Application shutting down")
    with log_performance(logger, "application_shutdown"):
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        if owns_database:
            await database.dispose()


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    notifier: Optional[NotificationService] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use, defaults to ``get_settings()``
        database: Pre-built database, e.g. an in-memory one in tests
        notifier: Pre-built notifier, overriding ``email_enabled``
    """
    settings = settings or get_settings()
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Applicant tracking system records API",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.notifier = notifier

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit_default],
        enabled=settings.rate_limit_enabled,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        """Set the request ID, time the request and log its outcome."""
        request_id = set_request_id(request.headers.get("X-Request-ID"))
        try:
            with log_performance(
                logger,
                "request_processing",
                method=request.method,
                path=request.url.path,
            ):
                response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            return response
        finally:
            clear_context()

    @app.exception_handler(ATSError)
    async def ats_error_handler(request: Request, exc: ATSError) -> JSONResponse:
        """Map a core error to its status code and the error envelope."""
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "Request rejected",
            method=request.method,
            path=request.url.path,
            status_code=exc.status_code,
            error_kind=exc.kind.value,
            message=exc.message,
        )
        content = {"success": False, "message": exc.message}
        if not settings.is_production:
            content["error"] = jsonable_encoder({"kind": exc.kind.value, **exc.context})
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed bodies and parameters are invalid arguments (400)."""
        logger.info(
            "Request validation failed",
            method=request.method,
            path=request.url.path,
        )
        content = {"success": False, "message": validation_message(exc.errors())}
        if not settings.is_production:
            content["error"] = jsonable_encoder(exc.errors())
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            method=request.method,
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        content = {"success": False, "message": "An unexpected error occurred"}
        if not settings.is_production:
            content["error"] = str(exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
        )

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {
            "status": "healthy",
            "version": settings.app_version,
            "environment": settings.environment,
        }

    @app.get("/ready", tags=["health"])
    async def ready(request: Request) -> JSONResponse:
        """Readiness: the database answers a query."""
        database: Database = request.app.state.database
        healthy = await database.check_health(max_retries=1)
        return JSONResponse(
            status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "ready" if healthy else "not_ready",
                "database": "connected" if healthy else "unavailable",
                "pool": database.pool_stats(),
            },
        )

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    return app


app = create_app()
