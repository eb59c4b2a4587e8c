# ==== BOXSHIP MAIN APPLICATION MODULE ==== #

"""
Main FastAPI application for Boxship.

This module provides the FastAPI application with middleware, observability,
health endpoints and error handling for recording shipping boxes.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from sqlalchemy import text

from boxship.business.errors import (
    BoxshipError,
    MalformedColor,
    StorageError,
    UnknownDestination,
)
from boxship.settings import settings
from boxship.storage.db import init_database, create_tables, close_database, get_session
from boxship.observability.tracing import init_tracing
from boxship.observability.metrics import init_metrics, metrics_router
from boxship.observability.logging import ContextualLogger, init_logging
from boxship.middleware.correlation import CorrelationMiddleware
from boxship.routes import boxes


logger = ContextualLogger(__name__)


# ==== APPLICATION LIFECYCLE MANAGEMENT ==== #


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown operations.

    Args:
        app (FastAPI): FastAPI application instance

    Yields:
        None: Control back to FastAPI during application runtime
    """
    # --► STARTUP SEQUENCE
    init_logging(settings.LOG_LEVEL, settings.LOG_TO_FILE, settings.LOG_DIR)
    init_tracing(settings.SERVICE_NAME)
    init_database()
    await create_tables()

    yield

    # --► SHUTDOWN SEQUENCE
    await close_database()


# ==== APPLICATION FACTORY ==== #


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Boxship",
        description="Shipping box registry with per-destination cost calculation",
        version=settings.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_ENV == "dev" else None,
        redoc_url="/redoc" if settings.APP_ENV == "dev" else None
    )

    init_metrics(settings.SERVICE_VERSION, settings.APP_ENV, settings.SERVICE_NAME)

    # --► MIDDLEWARE STACK CONFIGURATION
    # ⚠️ CORS middleware must be added FIRST before other middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )
    app.add_middleware(CorrelationMiddleware)

    _register_health_endpoints(app)
    _register_info_endpoint(app)
    _register_routers(app)
    _register_exception_handlers(app)

    FastAPIInstrumentor.instrument_app(app)

    return app


# ==== ENDPOINT REGISTRATION HELPERS ==== #


def _register_health_endpoints(app: FastAPI) -> None:
    """
    Register health check endpoints for liveness and readiness probes.

    Args:
        app (FastAPI): FastAPI application instance
    """
    @app.get("/healthz", tags=["health"])
    async def health_check() -> dict:
        """Liveness probe endpoint."""
        return {
            "status": "ok",
            "service": settings.SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/readyz", tags=["health"])
    async def readiness_check() -> dict:
        """Readiness probe endpoint."""
        return {
            "status": "ready",
            "service": settings.SERVICE_NAME,
            "environment": settings.APP_ENV
        }


def _register_info_endpoint(app: FastAPI) -> None:
    """
    Register application information endpoint with a database check.

    Args:
        app (FastAPI): FastAPI application instance
    """
    @app.get("/info", tags=["info"])
    async def app_info() -> dict:
        """Application metadata and database status."""
        database_status = "connected"
        try:
            async with get_session() as db:
                await db.execute(text("SELECT 1"))
        except Exception as exc:
            logger.warning("Database status check failed", error=str(exc))
            database_status = "disconnected"

        return {
            "service": settings.SERVICE_NAME,
            "version": settings.SERVICE_VERSION,
            "environment": settings.APP_ENV,
            "database_status": database_status,
            "currency": settings.CURRENCY_CODE
        }


def _register_routers(app: FastAPI) -> None:
    """
    Register application routers with their prefixes and tags.

    Args:
        app (FastAPI): FastAPI application instance
    """
    app.include_router(metrics_router, prefix="", tags=["monitoring"])
    app.include_router(boxes.router, prefix="/api", tags=["boxes"])


# ==== EXCEPTION HANDLERS ==== #


def _error_body(request: Request, exc: BoxshipError, error: str) -> dict:
    return {
        "error": error,
        "message": str(exc),
        "correlation_id": getattr(request.state, 'correlation_id', 'unknown'),
        "code": exc.code
    }


def _register_exception_handlers(app: FastAPI) -> None:
    """
    Register handlers mapping system errors to responses.

    Args:
        app (FastAPI): FastAPI application instance
    """
    @app.exception_handler(UnknownDestination)
    async def unknown_destination_handler(
        request: Request,
        exc: UnknownDestination
    ) -> JSONResponse:
        """Unknown destination codes are rejected as bad requests."""
        logger.warning("Unknown destination country", destination=str(exc.destination))
        return JSONResponse(
            status_code=400,
            content=_error_body(request, exc, "Bad request")
        )

    @app.exception_handler(MalformedColor)
    async def malformed_color_handler(
        request: Request,
        exc: MalformedColor
    ) -> JSONResponse:
        """A stored color could not be read back."""
        logger.error("Malformed stored color", value=str(exc.value), reason=exc.reason)
        return JSONResponse(
            status_code=500,
            content=_error_body(request, exc, "Corrupted record")
        )

    @app.exception_handler(StorageError)
    async def storage_error_handler(
        request: Request,
        exc: StorageError
    ) -> JSONResponse:
        """The box store is unavailable; the caller may retry."""
        logger.error("Storage operation failed", operation=exc.operation, error=str(exc))
        return JSONResponse(
            status_code=503,
            content=_error_body(request, exc, "Storage unavailable")
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Consistent error body for unhandled errors."""
        correlation_id = getattr(request.state, 'correlation_id', 'unknown')
        logger.exception("Unhandled error", correlation_id=correlation_id)

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "message": "An unexpected error occurred",
                "correlation_id": correlation_id,
                "code": "INTERNAL_ERROR"
            }
        )


# ==== APPLICATION INSTANCE ==== #


# Create application instance for deployment
app = create_app()
