"""
FastAPI Application Entry Point

This module initializes the FastAPI application and configures:
- The mapping & analytics store and the audit logger (one per application)
- API routes
- Middleware (logging, CORS, rate limiting)
- Exception handlers rendering {"error", "code"} bodies

Design Decisions:
- create_app() builds everything explicitly; the store lives on app.state for
  the lifetime of the process and reaches handlers through dependencies
- Tests build their own app with their own store and clock
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortener.api import endpoints
from shortener.api.schemas import HealthResponse
from shortener.core.exceptions import URLShortenerException
from shortener.core.expiry import format_timestamp, utc_now
from shortener.core.log_constants import LogLevel, LogPackage
from shortener.core.rate_limit import limiter
from shortener.core.setting import settings
from shortener.middleware.logging import add_logging_middleware
from shortener.services.audit_logger import AuditLogger
from shortener.store.interface import MappingStore
from shortener.store.memory import InMemoryMappingStore

logger = logging.getLogger(__name__)

SERVICE_NAME = "URL Shortener Microservice"
SERVICE_VERSION = "1.0.0"


def register_exception_handlers(app: FastAPI) -> None:
    """Translate service errors and framework errors into JSON error bodies."""

    @app.exception_handler(URLShortenerException)
    async def service_exception_handler(request: Request, exc: URLShortenerException):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        app.state.audit.emit(
            LogLevel.WARN,
            LogPackage.ROUTE,
            f"Invalid request body for {request.method} {request.url.path}"
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request body", "code": "INVALID_REQUEST"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            app.state.audit.emit(
                LogLevel.WARN,
                LogPackage.MIDDLEWARE,
                f"404 - Route not found: {request.method} {request.url.path}"
            )
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": "Route not found",
                    "code": "ROUTE_NOT_FOUND",
                    "path": request.url.path,
                    "method": request.method,
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "code": "HTTP_ERROR"},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
        app.state.audit.emit(LogLevel.ERROR, LogPackage.MIDDLEWARE, f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report startup and shutdown, then flush and close the audit logger."""
    app.state.audit.emit(LogLevel.INFO, LogPackage.SERVICE, f"{SERVICE_NAME} starting up")
    yield
    app.state.audit.emit(LogLevel.INFO, LogPackage.SERVICE, f"{SERVICE_NAME} shutting down")
    await app.state.audit.aclose()


def create_app(
    store: Optional[MappingStore] = None,
    audit: Optional[AuditLogger] = None
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Store to serve from (a fresh InMemoryMappingStore by default)
        audit: Audit logger (built from settings by default)

    Returns:
        Configured FastAPI instance
    """
    logging.getLogger("shortener").setLevel(settings.LOG_LEVEL.upper())

    audit = audit or AuditLogger.from_settings(settings)
    store = store or InMemoryMappingStore(audit=audit)

    # Title and description are used in auto-generated API documentation
    app = FastAPI(
        title=SERVICE_NAME,
        description="Shortens URLs with expiry and records per-redirect analytics",
        version=SERVICE_VERSION,
        docs_url="/docs",  # Swagger UI documentation
        redoc_url="/redoc",  # ReDoc documentation
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.audit = audit
    app.state.started_at = time.monotonic()

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    register_exception_handlers(app)

    add_logging_middleware(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health endpoints defined before router to match before catch-all route
    @app.get("/", tags=["Health"])
    async def root():
        """
        Root endpoint with service information.
        """
        return {
            "message": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "docs": "/docs"
        }

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request) -> HealthResponse:
        """
        Health check endpoint for monitoring.

        Returns:
            Health status, uptime in seconds and number of stored URLs
        """
        state = request.app.state
        return HealthResponse(
            status="healthy",
            timestamp=format_timestamp(utc_now()),
            uptime=round(time.monotonic() - state.started_at, 3),
            totalUrls=state.store.count(),
        )

    app.include_router(endpoints.router, tags=["URL Shortener"])

    return app


app = create_app()
