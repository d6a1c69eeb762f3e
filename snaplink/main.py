"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from snaplink.api import api_router, redirect_router
from snaplink.api.frontend import SPAStaticFiles
from snaplink.core.config import Settings, get_settings
from snaplink.core.errors import register_exception_handlers
from snaplink.core.middleware import SecurityHeadersMiddleware
from snaplink.core.observability import RequestContextMiddleware, setup_observability
from snaplink.core.rate_limit import limiter
from snaplink.services import MemStorage

# Get logger (will be configured by setup_observability)
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info("Starting Snaplink", version=app.version)
    yield
    logger.info("Shutting down Snaplink", **app.state.storage.stats)


def create_app(
    storage: MemStorage | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the application around an explicitly provided storage instance.

    Each call gets its own store unless one is passed in, so tests never
    share state.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="URL Shortener with click analytics",
        lifespan=lifespan,
    )
    app.state.storage = storage if storage is not None else MemStorage()
    app.dependency_overrides[get_settings] = lambda: settings

    # Set up observability (logging, tracing, metrics, Sentry)
    setup_observability(app, settings)

    register_exception_handlers(app)

    # The limiter is process-wide; the latest app's settings decide
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Middleware stack (first added = innermost)
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        SecurityHeadersMiddleware,
        enable_hsts=not settings.debug,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router)

    # After the API: /{code} would otherwise shadow single-segment routes
    app.include_router(redirect_router)

    # Last of all: catches multi-segment paths (assets, client-side routes)
    if settings.frontend_dir:
        app.state.frontend = SPAStaticFiles(directory=settings.frontend_dir, html=True)
        app.mount("/", app.state.frontend, name="frontend")
    else:
        app.state.frontend = None

    return app


app = create_app()
