"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up the middleware stack in the correct order
- Registers exception and rate limit handlers
- Mounts API routers
- Configures OpenAPI documentation
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app.api.v1.router import router as v1_router
from app.cache.rate_limit import setup_rate_limiting
from app.core.config import Settings, get_settings
from app.core.events.lifespan import lifespan
from app.core.exceptions import setup_exception_handlers
from app.core.middleware import LoggingMiddleware, RequestIDMiddleware
from app.observability.metrics import setup_metrics
from app.observability.tracing import setup_tracing


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    docs_enabled = settings.is_non_production

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description=(
            "Recipe sharing and meal planning API: moderated recipes, comment "
            "threads, likes and saves, meal plans, shopping lists and "
            "health-profile recommendations."
        ),
        lifespan=lifespan,
        docs_url=f"{settings.api.v1_prefix}/docs" if docs_enabled else None,
        redoc_url=f"{settings.api.v1_prefix}/redoc" if docs_enabled else None,
        openapi_url=f"{settings.api.v1_prefix}/openapi.json" if docs_enabled else None,
        debug=settings.app.debug,
    )

    app.state.settings = settings

    setup_rate_limiting(app)
    setup_exception_handlers(app)

    # Middleware (order matters - first added = last executed)
    _setup_middleware(app, settings)

    app.include_router(v1_router, prefix=settings.api.v1_prefix)

    # Observability (after routes are mounted)
    setup_tracing(app, settings)
    setup_metrics(app)

    return app


def _setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure middleware stack.

    Order from request perspective:
    1. RequestIDMiddleware (adds request ID for tracing)
    2. LoggingMiddleware (logs requests/responses with timing)
    3. GZipMiddleware (compresses responses)
    4. CORSMiddleware (handles CORS)
    """
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[str(origin) for origin in settings.api.cors_origins],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Process-Time"],
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    prefix = settings.api.v1_prefix
    app.add_middleware(
        LoggingMiddleware,
        exclude_paths={f"{prefix}/health", f"{prefix}/ready", f"{prefix}/metrics"},
    )

    app.add_middleware(RequestIDMiddleware)
