"""Application lifespan event handlers.

This module defines the lifespan context manager that handles:
- Application startup: open the document store, Redis and the job queue,
  install the auth provider and build the services kept on ``app.state``
- Application shutdown: close everything in reverse order
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from app.auth.providers import initialize_auth_provider, shutdown_auth_provider
from app.cache.redis import close_redis_pools, init_redis_pools
from app.core.config import Settings, get_settings
from app.database.connection import close_database, init_database
from app.observability.logging import get_logger, setup_logging
from app.observability.tracing import shutdown_tracing
from app.services.comments.service import CommentService
from app.services.meal_plans.service import MealPlanService
from app.services.moderation.service import RecipeService
from app.services.recommendations.service import RecommendationService
from app.services.shopping.service import ShoppingService
from app.services.social.repair import CounterRepairService
from app.services.social.service import SocialService
from app.services.users.service import UserService
from app.workers.jobs import close_arq_pool, get_arq_pool


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize all application services during startup.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    # The document store is critical; a failure here aborts startup
    await init_database()

    await _init_cache()
    await _init_arq()
    await _init_auth(settings)

    _init_domain_services(app)
    await _init_recommendation_service(app)

    logger.info("Application startup complete")


async def _init_cache() -> None:
    """Initialize Redis pools; the service runs without them."""
    try:
        await init_redis_pools()
    except Exception:
        logger.exception("Failed to initialize Redis - continuing without cache")


async def _init_arq() -> None:
    """Initialize ARQ connection pool."""
    try:
        await get_arq_pool()
    except Exception:
        logger.exception("Failed to initialize ARQ pool - background jobs unavailable")


async def _init_auth(settings: Settings) -> None:
    """Initialize auth provider (critical service)."""
    try:
        await initialize_auth_provider()
        logger.info("Auth provider initialized", mode=settings.auth.mode)
    except Exception:
        logger.exception("Failed to initialize auth provider")
        raise


def _init_domain_services(app: FastAPI) -> None:
    """Build the store-backed services. They share the process-wide client."""
    app.state.recipe_service = RecipeService()
    app.state.comment_service = CommentService()
    app.state.social_service = SocialService()
    app.state.repair_service = CounterRepairService()
    app.state.meal_plan_service = MealPlanService()
    app.state.shopping_service = ShoppingService()
    app.state.user_service = UserService()
    logger.debug("Domain services initialized")


async def _init_recommendation_service(app: FastAPI) -> None:
    """Initialize the recommendation service (optional - non-critical)."""
    try:
        service = RecommendationService()
        await service.initialize()
        app.state.recommendation_service = service
    except Exception:
        logger.exception(
            "Failed to initialize RecommendationService - recommendations unavailable"
        )
        app.state.recommendation_service = None


async def _shutdown(app: FastAPI) -> None:
    """Shutdown all application services.

    Args:
        app: The FastAPI application instance.
    """
    logger.info("Shutting down application")

    recommendation_service = getattr(app.state, "recommendation_service", None)
    if recommendation_service is not None:
        await recommendation_service.shutdown()
        logger.debug("RecommendationService shutdown")

    await shutdown_auth_provider()

    # Flush pending spans
    shutdown_tracing()

    await close_arq_pool()
    await close_redis_pools()
    await close_database()

    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings = get_settings()
    await _startup(app, settings)
    yield
    await _shutdown(app)
