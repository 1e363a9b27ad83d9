"""ARQ worker configuration.

This module provides:
- Worker settings and configuration
- Redis connection settings for the job queue
- Startup/shutdown handlers
- Cron job scheduling
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any, ClassVar

from arq import cron
from arq.connections import RedisSettings

from app.core.config import get_settings
from app.database.connection import close_database, init_database
from app.observability.logging import get_logger, setup_logging
from app.services.social.repair import CounterRepairService
from app.workers.tasks.counter_repair import repair_social_counters


if TYPE_CHECKING:
    from arq.cron import CronJob


logger = get_logger(__name__)

# Type alias for ARQ worker functions
WorkerFunction = Callable[..., Coroutine[Any, Any, Any]]


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup handler.

    Args:
        ctx: Worker context dictionary for storing shared state.
    """
    settings = get_settings()

    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "ARQ worker starting",
        environment=settings.APP_ENV,
    )

    ctx["settings"] = settings

    await init_database()
    ctx["repair_service"] = CounterRepairService()
    logger.debug("Initialized document store for worker")


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown handler.

    Args:
        ctx: Worker context dictionary containing initialized resources.
    """
    logger.info("ARQ worker shutting down")
    ctx.pop("repair_service", None)
    await close_database()


def get_redis_settings() -> RedisSettings:
    """Get Redis settings for ARQ.

    Returns:
        RedisSettings configured for the job queue.
    """
    settings = get_settings()

    return RedisSettings(
        host=settings.redis.host,
        port=settings.redis.port,
        username=settings.redis.user,
        password=settings.REDIS_PASSWORD or None,
        database=settings.redis.queue_db,
    )


def get_cron_jobs() -> list[CronJob]:
    """Scheduled jobs, per ``settings.maintenance``."""
    maintenance = get_settings().maintenance
    if not maintenance.repair_enabled:
        return []
    return [
        cron(
            repair_social_counters,  # type: ignore[arg-type]
            hour=maintenance.repair_hour,
            minute=maintenance.repair_minute,
            unique=True,
            run_at_startup=False,
        ),
    ]


class WorkerSettings:
    """ARQ worker settings class.

    This class is used by the arq CLI to configure the worker.
    Run with: arq app.workers.arq.WorkerSettings
    """

    # Redis connection settings
    redis_settings = get_redis_settings()

    # Queue name - must match Redis ACL key pattern (recipes:*)
    queue_name = get_settings().arq.queue_name

    # Health check key - must match Redis ACL key pattern (recipes:*)
    health_check_key = get_settings().arq.health_check_key

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # A full repair scans every recipe; allow it time on large stores
    job_timeout = 1800

    max_jobs = 4

    # How long to keep job results (default: 1 hour)
    keep_result = 3600

    max_tries = 3

    # Registered task functions
    functions: ClassVar[list[WorkerFunction]] = [
        repair_social_counters,
    ]

    # Cron jobs (scheduled tasks)
    cron_jobs: ClassVar[list[CronJob]] = get_cron_jobs()
