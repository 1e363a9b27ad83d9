"""Job enqueue utilities.

This module provides functions for enqueuing background jobs
from the main application.
"""

from __future__ import annotations

import contextlib
from typing import Any

from arq.connections import ArqRedis, create_pool
from arq.jobs import Job

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.workers.arq import get_redis_settings


logger = get_logger(__name__)

# Global connection pool for enqueuing jobs
_arq_pool: ArqRedis | None = None


async def get_arq_pool() -> ArqRedis:
    """Get or create the ARQ connection pool.

    Returns:
        ARQ Redis connection pool for enqueuing jobs.
    """
    global _arq_pool  # noqa: PLW0603

    if _arq_pool is None:
        _arq_pool = await create_pool(
            get_redis_settings(),
            default_queue_name=get_settings().arq.queue_name,
        )
        logger.debug("Created ARQ connection pool")

    return _arq_pool


async def close_arq_pool() -> None:
    """Close the ARQ connection pool.

    Should be called during application shutdown.
    """
    global _arq_pool  # noqa: PLW0603

    if _arq_pool is not None:
        await _arq_pool.aclose()
        _arq_pool = None
        logger.debug("Closed ARQ connection pool")


async def enqueue_counter_repair() -> str:
    """Enqueue a counter repair run and return its job id.

    The job id is fixed in config, so a request made while a repair is
    queued or running returns the existing job instead of stacking another.

    Raises:
        RedisError: The queue is unreachable.
    """
    settings = get_settings()
    job_id = settings.arq.job_ids.counter_repair
    pool = await get_arq_pool()
    job = await pool.enqueue_job(
        "repair_social_counters",
        _job_id=job_id,
        _queue_name=settings.arq.queue_name,
    )
    if job is None:
        logger.info("Counter repair already queued", job_id=job_id)
    else:
        logger.info("Enqueued counter repair", job_id=job_id)
    return job_id


async def get_job_status(job_id: str) -> dict[str, Any] | None:
    """Get the status of a job.

    Args:
        job_id: The job ID to check.

    Returns:
        Job status dict or None if the queue is unreachable.
    """
    try:
        pool = await get_arq_pool()
        job = Job(job_id, pool, _queue_name=get_settings().arq.queue_name)

        info = await job.info()
        if info is None:
            return {"job_id": job_id, "status": "unknown"}

        status = await job.status()

        result = None
        if status.name == "complete":
            with contextlib.suppress(Exception):
                result = await job.result(timeout=0)

        return {
            "job_id": job_id,
            "status": status.name,
            "function": info.function,
            "enqueue_time": info.enqueue_time.isoformat()
            if info.enqueue_time
            else None,
            "job_try": info.job_try,
            "result": result,
        }
    except Exception:
        logger.exception("Failed to get job status", job_id=job_id)
        return None
