"""Background job workers using ARQ."""

from app.workers.arq import WorkerSettings, get_redis_settings
from app.workers.jobs import (
    close_arq_pool,
    enqueue_counter_repair,
    get_arq_pool,
    get_job_status,
)


__all__ = [
    "WorkerSettings",
    "close_arq_pool",
    "enqueue_counter_repair",
    "get_arq_pool",
    "get_job_status",
    "get_redis_settings",
]
