"""Redis cache client lifecycle.

One pooled client is opened at startup and shared by services through
``get_cache_client``. The job queue (arq) and the rate limiter manage their
own connections from the URLs in settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import redis.asyncio as redis
from redis.asyncio.connection import ConnectionPool

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

_cache_pool: ConnectionPool[Any] | None = None
_cache_client: Redis[Any] | None = None


async def init_redis_pools() -> None:
    """Open the cache pool and verify it with a PING."""
    global _cache_pool, _cache_client  # noqa: PLW0603

    settings = get_settings()
    logger.info(
        "Initializing Redis connection",
        host=settings.redis.host,
        port=settings.redis.port,
        db=settings.redis.cache_db,
    )

    _cache_pool = ConnectionPool.from_url(
        settings.redis_cache_url,
        max_connections=20,
        decode_responses=True,
    )
    _cache_client = redis.Redis(connection_pool=_cache_pool)

    try:
        await _cache_client.ping()
    except redis.ConnectionError:
        logger.exception("Failed to connect to Redis")
        raise
    logger.info("Redis connection established")


async def close_redis_pools() -> None:
    """Close the cache client and release its pool."""
    global _cache_pool, _cache_client  # noqa: PLW0603

    if _cache_client is not None:
        await _cache_client.aclose()
        _cache_client = None
    if _cache_pool is not None:
        await _cache_pool.disconnect()
        _cache_pool = None
    logger.info("Redis connection closed")


def get_cache_client() -> Redis[Any]:
    """Return the cache client.

    Raises:
        RuntimeError: If ``init_redis_pools`` has not run.
    """
    if _cache_client is None:
        msg = "Redis cache client not initialized. Call init_redis_pools() first."
        raise RuntimeError(msg)
    return _cache_client


async def check_redis_health() -> str:
    """Return ``healthy``, ``unhealthy`` or ``not_initialized``."""
    if _cache_client is None:
        return "not_initialized"
    try:
        await _cache_client.ping()
    except redis.RedisError:
        return "unhealthy"
    return "healthy"
