"""Redis cache connection and SlowAPI rate limiting."""

from app.cache.rate_limit import limiter, rate_limit, setup_rate_limiting
from app.cache.redis import (
    check_redis_health,
    close_redis_pools,
    get_cache_client,
    init_redis_pools,
)


__all__ = [
    "check_redis_health",
    "close_redis_pools",
    "get_cache_client",
    "init_redis_pools",
    "limiter",
    "rate_limit",
    "setup_rate_limiting",
]
