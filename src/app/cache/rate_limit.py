"""Rate limiting using SlowAPI with a Redis backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def _get_rate_limit_key(request: Request) -> str:
    """Key by authenticated user when known, otherwise by client address."""
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.user_id}"
    return str(get_remote_address(request))


def create_limiter() -> Limiter:
    """Build the limiter from ``settings.rate_limiting``."""
    settings = get_settings()
    return Limiter(
        key_func=_get_rate_limit_key,
        default_limits=[settings.rate_limiting.default],
        storage_uri=settings.redis_rate_limit_url,
        strategy="fixed-window",
        headers_enabled=True,
        # Fall back to in-memory counting while Redis is unreachable.
        in_memory_fallback_enabled=True,
        enabled=not settings.is_testing,
    )


limiter = create_limiter()


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Render ``RateLimitExceeded`` in the service error envelope."""
    assert isinstance(exc, RateLimitExceeded)
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        method=request.method,
        limit=str(exc.detail),
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "RATE_LIMIT_EXCEEDED",
            "message": "Too many requests. Please try again later.",
            "details": None,
            "request_id": getattr(request.state, "request_id", None),
        },
        headers={"Retry-After": "60"},
    )


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter to the app and register its error handler."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    logger.info("Rate limiting configured")


def rate_limit(limit: str) -> Any:
    """Per-endpoint limit, e.g. ``@rate_limit(settings.rate_limiting.social)``.

    Decorated endpoints must accept a ``request: Request`` parameter.
    """
    return limiter.limit(limit)
