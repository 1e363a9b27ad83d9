"""Access logging with request timing."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response

logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD = 1.0


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per request and flag slow ones.

    The elapsed time is also returned in the ``X-Process-Time`` header.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | None = None,
        slow_threshold: float = SLOW_REQUEST_THRESHOLD,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or set()
        self.slow_threshold = slow_threshold

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        path = request.url.path
        if any(path.endswith(excluded) for excluded in self.exclude_paths):
            return await call_next(request)

        bind_context(method=request.method, path=path)
        start = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - start
        elapsed_ms = round(elapsed * 1000, 2)
        response.headers["X-Process-Time"] = f"{elapsed_ms}ms"

        log = logger.warning if elapsed > self.slow_threshold else logger.info
        log(
            "Slow request" if elapsed > self.slow_threshold else "Request completed",
            status_code=response.status_code,
            duration_ms=elapsed_ms,
            client_ip=_client_ip(request),
        )
        return response


def _client_ip(request: Request) -> str:
    """Original client address, honouring reverse proxy headers."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    if request.client:
        return request.client.host
    return "unknown"
