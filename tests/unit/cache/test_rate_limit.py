"""Unit tests for rate limiting helpers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import orjson
import pytest
from slowapi.errors import RateLimitExceeded

from app.auth.providers import AuthResult
from app.cache.rate_limit import _get_rate_limit_key, rate_limit_exceeded_handler


pytestmark = pytest.mark.unit


def _request(user: AuthResult | None = None) -> MagicMock:
    request = MagicMock()
    request.state = SimpleNamespace(request_id="req-1")
    if user is not None:
        request.state.user = user
    request.client.host = "10.0.0.8"
    request.headers = {}
    return request


class TestRateLimitKey:
    """Tests for _get_rate_limit_key."""

    def test_keys_by_user_when_authenticated(self) -> None:
        request = _request(AuthResult(user_id="user-1"))

        assert _get_rate_limit_key(request) == "user:user-1"

    def test_falls_back_to_address(self) -> None:
        assert _get_rate_limit_key(_request()) == "10.0.0.8"


class TestRateLimitExceededHandler:
    """Tests for the 429 envelope."""

    @pytest.mark.asyncio
    async def test_renders_error_envelope(self) -> None:
        limit = MagicMock()
        limit.error_message = None
        limit.limit = "60/minute"
        request = _request()
        request.url.path = "/api/v1/recipes/r1/like"

        response = await rate_limit_exceeded_handler(request, RateLimitExceeded(limit))

        body = orjson.loads(response.body)
        assert response.status_code == 429
        assert body["error"] == "RATE_LIMIT_EXCEEDED"
        assert body["request_id"] == "req-1"
        assert response.headers["Retry-After"] == "60"
