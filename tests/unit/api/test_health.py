"""Unit tests for health endpoints.

Tests cover:
- Health check endpoint
- Readiness check endpoint
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import orjson
import pytest

from app.api.v1.endpoints.health import health_check, readiness_check


pytestmark = pytest.mark.unit


@pytest.fixture
def mock_settings() -> MagicMock:
    settings = MagicMock()
    settings.app.version = "1.0.0"
    settings.APP_ENV = "test"
    return settings


def _patch_checks(mongodb: str, redis: str) -> tuple[object, object]:
    return (
        patch(
            "app.api.v1.endpoints.health.check_database_health",
            new=AsyncMock(return_value=mongodb),
        ),
        patch(
            "app.api.v1.endpoints.health.check_redis_health",
            new=AsyncMock(return_value=redis),
        ),
    )


class TestHealthCheck:
    """Tests for health check endpoint."""

    @pytest.mark.asyncio
    async def test_returns_healthy_status(self, mock_settings: MagicMock) -> None:
        """Should return healthy status without touching dependencies."""
        result = await health_check(mock_settings)

        assert result.status == "healthy"
        assert result.version == "1.0.0"
        assert result.environment == "test"
        assert result.timestamp is not None


class TestReadinessCheck:
    """Tests for readiness check endpoint."""

    @pytest.mark.asyncio
    async def test_ready_when_all_healthy(self, mock_settings: MagicMock) -> None:
        db, cache = _patch_checks("healthy", "healthy")
        with db, cache:
            response = await readiness_check(mock_settings)

        body = orjson.loads(response.body)
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["dependencies"] == {"mongodb": "healthy", "redis": "healthy"}

    @pytest.mark.asyncio
    async def test_degraded_without_redis(self, mock_settings: MagicMock) -> None:
        """Should stay in rotation when only Redis is down."""
        db, cache = _patch_checks("healthy", "unhealthy")
        with db, cache:
            response = await readiness_check(mock_settings)

        assert response.status_code == 200
        assert orjson.loads(response.body)["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_unavailable_without_mongodb(self, mock_settings: MagicMock) -> None:
        db, cache = _patch_checks("not_initialized", "healthy")
        with db, cache:
            response = await readiness_check(mock_settings)

        assert response.status_code == 503
        assert orjson.loads(response.body)["status"] == "unhealthy"
