"""Unit tests for job enqueue utilities.

Tests cover:
- ARQ pool management
- Counter repair enqueueing
- Job status lookup
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from arq.jobs import JobStatus
from redis.exceptions import ConnectionError as RedisConnectionError

import app.workers.jobs as jobs_module
from app.core.config import get_settings
from app.workers.jobs import (
    close_arq_pool,
    enqueue_counter_repair,
    get_arq_pool,
    get_job_status,
)


if TYPE_CHECKING:
    from collections.abc import Generator


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_arq_pool() -> Generator[None]:
    """Reset the global ARQ pool before and after each test."""
    jobs_module._arq_pool = None
    yield
    jobs_module._arq_pool = None


class TestArqPool:
    """Tests for pool creation and shutdown."""

    @pytest.mark.asyncio
    async def test_creates_pool_once(self) -> None:
        mock_pool = AsyncMock()

        with (
            patch("app.workers.jobs.create_pool", return_value=mock_pool) as mock_create,
            patch("app.workers.jobs.get_redis_settings"),
        ):
            first = await get_arq_pool()
            second = await get_arq_pool()

        mock_create.assert_called_once()
        assert first is second is mock_pool

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        mock_pool = AsyncMock()
        jobs_module._arq_pool = mock_pool

        await close_arq_pool()

        mock_pool.aclose.assert_awaited_once()
        assert jobs_module._arq_pool is None


class TestEnqueueCounterRepair:
    """Tests for enqueue_counter_repair."""

    @pytest.mark.asyncio
    async def test_uses_fixed_job_id(self) -> None:
        """Should enqueue under the configured id so runs never stack."""
        mock_pool = AsyncMock()
        jobs_module._arq_pool = mock_pool
        expected_id = get_settings().arq.job_ids.counter_repair

        job_id = await enqueue_counter_repair()

        assert job_id == expected_id
        args, kwargs = mock_pool.enqueue_job.await_args
        assert args == ("repair_social_counters",)
        assert kwargs["_job_id"] == expected_id

    @pytest.mark.asyncio
    async def test_already_queued_returns_same_id(self) -> None:
        mock_pool = AsyncMock()
        mock_pool.enqueue_job.return_value = None
        jobs_module._arq_pool = mock_pool

        job_id = await enqueue_counter_repair()

        assert job_id == get_settings().arq.job_ids.counter_repair

    @pytest.mark.asyncio
    async def test_redis_errors_propagate(self) -> None:
        mock_pool = AsyncMock()
        mock_pool.enqueue_job.side_effect = RedisConnectionError("down")
        jobs_module._arq_pool = mock_pool

        with pytest.raises(RedisConnectionError):
            await enqueue_counter_repair()


class TestGetJobStatus:
    """Tests for get_job_status."""

    @pytest.mark.asyncio
    async def test_unknown_job(self) -> None:
        jobs_module._arq_pool = AsyncMock()
        mock_job = MagicMock()
        mock_job.info = AsyncMock(return_value=None)

        with patch("app.workers.jobs.Job", return_value=mock_job):
            result = await get_job_status("missing")

        assert result == {"job_id": "missing", "status": "unknown"}

    @pytest.mark.asyncio
    async def test_in_progress_job(self) -> None:
        jobs_module._arq_pool = AsyncMock()
        info = MagicMock(function="repair_social_counters", enqueue_time=None, job_try=1)
        mock_job = MagicMock()
        mock_job.info = AsyncMock(return_value=info)
        mock_job.status = AsyncMock(return_value=JobStatus.in_progress)

        with patch("app.workers.jobs.Job", return_value=mock_job):
            result = await get_job_status("j1")

        assert result["status"] == "in_progress"
        assert result["function"] == "repair_social_counters"
        assert result["result"] is None

    @pytest.mark.asyncio
    async def test_queue_unreachable(self) -> None:
        with patch(
            "app.workers.jobs.get_arq_pool",
            new=AsyncMock(side_effect=RedisConnectionError("down")),
        ):
            assert await get_job_status("j1") is None
