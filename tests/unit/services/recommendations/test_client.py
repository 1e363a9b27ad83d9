"""Unit tests for RecommendationScorerClient."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import httpx
import orjson
import pytest
import respx

from app.services.recommendations.client import RecommendationScorerClient
from app.services.recommendations.exceptions import ScorerUnavailableError
from app.services.recommendations.schemas import ScoreRequest


if TYPE_CHECKING:
    from collections.abc import AsyncIterator


pytestmark = pytest.mark.unit

SCORER_URL = "http://scorer.test/api"


@pytest.fixture
def mock_settings() -> MagicMock:
    """Create mock settings."""
    settings = MagicMock()
    settings.downstream_services.recommendation_engine.url = SCORER_URL + "/"
    settings.downstream_services.recommendation_engine.timeout = 5.0
    return settings


@pytest.fixture
async def client(mock_settings: MagicMock) -> AsyncIterator[RecommendationScorerClient]:
    with patch(
        "app.services.recommendations.client.get_settings",
        return_value=mock_settings,
    ):
        scorer = RecommendationScorerClient()
    await scorer.initialize()
    yield scorer
    await scorer.shutdown()


@pytest.fixture
def request_body() -> ScoreRequest:
    return ScoreRequest(
        user_id="user-1",
        age=41,
        health_conditions=["diabetes"],
        dietary_preferences=["vegetarian"],
    )


class TestRank:
    """Tests for RecommendationScorerClient.rank."""

    @respx.mock
    async def test_returns_ids_in_rank_order(self, client, request_body) -> None:
        """Should send the camelCase profile and keep the scorer's order."""
        route = respx.post(f"{SCORER_URL}/recommendations").mock(
            return_value=httpx.Response(
                200,
                json={
                    "success": True,
                    "recipes": [{"id": "b", "score": 0.9}, {"id": "a"}, {"id": "b"}],
                },
            )
        )

        ranked = await client.rank(request_body)

        assert ranked == ["b", "a"]
        sent = orjson.loads(route.calls.last.request.content)
        assert sent == {
            "userId": "user-1",
            "age": 41,
            "healthConditions": ["diabetes"],
            "dietaryPreferences": ["vegetarian"],
        }

    @respx.mock
    async def test_error_status(self, client, request_body) -> None:
        respx.post(f"{SCORER_URL}/recommendations").mock(
            return_value=httpx.Response(502)
        )

        with pytest.raises(ScorerUnavailableError) as exc_info:
            await client.rank(request_body)

        assert exc_info.value.status_code == 502

    @respx.mock
    async def test_unsuccessful_body(self, client, request_body) -> None:
        respx.post(f"{SCORER_URL}/recommendations").mock(
            return_value=httpx.Response(200, json={"success": False, "recipes": []})
        )

        with pytest.raises(ScorerUnavailableError):
            await client.rank(request_body)

    @respx.mock
    async def test_malformed_body(self, client, request_body) -> None:
        respx.post(f"{SCORER_URL}/recommendations").mock(
            return_value=httpx.Response(200, content=b"<html>")
        )

        with pytest.raises(ScorerUnavailableError):
            await client.rank(request_body)

    @respx.mock
    async def test_timeout(self, client, request_body) -> None:
        respx.post(f"{SCORER_URL}/recommendations").mock(
            side_effect=httpx.ReadTimeout("slow")
        )

        with pytest.raises(ScorerUnavailableError):
            await client.rank(request_body)

    async def test_requires_initialize(self, mock_settings, request_body) -> None:
        with patch(
            "app.services.recommendations.client.get_settings",
            return_value=mock_settings,
        ):
            scorer = RecommendationScorerClient()

        with pytest.raises(RuntimeError):
            await scorer.rank(request_body)
