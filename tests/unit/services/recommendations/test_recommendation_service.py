"""Unit tests for RecommendationService."""

from __future__ import annotations

from unittest.mock import AsyncMock

import orjson
import pytest

from app.services.exceptions import UnauthorizedError, ValidationError
from app.services.recommendations.exceptions import ScorerUnavailableError
from app.services.recommendations.schemas import ScoreRequest
from app.services.recommendations.service import (
    RecommendationService,
    profile_cache_key,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def scorer() -> AsyncMock:
    client = AsyncMock()
    client.rank.return_value = ["r2", "r1"]
    return client


@pytest.fixture
def users_repo(user_factory) -> AsyncMock:
    repo = AsyncMock()
    repo.get.return_value = user_factory(
        age=30,
        dietary_preferences=["vegan"],
        has_completed_health_profile=True,
    )
    return repo


@pytest.fixture
def recipes_repo(recipe_factory) -> AsyncMock:
    repo = AsyncMock()
    repo.get_many.return_value = [
        recipe_factory("r2", liked_by=["user-1"], likes_count=1),
        recipe_factory("r1"),
    ]
    return repo


@pytest.fixture
def cache() -> AsyncMock:
    client = AsyncMock()
    client.get.return_value = None
    return client


@pytest.fixture
async def service(scorer, users_repo, recipes_repo, cache) -> RecommendationService:
    svc = RecommendationService(scorer, users_repo, recipes_repo, cache)
    await svc.initialize()
    return svc


class TestRecommend:
    """Tests for RecommendationService.recommend."""

    @pytest.mark.asyncio
    async def test_cache_miss_calls_scorer_and_caches(
        self, service, scorer, recipes_repo, cache, member
    ) -> None:
        """Should rank via the scorer and hydrate counters from the store."""
        result = await service.recommend(member)

        scorer.rank.assert_awaited_once()
        recipes_repo.get_many.assert_awaited_once_with(["r2", "r1"])
        cache.setex.assert_awaited_once()
        assert orjson.loads(cache.setex.await_args.args[2]) == ["r2", "r1"]
        assert result.cached is False
        assert [r.id for r in result.recipes] == ["r2", "r1"]
        assert result.recipes[0].is_liked is True
        assert result.recipes[0].likes_count == 1

    @pytest.mark.asyncio
    async def test_cache_hit_skips_scorer(self, service, scorer, cache, member) -> None:
        cache.get.return_value = orjson.dumps(["r1"])

        result = await service.recommend(member)

        scorer.rank.assert_not_awaited()
        assert result.cached is True

    @pytest.mark.asyncio
    async def test_drops_unapproved_and_limits(
        self, service, recipes_repo, recipe_factory, member
    ) -> None:
        recipes_repo.get_many.return_value = [
            recipe_factory("r2", status="pending"),
            recipe_factory("r1"),
            recipe_factory("r3"),
        ]

        result = await service.recommend(member, limit=1)

        assert [r.id for r in result.recipes] == ["r1"]

    @pytest.mark.asyncio
    async def test_cache_errors_are_not_fatal(self, service, cache, member) -> None:
        cache.get.side_effect = ConnectionError("redis down")
        cache.setex.side_effect = ConnectionError("redis down")

        result = await service.recommend(member)

        assert len(result.recipes) == 2

    @pytest.mark.asyncio
    async def test_scorer_failure_propagates(self, service, scorer, member) -> None:
        scorer.rank.side_effect = ScorerUnavailableError()

        with pytest.raises(ScorerUnavailableError):
            await service.recommend(member)

    @pytest.mark.asyncio
    async def test_incomplete_profile(
        self, service, users_repo, user_factory, member
    ) -> None:
        users_repo.get.return_value = user_factory(has_completed_health_profile=False)

        with pytest.raises(ValidationError, match="health profile"):
            await service.recommend(member)

    @pytest.mark.asyncio
    async def test_requires_identity(self, service) -> None:
        with pytest.raises(UnauthorizedError):
            await service.recommend(None)


class TestProfileCacheKey:
    """Tests for profile_cache_key."""

    def test_list_order_does_not_matter(self) -> None:
        first = ScoreRequest(user_id="u", health_conditions=["a", "b"])
        second = ScoreRequest(user_id="u", health_conditions=["b", "a"])

        assert profile_cache_key("p", first) == profile_cache_key("p", second)

    def test_profile_change_changes_key(self) -> None:
        first = ScoreRequest(user_id="u", age=30)
        second = ScoreRequest(user_id="u", age=31)

        assert profile_cache_key("p", first) != profile_cache_key("p", second)
        assert profile_cache_key("p", first).startswith("p:")
