"""Health-profile recommendations.

The external scorer only ranks recipe ids. The ranking is cached in Redis
per profile; the counters and viewer flags are always read fresh from the
recipe store so they agree with every other surface.
"""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING, Any

import orjson

from app.cache.redis import get_cache_client
from app.core.config import get_settings
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.users import UserRepository
from app.observability.logging import get_logger
from app.schemas.enums import RecipeStatus
from app.schemas.recipe import RecipeResponse
from app.schemas.recommendations import RecommendationsResponse
from app.services.exceptions import UnauthorizedError, ValidationError
from app.services.recommendations.client import RecommendationScorerClient
from app.services.recommendations.schemas import ScoreRequest


if TYPE_CHECKING:
    from redis.asyncio import Redis

    from app.auth.dependencies import CurrentUser

logger = get_logger(__name__)


def profile_cache_key(prefix: str, request: ScoreRequest) -> str:
    """Stable key for a profile; list order does not matter."""
    canonical = orjson.dumps(
        {
            "userId": request.user_id,
            "age": request.age,
            "healthConditions": sorted(request.health_conditions),
            "dietaryPreferences": sorted(request.dietary_preferences),
        },
        option=orjson.OPT_SORT_KEYS,
    )
    return f"{prefix}:{hashlib.sha256(canonical).hexdigest()}"


class RecommendationService:
    """Ranks recipes for the caller's stored health profile."""

    def __init__(
        self,
        scorer: RecommendationScorerClient | None = None,
        users: UserRepository | None = None,
        recipes: RecipeRepository | None = None,
        cache_client: Redis[Any] | None = None,
    ) -> None:
        self._settings = get_settings()
        self._scorer = scorer or RecommendationScorerClient()
        self._users = users or UserRepository()
        self._recipes = recipes or RecipeRepository()
        self._cache_client = cache_client
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize service resources.

        Called during application startup.
        """
        if self._cache_client is None:
            try:
                self._cache_client = get_cache_client()
            except RuntimeError:
                logger.warning("Redis not available, recommendation caching disabled")

        await self._scorer.initialize()
        self._initialized = True
        logger.info("RecommendationService initialized")

    async def shutdown(self) -> None:
        await self._scorer.shutdown()
        self._initialized = False
        logger.info("RecommendationService shutdown")

    async def recommend(
        self,
        user: CurrentUser | None,
        limit: int | None = None,
    ) -> RecommendationsResponse:
        """Recommendations for the caller.

        Raises:
            UnauthorizedError: No identity.
            ValidationError: The caller has not completed a health profile.
            ScorerUnavailableError: The scorer failed and nothing was cached.
        """
        if user is None:
            raise UnauthorizedError
        if not self._initialized:
            msg = "RecommendationService not initialized"
            raise RuntimeError(msg)

        stored = await self._users.get(user.id)
        if stored is None or not stored.has_completed_health_profile:
            msg = "Please complete your health profile first"
            raise ValidationError(msg)

        request = ScoreRequest(
            user_id=user.id,
            age=stored.age,
            health_conditions=stored.health_conditions,
            dietary_preferences=stored.dietary_preferences,
        )
        key = profile_cache_key(self._settings.recommendations.cache_key_prefix, request)

        ranked = await self._get_from_cache(key)
        cached = ranked is not None
        if ranked is None:
            ranked = await self._scorer.rank(request)
            await self._save_to_cache(key, ranked)

        limit = limit or self._settings.recommendations.limit
        recipes = [
            r
            for r in await self._recipes.get_many(ranked)
            if r.effective_status == RecipeStatus.APPROVED
        ][:limit]

        logger.info(
            "Recommendations served",
            user_id=user.id,
            cached=cached,
            count=len(recipes),
        )
        return RecommendationsResponse(
            recipes=[RecipeResponse.from_document(r, user.id) for r in recipes],
            cached=cached,
        )

    async def _get_from_cache(self, key: str) -> list[str] | None:
        if self._cache_client is None:
            return None
        try:
            raw = await self._cache_client.get(key)
        except Exception:
            logger.exception("Cache read error for recommendations")
            return None
        return [str(i) for i in orjson.loads(raw)] if raw else None

    async def _save_to_cache(self, key: str, ranked: list[str]) -> None:
        if self._cache_client is None:
            return
        try:
            await self._cache_client.setex(
                key,
                self._settings.recommendations.cache_ttl,
                orjson.dumps(ranked),
            )
        except Exception:
            logger.exception("Cache write error for recommendations")
