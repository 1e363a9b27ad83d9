"""Recommendation scorer HTTP client.

This module provides an async HTTP client for the external AI scorer that
ranks recipes for a health profile.
"""

from __future__ import annotations

import httpx
import orjson

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.services.recommendations.exceptions import ScorerUnavailableError
from app.services.recommendations.schemas import ScoreRequest, ScoreResponse


logger = get_logger(__name__)


class RecommendationScorerClient:
    """HTTP client for the recommendation scorer.

    Example:
        ```python
        client = RecommendationScorerClient()
        await client.initialize()

        ranked_ids = await client.rank(ScoreRequest(user_id="u1", age=30))

        await client.shutdown()
        ```
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._settings = get_settings()
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @property
    def base_url(self) -> str:
        """Get the base URL of the scorer."""
        url = self._settings.downstream_services.recommendation_engine.url
        if not url:
            msg = "Recommendation engine URL not configured"
            raise ScorerUnavailableError(msg)
        return url.rstrip("/")

    async def initialize(self) -> None:
        """Initialize HTTP client."""
        if self._http_client is None:
            timeout = self._settings.downstream_services.recommendation_engine.timeout
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(timeout),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        logger.info("RecommendationScorerClient initialized")

    async def shutdown(self) -> None:
        """Release resources."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("RecommendationScorerClient shutdown")

    async def rank(self, request: ScoreRequest) -> list[str]:
        """Ask the scorer for recipe ids ranked for ``request``'s profile.

        Raises:
            ScorerUnavailableError: Unreachable, timed out, non-2xx or
                malformed response.
        """
        if self._http_client is None:
            msg = "Client not initialized. Call initialize() first."
            raise RuntimeError(msg)

        url = f"{self.base_url}/recommendations"
        payload = orjson.dumps(request.model_dump(by_alias=True))

        try:
            response = await self._http_client.post(url, content=payload)
        except httpx.TimeoutException as e:
            logger.warning("Request to recommendation scorer timed out")
            raise ScorerUnavailableError from e
        except httpx.RequestError as e:
            logger.warning("Failed to connect to recommendation scorer", error=str(e))
            raise ScorerUnavailableError from e

        if response.status_code != 200:
            logger.warning(
                "Recommendation scorer returned error",
                status_code=response.status_code,
            )
            raise ScorerUnavailableError(status_code=response.status_code)

        try:
            result = ScoreResponse.model_validate(orjson.loads(response.content))
        except (orjson.JSONDecodeError, ValueError) as e:
            logger.warning("Recommendation scorer returned malformed body")
            raise ScorerUnavailableError from e

        if not result.success:
            raise ScorerUnavailableError

        ranked = list(dict.fromkeys(r.id for r in result.recipes))
        logger.debug("Recommendations ranked", user_id=request.user_id, count=len(ranked))
        return ranked
