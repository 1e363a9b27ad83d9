"""Recommendation service module.

Wraps the external scorer and hydrates its ranking from the recipe store.
"""

from app.services.recommendations.client import RecommendationScorerClient
from app.services.recommendations.exceptions import ScorerUnavailableError
from app.services.recommendations.service import RecommendationService


__all__ = [
    "RecommendationScorerClient",
    "RecommendationService",
    "ScorerUnavailableError",
]
