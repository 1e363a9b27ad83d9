"""Recommendation schemas."""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import APIResponse
from app.schemas.recipe import RecipeResponse


class RecommendationsResponse(APIResponse):
    """Approved recipes ranked for the caller's health profile.

    Counters and the caller's liked/saved flags come from this service's
    own store, not from the scorer.
    """

    recipes: list[RecipeResponse]
    cached: bool = Field(default=False, description="Ranking served from cache")
