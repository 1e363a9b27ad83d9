"""Wire models for the recommendation scorer."""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import DownstreamRequest, DownstreamResponse


class ScoreRequest(DownstreamRequest):
    """Health profile sent to the scorer."""

    user_id: str
    age: int | None = None
    health_conditions: list[str] = Field(default_factory=list)
    dietary_preferences: list[str] = Field(default_factory=list)


class ScoredRecipe(DownstreamResponse):
    id: str
    score: float | None = None
    reason: str | None = None


class ScoreResponse(DownstreamResponse):
    """Ranked recipes, best first. Only the ids are used."""

    success: bool = True
    recipes: list[ScoredRecipe] = Field(default_factory=list)
