"""Like/save toggle schemas.

Toggle responses carry absolute values only: the new membership flag, the
recipe's canonical counter and the caller's complete mirrored list. Clients
replace their local copies with these values instead of applying deltas.
"""

from __future__ import annotations

from pydantic import Field

from app.schemas.base import APIResponse


class LikeToggleResponse(APIResponse):
    """Result of toggling a like on a recipe."""

    recipe_id: str
    is_liked: bool
    likes_count: int = Field(..., ge=0)
    liked_recipes: list[str] = Field(
        default_factory=list,
        description="Every recipe id the caller now likes",
    )


class SaveToggleResponse(APIResponse):
    """Result of toggling a save on a recipe."""

    recipe_id: str
    is_saved: bool
    saves_count: int = Field(..., ge=0)
    saved_recipes: list[str] = Field(
        default_factory=list,
        description="Every recipe id the caller now has saved",
    )


class RepairReportResponse(APIResponse):
    """Outcome of a counter repair run."""

    recipes_scanned: int
    recipes_repaired: int
    users_repaired: int
