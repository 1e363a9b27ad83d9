"""Recipe schemas.

This module contains schemas for recipe submission, editing, review and
listing.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BeforeValidator, Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.enums import RecipeStatus, ReviewDecision


if TYPE_CHECKING:
    from app.database.documents import RecipeDocument, RecipeSnapshot


def _amount_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


AmountText = Annotated[str, BeforeValidator(_amount_text)]


# =============================================================================
# Requests
# =============================================================================


class IngredientIn(APIRequest):
    """One ingredient line as submitted."""

    name: str = Field(..., min_length=1)
    amount: AmountText = Field(default="", description="Free text, e.g. '200' or '1/2'")
    unit: AmountText = ""


class RecipeCreateRequest(APIRequest):
    """Body for submitting a new recipe."""

    name: str = Field(default="", description="Recipe name")
    description: str = ""
    image: str = ""
    category: str | None = None
    cuisine: str | None = None
    prep_time: int = Field(default=0, ge=0)
    cook_time: int = Field(default=0, ge=0)
    servings: int = Field(default=1, ge=1)
    difficulty: str | None = None
    ingredients: list[IngredientIn] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    health_tags: list[str] = Field(default_factory=list)
    suitable_for: list[str] = Field(default_factory=list)
    not_suitable_for: list[str] = Field(default_factory=list)
    nutrition: dict[str, float] | None = None


class RecipeUpdateRequest(APIRequest):
    """Partial edit of a recipe's content.

    Moderation, authorship and social fields are not part of this model, so
    clients cannot change them through an edit.
    """

    name: str | None = None
    description: str | None = None
    image: str | None = None
    category: str | None = None
    cuisine: str | None = None
    prep_time: int | None = Field(default=None, ge=0)
    cook_time: int | None = Field(default=None, ge=0)
    servings: int | None = Field(default=None, ge=1)
    difficulty: str | None = None
    ingredients: list[IngredientIn] | None = None
    instructions: list[str] | None = None
    tags: list[str] | None = None
    health_tags: list[str] | None = None
    suitable_for: list[str] | None = None
    not_suitable_for: list[str] | None = None
    nutrition: dict[str, float] | None = None


class ReviewRequest(APIRequest):
    """Admin moderation decision."""

    decision: ReviewDecision
    note: str | None = Field(default=None, description="Shown to the author on rejection")


# =============================================================================
# Responses
# =============================================================================


class IngredientResponse(APIResponse):
    name: str
    amount: str = ""
    unit: str = ""


class RecipeSummary(APIResponse):
    """Recipe content without moderation or social state.

    This is also the shape of the snapshots embedded in meal plans.
    """

    id: str
    name: str
    description: str = ""
    image: str = ""
    category: str | None = None
    cuisine: str | None = None
    prep_time: int = 0
    cook_time: int = 0
    servings: int = 1
    difficulty: str | None = None
    ingredients: list[IngredientResponse] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    health_tags: list[str] = Field(default_factory=list)
    suitable_for: list[str] = Field(default_factory=list)
    not_suitable_for: list[str] = Field(default_factory=list)
    nutrition: dict[str, float] | None = None

    @classmethod
    def from_snapshot(cls, snapshot: RecipeSnapshot) -> RecipeSummary:
        return cls(**snapshot.model_dump(by_alias=False, include=set(cls.model_fields)))


class RecipeResponse(RecipeSummary):
    """A recipe as rendered for one viewer."""

    status: RecipeStatus
    author_id: str | None = None
    author_email: str | None = None
    likes_count: int = Field(default=0, ge=0)
    saves_count: int = Field(default=0, ge=0)
    comments_count: int = Field(default=0, ge=0)
    is_liked: bool = False
    is_saved: bool = False
    reviewed_at: datetime | None = None
    review_note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(
        cls,
        recipe: RecipeDocument,
        viewer_id: str | None = None,
    ) -> RecipeResponse:
        """Render a stored recipe; legacy recipes report ``approved``."""
        data = recipe.model_dump(
            by_alias=False,
            include=set(cls.model_fields) - {"status", "is_liked", "is_saved"},
        )
        # Counters are clamped by the store, but never show a negative.
        for key in ("likes_count", "saves_count", "comments_count"):
            data[key] = max(0, data.get(key) or 0)
        return cls(
            **data,
            status=recipe.effective_status,
            is_liked=viewer_id is not None and viewer_id in recipe.liked_by,
            is_saved=viewer_id is not None and viewer_id in recipe.saved_by,
        )


class RecipeListResponse(APIResponse):
    """Recipes, newest first."""

    recipes: list[RecipeResponse]
    total: int = Field(..., ge=0, description="Matches before pagination")
    skip: int = 0
    limit: int = 0


class RecipeDeletedResponse(APIResponse):
    recipe_id: str
    comments_deleted: int = 0
    users_updated: int = 0
