"""Meal plan schemas."""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BeforeValidator, Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.enums import MealType
from app.schemas.recipe import RecipeSummary


if TYPE_CHECKING:
    from app.database.documents import MealPlanDocument


def _iso_date(value: Any) -> str:
    """Normalise to ``YYYY-MM-DD``; full ISO timestamps keep only the date."""
    if isinstance(value, date_type):
        return value.isoformat()[:10]
    text = str(value).strip()
    return date_type.fromisoformat(text[:10]).isoformat()


PlanDate = Annotated[str, BeforeValidator(_iso_date)]


class AddMealRequest(APIRequest):
    """Add one recipe to one slot of a day's plan."""

    date: PlanDate = Field(..., description="Calendar date, YYYY-MM-DD")
    meal_type: MealType
    recipe_id: str = Field(..., min_length=1)


class ReplaceSlotRequest(APIRequest):
    """Replace one slot with the given recipes, in order."""

    recipe_ids: list[str] = Field(default_factory=list)


class MealPlanResponse(APIResponse):
    id: str
    user_id: str
    date: str
    breakfast: list[RecipeSummary] = Field(default_factory=list)
    lunch: list[RecipeSummary] = Field(default_factory=list)
    dinner: list[RecipeSummary] = Field(default_factory=list)
    snack: list[RecipeSummary] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, plan: MealPlanDocument) -> MealPlanResponse:
        slots = {
            str(meal_type): [RecipeSummary.from_snapshot(s) for s in plan.slot(meal_type)]
            for meal_type in MealType
        }
        return cls(
            id=plan.id,
            user_id=plan.user_id,
            date=plan.date,
            created_at=plan.created_at,
            updated_at=plan.updated_at,
            **slots,
        )


class MealPlanListResponse(APIResponse):
    """Plans sorted by date ascending."""

    meal_plans: list[MealPlanResponse]


class MealRemovedResponse(APIResponse):
    """Result of removing one entry; ``meal_plan`` is null once the day is empty."""

    date: str
    meal_type: MealType
    index: int
    plan_deleted: bool
    meal_plan: MealPlanResponse | None = None
