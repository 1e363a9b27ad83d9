"""Meal plan management.

One plan per user per calendar date, with four independently mutated meal
slots holding full recipe snapshots taken when each meal was added.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.database.repositories.meal_plans import MealPlanRepository
from app.database.repositories.recipes import RecipeRepository
from app.observability.logging import get_logger
from app.schemas.enums import MealType
from app.schemas.meal_plan import (
    MealPlanListResponse,
    MealPlanResponse,
    MealRemovedResponse,
)
from app.services.exceptions import NotFoundError, UnauthorizedError
from app.services.moderation.service import can_view


if TYPE_CHECKING:
    from app.auth.dependencies import CurrentUser

logger = get_logger(__name__)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise UnauthorizedError
    return user


class MealPlanService:
    """Per-day meal slot operations for the calling user."""

    def __init__(
        self,
        meal_plans: MealPlanRepository | None = None,
        recipes: RecipeRepository | None = None,
    ) -> None:
        self._meal_plans = meal_plans or MealPlanRepository()
        self._recipes = recipes or RecipeRepository()

    async def list_plans(
        self,
        user: CurrentUser | None,
        *,
        start: str | None = None,
        end: str | None = None,
    ) -> MealPlanListResponse:
        user = _require_user(user)
        plans = await self._meal_plans.list_for_user(user.id, start=start, end=end)
        return MealPlanListResponse(
            meal_plans=[MealPlanResponse.from_document(p) for p in plans]
        )

    async def get(self, user: CurrentUser | None, date: str) -> MealPlanResponse:
        user = _require_user(user)
        plan = await self._meal_plans.get(user.id, date)
        if plan is None:
            msg = "Meal plan not found"
            raise NotFoundError(msg)
        return MealPlanResponse.from_document(plan)

    async def add_meal(
        self,
        user: CurrentUser | None,
        date: str,
        meal_type: MealType,
        recipe_id: str,
    ) -> MealPlanResponse:
        """Append a snapshot of the recipe to one slot of the day's plan."""
        user = _require_user(user)
        recipe = await self._recipes.get(recipe_id)
        if recipe is None or not can_view(recipe, user):
            msg = "Recipe not found"
            raise NotFoundError(msg)

        plan = await self._meal_plans.push_meal(
            user.id, date, MealType(meal_type), recipe.snapshot(), datetime.now(UTC)
        )
        logger.info(
            "Meal added",
            user_id=user.id,
            date=date,
            meal_type=str(meal_type),
            recipe_id=recipe_id,
        )
        return MealPlanResponse.from_document(plan)

    async def remove_meal(
        self,
        user: CurrentUser | None,
        date: str,
        meal_type: MealType,
        index: int,
    ) -> MealRemovedResponse:
        """Remove one entry; the plan is deleted once every slot is empty."""
        user = _require_user(user)
        meal_type = MealType(meal_type)
        if index < 0:
            msg = "Meal not found"
            raise NotFoundError(msg)

        plan = await self._meal_plans.remove_at(
            user.id, date, meal_type, index, datetime.now(UTC)
        )
        if plan is None:
            if await self._meal_plans.get(user.id, date) is None:
                msg = "Meal plan not found"
            else:
                msg = "Meal not found"
            raise NotFoundError(msg)

        deleted = plan.is_empty and await self._meal_plans.delete_if_empty(plan.id)
        if deleted:
            logger.info("Empty meal plan deleted", user_id=user.id, date=date)

        return MealRemovedResponse(
            date=date,
            meal_type=meal_type,
            index=index,
            plan_deleted=deleted,
            meal_plan=None if deleted else MealPlanResponse.from_document(plan),
        )

    async def replace_slot(
        self,
        user: CurrentUser | None,
        date: str,
        meal_type: MealType,
        recipe_ids: list[str],
    ) -> MealPlanResponse:
        """Replace exactly one slot with fresh snapshots of ``recipe_ids``."""
        user = _require_user(user)
        recipes = await self._recipes.get_many(list(dict.fromkeys(recipe_ids)))
        by_id = {r.id: r for r in recipes if can_view(r, user)}
        missing = [r for r in recipe_ids if r not in by_id]
        if missing:
            msg = f"Recipe not found: {missing[0]}"
            raise NotFoundError(msg)

        plan = await self._meal_plans.set_slot(
            user.id,
            date,
            MealType(meal_type),
            [by_id[r].snapshot() for r in recipe_ids],
            datetime.now(UTC),
        )
        if plan is None:
            msg = "Meal plan not found"
            raise NotFoundError(msg)

        if plan.is_empty and await self._meal_plans.delete_if_empty(plan.id):
            logger.info("Empty meal plan deleted", user_id=user.id, date=date)
        return MealPlanResponse.from_document(plan)

    async def delete(self, user: CurrentUser | None, date: str) -> None:
        user = _require_user(user)
        if not await self._meal_plans.delete(user.id, date):
            msg = "Meal plan not found"
            raise NotFoundError(msg)
        logger.info("Meal plan deleted", user_id=user.id, date=date)
