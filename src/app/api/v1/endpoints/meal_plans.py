"""Meal plan endpoints.

One plan per user and calendar date, with four meal slots. Recipes are
stored as snapshots taken when they are added.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.dependencies import get_meal_plan_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, RequirePermissions, get_current_user
from app.auth.permissions import Permission
from app.schemas.enums import MealType
from app.schemas.meal_plan import (
    AddMealRequest,
    MealPlanListResponse,
    MealPlanResponse,
    MealRemovedResponse,
    ReplaceSlotRequest,
)
from app.services.exceptions import ServiceError
from app.services.meal_plans.service import MealPlanService  # noqa: TC001


router = APIRouter(tags=["Meal Plans"])

PlanDay = Annotated[date, Path(alias="date", description="YYYY-MM-DD")]
Slot = Annotated[MealType, Path(alias="mealType")]
Writer = Annotated[
    CurrentUser, Depends(RequirePermissions(Permission.MEAL_PLAN_WRITE))
]


@router.get(
    "/meal-plans",
    response_model=MealPlanListResponse,
    summary="List my meal plans",
    description="Sorted by date ascending, optionally bounded by from/to (inclusive).",
)
async def list_meal_plans(
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
    start: Annotated[date | None, Query(alias="from")] = None,
    end: Annotated[date | None, Query(alias="to")] = None,
) -> MealPlanListResponse:
    try:
        return await service.list_plans(
            user,
            start=start.isoformat() if start else None,
            end=end.isoformat() if end else None,
        )
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.get(
    "/meal-plans/{date}",
    response_model=MealPlanResponse,
    summary="Get the plan for one day",
    responses={404: {"description": "No plan for this date"}},
)
async def get_meal_plan(
    plan_date: PlanDay,
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> MealPlanResponse:
    try:
        return await service.get(user, plan_date.isoformat())
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/meal-plans/meals",
    response_model=MealPlanResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a recipe to a meal slot",
    description="Creates the day's plan when it does not exist yet.",
    responses={404: {"description": "Recipe not found"}},
)
async def add_meal(
    body: AddMealRequest,
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Writer,
) -> MealPlanResponse:
    try:
        return await service.add_meal(user, body.date, body.meal_type, body.recipe_id)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.put(
    "/meal-plans/{date}/{mealType}",
    response_model=MealPlanResponse,
    summary="Replace one meal slot",
    description="Only the named slot changes; the other three are left as they are.",
)
async def replace_slot(
    plan_date: PlanDay,
    meal_type: Slot,
    body: ReplaceSlotRequest,
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Writer,
) -> MealPlanResponse:
    try:
        return await service.replace_slot(
            user, plan_date.isoformat(), meal_type, body.recipe_ids
        )
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/meal-plans/{date}/{mealType}/{index}",
    response_model=MealRemovedResponse,
    summary="Remove one meal",
    description="The plan itself is deleted once all of its slots are empty.",
    responses={404: {"description": "Plan or meal not found"}},
)
async def remove_meal(
    plan_date: PlanDay,
    meal_type: Slot,
    index: Annotated[int, Path(ge=0)],
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Writer,
) -> MealRemovedResponse:
    try:
        return await service.remove_meal(user, plan_date.isoformat(), meal_type, index)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/meal-plans/{date}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete the plan for one day",
    responses={404: {"description": "No plan for this date"}},
)
async def delete_meal_plan(
    plan_date: PlanDay,
    service: Annotated[MealPlanService, Depends(get_meal_plan_service)],
    user: Writer,
) -> None:
    try:
        await service.delete(user, plan_date.isoformat())
    except ServiceError as e:
        raise to_app_exception(e) from None
