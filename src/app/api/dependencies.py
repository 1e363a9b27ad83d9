"""FastAPI dependencies for service access.

This module provides reusable dependencies for accessing application services
in FastAPI route handlers. Services are created during application startup
and stored in app.state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import Request

from app.core.exceptions import ServiceUnavailableException


if TYPE_CHECKING:
    from app.services.comments.service import CommentService
    from app.services.meal_plans.service import MealPlanService
    from app.services.moderation.service import RecipeService
    from app.services.recommendations.service import RecommendationService
    from app.services.shopping.service import ShoppingService
    from app.services.social.repair import CounterRepairService
    from app.services.social.service import SocialService
    from app.services.users.service import UserService


def _from_state(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ServiceUnavailableException(f"{label} not available")
    return service


async def get_recipe_service(request: Request) -> RecipeService:
    """Get the recipe moderation service from app state.

    Raises:
        ServiceUnavailableException: 503 if the service is not initialized.
    """
    return _from_state(request, "recipe_service", "Recipe service")


async def get_comment_service(request: Request) -> CommentService:
    return _from_state(request, "comment_service", "Comment service")


async def get_social_service(request: Request) -> SocialService:
    return _from_state(request, "social_service", "Social service")


async def get_repair_service(request: Request) -> CounterRepairService:
    return _from_state(request, "repair_service", "Counter repair service")


async def get_meal_plan_service(request: Request) -> MealPlanService:
    return _from_state(request, "meal_plan_service", "Meal plan service")


async def get_shopping_service(request: Request) -> ShoppingService:
    return _from_state(request, "shopping_service", "Shopping list service")


async def get_user_service(request: Request) -> UserService:
    return _from_state(request, "user_service", "User service")


async def get_recommendation_service(request: Request) -> RecommendationService:
    return _from_state(request, "recommendation_service", "Recommendation service")
