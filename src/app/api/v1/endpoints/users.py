"""Current-user endpoints: profile, health profile and liked/saved lists."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import get_user_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, RequirePermissions, get_current_user
from app.auth.permissions import Permission
from app.schemas.recipe import RecipeListResponse
from app.schemas.user import HealthProfileRequest, UserResponse
from app.services.exceptions import ServiceError
from app.services.users.service import UserService  # noqa: TC001


router = APIRouter(prefix="/users/me", tags=["Users"])


@router.get("", response_model=UserResponse, summary="Get my profile")
async def get_me(
    service: Annotated[UserService, Depends(get_user_service)],
    user: Annotated[CurrentUser, Depends(RequirePermissions(Permission.USER_READ))],
) -> UserResponse:
    try:
        return await service.get_profile(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.put(
    "/health-profile",
    response_model=UserResponse,
    summary="Save my health profile",
    description="Required before recommendations can be requested.",
)
async def update_health_profile(
    body: HealthProfileRequest,
    service: Annotated[UserService, Depends(get_user_service)],
    user: Annotated[CurrentUser, Depends(RequirePermissions(Permission.USER_UPDATE))],
) -> UserResponse:
    try:
        return await service.update_health_profile(user, body)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.get(
    "/liked-recipes",
    response_model=RecipeListResponse,
    summary="Recipes I liked",
)
async def get_liked_recipes(
    service: Annotated[UserService, Depends(get_user_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> RecipeListResponse:
    try:
        return await service.liked_recipes(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.get(
    "/saved-recipes",
    response_model=RecipeListResponse,
    summary="Recipes I saved",
)
async def get_saved_recipes(
    service: Annotated[UserService, Depends(get_user_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> RecipeListResponse:
    try:
        return await service.saved_recipes(user)
    except ServiceError as e:
        raise to_app_exception(e) from None
