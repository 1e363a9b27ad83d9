"""Like and save toggles.

Provides:
- POST /recipes/{recipeId}/like
- POST /recipes/{recipeId}/save

Both respond with absolute values: the recipe's counter after the change
and the caller's complete liked/saved list.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, Response

from app.api.dependencies import get_social_service
from app.api.errors import to_app_exception
from app.auth.dependencies import CurrentUser, get_current_user
from app.cache.rate_limit import rate_limit
from app.core.config import get_settings
from app.schemas.social import LikeToggleResponse, SaveToggleResponse
from app.services.exceptions import ServiceError
from app.services.social.service import SocialService


router = APIRouter(tags=["Social"])

_SOCIAL_LIMIT = get_settings().rate_limiting.social


@router.post(
    "/recipes/{recipeId}/like",
    response_model=LikeToggleResponse,
    summary="Like or unlike a recipe",
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Recipe not found"},
        429: {"description": "Rate limit exceeded"},
    },
)
@rate_limit(_SOCIAL_LIMIT)
async def toggle_like(
    request: Request,
    response: Response,
    recipe_id: Annotated[str, Path(alias="recipeId", min_length=1)],
    service: Annotated[SocialService, Depends(get_social_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> LikeToggleResponse:
    try:
        return await service.toggle_like(recipe_id, user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/recipes/{recipeId}/save",
    response_model=SaveToggleResponse,
    summary="Save or unsave a recipe",
    responses={
        401: {"description": "Authentication required"},
        404: {"description": "Recipe not found"},
        429: {"description": "Rate limit exceeded"},
    },
)
@rate_limit(_SOCIAL_LIMIT)
async def toggle_save(
    request: Request,
    response: Response,
    recipe_id: Annotated[str, Path(alias="recipeId", min_length=1)],
    service: Annotated[SocialService, Depends(get_social_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> SaveToggleResponse:
    try:
        return await service.toggle_save(recipe_id, user)
    except ServiceError as e:
        raise to_app_exception(e) from None
