"""Recipe endpoints.

Provides:
- GET /recipes for the public (approved) catalogue, or everything for admins
- GET /recipes/mine for the caller's own submissions in every state
- GET/POST/PATCH/DELETE /recipes[/{recipeId}] for recipe CRUD
- POST /recipes/{recipeId}/review for the admin moderation decision
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from app.api.dependencies import get_recipe_service
from app.api.errors import to_app_exception
from app.auth.dependencies import (
    CurrentUser,
    RequirePermissions,
    get_current_user,
    get_current_user_optional,
)
from app.auth.permissions import Permission
from app.core.exceptions import ForbiddenException
from app.schemas.enums import RecipeStatus
from app.schemas.recipe import (
    RecipeCreateRequest,
    RecipeDeletedResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeUpdateRequest,
    ReviewRequest,
)
from app.services.exceptions import ServiceError
from app.services.moderation.service import RecipeService  # noqa: TC001


router = APIRouter(tags=["Recipes"])

RecipeId = Annotated[str, Path(alias="recipeId", min_length=1)]


@router.get(
    "/recipes",
    response_model=RecipeListResponse,
    summary="List recipes",
    description=(
        "Returns approved recipes, including ones created before moderation "
        "existed, newest first. Admins may pass includeAll to see every state, "
        "optionally narrowed by status."
    ),
    responses={403: {"description": "includeAll requested by a non-admin"}},
)
async def list_recipes(
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    viewer: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
    recipe_status: Annotated[
        RecipeStatus | None,
        Query(alias="status", description="Status filter, used with includeAll"),
    ] = None,
    include_all: Annotated[bool, Query(alias="includeAll")] = False,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=0, le=200, description="0 means no limit")] = 0,
) -> RecipeListResponse:
    if include_all and (viewer is None or not viewer.is_admin()):
        raise ForbiddenException("Only admins can list recipes in every state")
    return await service.list_recipes(
        status=recipe_status,
        include_all=include_all,
        skip=skip,
        limit=limit,
        viewer=viewer,
    )


@router.get(
    "/recipes/mine",
    response_model=RecipeListResponse,
    summary="List my submissions",
)
async def list_my_recipes(
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> RecipeListResponse:
    """Return the caller's recipes whatever their moderation state."""
    try:
        return await service.list_mine(user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.get(
    "/recipes/{recipeId}",
    response_model=RecipeResponse,
    summary="Get a recipe",
    responses={404: {"description": "Missing, or not visible to the caller"}},
)
async def get_recipe(
    recipe_id: RecipeId,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    viewer: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
) -> RecipeResponse:
    try:
        return await service.get(recipe_id, viewer)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/recipes",
    response_model=RecipeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a recipe",
    description=(
        "Admin submissions are approved immediately; everyone else's start "
        "as pending and are hidden from the public catalogue until reviewed."
    ),
    responses={400: {"description": "Missing name or ingredients"}},
)
async def create_recipe(
    body: RecipeCreateRequest,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    user: Annotated[
        CurrentUser, Depends(RequirePermissions(Permission.RECIPE_CREATE))
    ],
) -> RecipeResponse:
    try:
        return await service.create(body, user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.patch(
    "/recipes/{recipeId}",
    response_model=RecipeResponse,
    summary="Edit a recipe",
    description="Owner or admin. Status, author, counters and review fields are not editable.",
    responses={
        403: {"description": "Caller is neither the owner nor an admin"},
        404: {"description": "Recipe not found"},
    },
)
async def update_recipe(
    recipe_id: RecipeId,
    body: RecipeUpdateRequest,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    user: Annotated[
        CurrentUser, Depends(RequirePermissions(Permission.RECIPE_UPDATE))
    ],
) -> RecipeResponse:
    try:
        return await service.update(recipe_id, body, user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/recipes/{recipeId}",
    response_model=RecipeDeletedResponse,
    summary="Delete a recipe",
    description="Also deletes its comments and removes it from every user's lists.",
)
async def delete_recipe(
    recipe_id: RecipeId,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    user: Annotated[
        CurrentUser, Depends(RequirePermissions(Permission.RECIPE_DELETE))
    ],
) -> RecipeDeletedResponse:
    try:
        return await service.delete(recipe_id, user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/recipes/{recipeId}/review",
    response_model=RecipeResponse,
    summary="Approve or reject a recipe",
    responses={403: {"description": "Admin role required"}},
)
async def review_recipe(
    recipe_id: RecipeId,
    body: ReviewRequest,
    service: Annotated[RecipeService, Depends(get_recipe_service)],
    user: Annotated[
        CurrentUser, Depends(RequirePermissions(Permission.RECIPE_REVIEW))
    ],
) -> RecipeResponse:
    try:
        return await service.review(recipe_id, body.decision, user, note=body.note)
    except ServiceError as e:
        raise to_app_exception(e) from None
