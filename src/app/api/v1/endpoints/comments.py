"""Comment thread endpoints.

Provides:
- GET /recipes/{recipeId}/comments for the nested thread (or counts only)
- POST /recipes/{recipeId}/comments for a comment or a reply
- PATCH/DELETE /comments/{commentId}
- POST /comments/{commentId}/like
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Request, Response, status

from app.api.dependencies import get_comment_service
from app.api.errors import to_app_exception
from app.auth.dependencies import (
    CurrentUser,
    RequirePermissions,
    get_current_user,
    get_current_user_optional,
)
from app.auth.permissions import Permission
from app.cache.rate_limit import rate_limit
from app.core.config import get_settings
from app.schemas.comment import (
    CommentCountResponse,
    CommentCreateRequest,
    CommentDeletedResponse,
    CommentLikeResponse,
    CommentPostedResponse,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdateRequest,
)
from app.services.comments.service import CommentService
from app.services.exceptions import ServiceError


router = APIRouter(tags=["Comments"])

_settings = get_settings()

RecipeId = Annotated[str, Path(alias="recipeId", min_length=1)]
CommentId = Annotated[str, Path(alias="commentId", min_length=1)]


@router.get(
    "/recipes/{recipeId}/comments",
    response_model=CommentThreadResponse | CommentCountResponse,
    summary="Get a recipe's comment thread",
    description=(
        "Top-level comments newest first, each with its replies oldest first. "
        "With countOnly the bodies are omitted and only the counts returned."
    ),
)
async def list_comments(
    recipe_id: RecipeId,
    service: Annotated[CommentService, Depends(get_comment_service)],
    viewer: Annotated[CurrentUser | None, Depends(get_current_user_optional)],
    count_only: Annotated[bool, Query(alias="countOnly")] = False,
) -> CommentThreadResponse | CommentCountResponse:
    if count_only:
        return await service.count(recipe_id)
    return await service.get_thread(recipe_id, viewer)


@router.post(
    "/recipes/{recipeId}/comments",
    response_model=CommentPostedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a comment or reply",
    responses={
        400: {"description": "Empty content, or replying to a reply"},
        404: {"description": "Recipe or parent comment not found"},
        429: {"description": "Rate limit exceeded"},
    },
)
@rate_limit(_settings.rate_limiting.comments)
async def post_comment(
    request: Request,
    response: Response,
    recipe_id: RecipeId,
    body: CommentCreateRequest,
    service: Annotated[CommentService, Depends(get_comment_service)],
    user: Annotated[
        CurrentUser, Depends(RequirePermissions(Permission.COMMENT_CREATE))
    ],
) -> CommentPostedResponse:
    try:
        return await service.post(
            recipe_id,
            user,
            body.content,
            parent_id=body.parent_id,
            user_name=body.user_name,
        )
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.patch(
    "/comments/{commentId}",
    response_model=CommentResponse,
    summary="Edit a comment",
    responses={403: {"description": "Only the author may edit"}},
)
async def edit_comment(
    comment_id: CommentId,
    body: CommentUpdateRequest,
    service: Annotated[CommentService, Depends(get_comment_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CommentResponse:
    try:
        return await service.edit(comment_id, user, body.content)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.delete(
    "/comments/{commentId}",
    response_model=CommentDeletedResponse,
    summary="Delete a comment",
    responses={403: {"description": "Only the author or an admin may delete"}},
)
async def delete_comment(
    comment_id: CommentId,
    service: Annotated[CommentService, Depends(get_comment_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CommentDeletedResponse:
    try:
        return await service.delete(comment_id, user)
    except ServiceError as e:
        raise to_app_exception(e) from None


@router.post(
    "/comments/{commentId}/like",
    response_model=CommentLikeResponse,
    summary="Like or unlike a comment",
)
@rate_limit(_settings.rate_limiting.social)
async def like_comment(
    request: Request,
    response: Response,
    comment_id: CommentId,
    service: Annotated[CommentService, Depends(get_comment_service)],
    user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CommentLikeResponse:
    try:
        return await service.toggle_like(comment_id, user)
    except ServiceError as e:
        raise to_app_exception(e) from None
