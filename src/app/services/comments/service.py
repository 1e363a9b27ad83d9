"""Comment thread service.

Handles posting, editing, deleting and liking comments on recipes, and
renders a recipe's thread as an already-nested two-level tree.

The recipe's ``commentsCount`` is a denormalized counter updated after the
comment write in a separate single-document operation. If that second write
does not land, the counter drifts until the repair job recomputes it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.database.repositories.comments import CommentRepository
from app.database.repositories.recipes import RecipeRepository
from app.observability.logging import get_logger
from app.observability.metrics import COMMENT_OPERATIONS, CONSISTENCY_RISKS
from app.schemas.comment import (
    CommentCountResponse,
    CommentDeletedResponse,
    CommentLikeResponse,
    CommentPostedResponse,
    CommentResponse,
    CommentThreadResponse,
)
from app.services.comments.tree import build_comment_tree, count_thread
from app.services.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


if TYPE_CHECKING:
    from app.auth.dependencies import CurrentUser
    from app.database.documents import CommentDocument

logger = get_logger(__name__)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise UnauthorizedError
    return user


def _clean_content(content: str | None) -> str:
    text = (content or "").strip()
    if not text:
        msg = "Comment cannot be empty"
        raise ValidationError(msg)
    return text


def to_response(
    comment: CommentDocument,
    viewer_id: str | None,
    replies: list[CommentDocument] | None = None,
) -> CommentResponse:
    """Render one comment for ``viewer_id``; like count is the set size."""
    return CommentResponse(
        id=comment.id,
        recipe_id=comment.recipe_id,
        user_id=comment.user_id,
        user_name=comment.user_name,
        user_email=comment.user_email,
        content=comment.content,
        parent_id=comment.parent_id,
        likes_count=len(comment.likes),
        is_liked=viewer_id is not None and viewer_id in comment.likes,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        replies=[to_response(reply, viewer_id) for reply in replies or []],
    )


class CommentService:
    """Comment thread engine for recipes."""

    def __init__(
        self,
        comments: CommentRepository | None = None,
        recipes: RecipeRepository | None = None,
    ) -> None:
        self._comments = comments or CommentRepository()
        self._recipes = recipes or RecipeRepository()

    async def get_thread(
        self,
        recipe_id: str,
        viewer: CurrentUser | None = None,
    ) -> CommentThreadResponse:
        """Return the recipe's nested thread."""
        flat = await self._comments.list_for_recipe(recipe_id)
        nodes = build_comment_tree(flat)
        viewer_id = viewer.id if viewer else None

        return CommentThreadResponse(
            comments=[to_response(n.comment, viewer_id, n.replies) for n in nodes],
            total_count=sum(1 + len(n.replies) for n in nodes),
        )

    async def count(self, recipe_id: str) -> CommentCountResponse:
        counts = count_thread(await self._comments.list_for_recipe(recipe_id))
        return CommentCountResponse(
            count=counts.total,
            comments_count=counts.comments,
            replies_count=counts.replies,
        )

    async def post(
        self,
        recipe_id: str,
        user: CurrentUser | None,
        content: str | None,
        *,
        parent_id: str | None = None,
        user_name: str | None = None,
    ) -> CommentPostedResponse:
        """Create a comment, or a reply when ``parent_id`` is given.

        Raises:
            UnauthorizedError: No identity.
            ValidationError: Empty content, or the parent is itself a reply.
            NotFoundError: Recipe or parent comment does not exist.
        """
        user = _require_user(user)
        text = _clean_content(content)
        if not recipe_id:
            msg = "Missing required fields"
            raise ValidationError(msg)

        if not await self._recipes.exists(recipe_id):
            msg = "Recipe not found"
            raise NotFoundError(msg)

        if parent_id:
            parent = await self._comments.get(parent_id)
            if parent is None or parent.recipe_id != recipe_id:
                msg = "Parent comment not found"
                raise NotFoundError(msg)
            if parent.is_reply:
                msg = "Replies can only be added to top-level comments"
                raise ValidationError(msg)

        email = user.email or ""
        fields: dict[str, object] = {
            "recipeId": recipe_id,
            "userId": user.id,
            "userName": (user_name or "").strip() or email.split("@")[0] or user.id,
            "userEmail": email,
            "content": text,
            "likes": [],
            "createdAt": datetime.now(UTC),
        }
        if parent_id:
            fields["parentId"] = parent_id
        comment = await self._comments.insert(fields)

        comments_count = await self._recipes.adjust_comments_count(recipe_id, 1)
        if comments_count is None:
            CONSISTENCY_RISKS.labels(operation="comment_post").inc()
            logger.warning(
                "Comment stored but recipe counter not incremented",
                recipe_id=recipe_id,
                comment_id=comment.id,
            )
            comments_count = 0

        COMMENT_OPERATIONS.labels(operation="reply" if parent_id else "post").inc()
        logger.info(
            "Comment posted",
            recipe_id=recipe_id,
            comment_id=comment.id,
            parent_id=parent_id,
            user_id=user.id,
        )
        return CommentPostedResponse(
            comment=to_response(comment, user.id),
            comments_count=comments_count,
        )

    async def edit(
        self,
        comment_id: str,
        user: CurrentUser | None,
        content: str | None,
    ) -> CommentResponse:
        """Replace the text of the caller's own comment."""
        user = _require_user(user)
        comment = await self._get(comment_id)
        if comment.user_id != user.id:
            msg = "You can only edit your own comments"
            raise ForbiddenError(msg)

        text = _clean_content(content)
        updated = await self._comments.update_content(
            comment_id, text, datetime.now(UTC)
        )
        if updated is None:
            msg = "Comment not found"
            raise NotFoundError(msg)

        COMMENT_OPERATIONS.labels(operation="edit").inc()
        return to_response(updated, user.id)

    async def delete(
        self,
        comment_id: str,
        user: CurrentUser | None,
    ) -> CommentDeletedResponse:
        """Hard-delete a comment as its owner or as an admin.

        Replies of a deleted top-level comment stay in the store but are no
        longer rendered.
        """
        user = _require_user(user)
        comment = await self._get(comment_id)
        if comment.user_id != user.id and not user.is_admin():
            msg = "You can only delete your own comments"
            raise ForbiddenError(msg)

        if not await self._comments.delete(comment_id):
            msg = "Comment not found"
            raise NotFoundError(msg)

        comments_count = await self._recipes.adjust_comments_count(
            comment.recipe_id, -1
        )
        if comments_count is None:
            CONSISTENCY_RISKS.labels(operation="comment_delete").inc()
            logger.warning(
                "Comment deleted but recipe counter not decremented",
                recipe_id=comment.recipe_id,
                comment_id=comment_id,
            )
            comments_count = 0

        COMMENT_OPERATIONS.labels(operation="delete").inc()
        logger.info(
            "Comment deleted",
            comment_id=comment_id,
            recipe_id=comment.recipe_id,
            by_admin=comment.user_id != user.id,
        )
        return CommentDeletedResponse(
            comment_id=comment_id,
            recipe_id=comment.recipe_id,
            parent_id=comment.parent_id,
            comments_count=comments_count,
        )

    async def toggle_like(
        self,
        comment_id: str,
        user: CurrentUser | None,
    ) -> CommentLikeResponse:
        """Like or unlike a comment or reply."""
        user = _require_user(user)
        updated = await self._comments.toggle_like(comment_id, user.id)
        if updated is None:
            msg = "Comment not found"
            raise NotFoundError(msg)

        is_liked = user.id in updated.likes
        COMMENT_OPERATIONS.labels(operation="like" if is_liked else "unlike").inc()
        return CommentLikeResponse(
            comment_id=comment_id,
            is_liked=is_liked,
            likes_count=len(updated.likes),
        )

    async def _get(self, comment_id: str) -> CommentDocument:
        comment = await self._comments.get(comment_id)
        if comment is None:
            msg = "Comment not found"
            raise NotFoundError(msg)
        return comment
