"""Recipe moderation state machine.

States are ``pending``, ``approved`` and ``rejected``; a recipe stored
without a status reads as ``approved``. Admin submissions enter approved,
everyone else's enter pending. Review moves a recipe to approved or
rejected from any state. Edits and deletes are open to the owner and to
admins in every state.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.core.config import get_settings
from app.database.repositories.comments import CommentRepository
from app.database.repositories.recipes import (
    VISIBLE_FILTER,
    RecipeRepository,
    status_filter,
)
from app.database.repositories.users import UserRepository
from app.observability.logging import get_logger
from app.schemas.enums import RecipeStatus, ReviewDecision
from app.schemas.recipe import (
    RecipeCreateRequest,
    RecipeDeletedResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeUpdateRequest,
)
from app.services.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)


if TYPE_CHECKING:
    from app.auth.dependencies import CurrentUser
    from app.database.documents import RecipeDocument

logger = get_logger(__name__)

# Content fields a stored recipe may hold as null; an explicit null on any
# other field in an edit leaves it unchanged.
CLEARABLE_FIELDS = frozenset({"category", "cuisine", "difficulty", "nutrition"})


def _can_manage(recipe: RecipeDocument, user: CurrentUser) -> bool:
    return user.is_admin() or (
        recipe.author_id is not None and recipe.author_id == user.id
    )


def can_view(recipe: RecipeDocument, viewer: CurrentUser | None) -> bool:
    """Published recipes are public; the rest only for their owner or admins."""
    if recipe.effective_status == RecipeStatus.APPROVED:
        return True
    return viewer is not None and _can_manage(recipe, viewer)


class RecipeService:
    """Submission, listing, editing and review of recipes."""

    def __init__(
        self,
        recipes: RecipeRepository | None = None,
        comments: CommentRepository | None = None,
        users: UserRepository | None = None,
        *,
        resubmit_on_edit: bool | None = None,
    ) -> None:
        self._recipes = recipes or RecipeRepository()
        self._comments = comments or CommentRepository()
        self._users = users or UserRepository()
        if resubmit_on_edit is None:
            resubmit_on_edit = get_settings().moderation.resubmit_on_edit
        self._resubmit_on_edit = resubmit_on_edit

    async def create(
        self,
        body: RecipeCreateRequest,
        user: CurrentUser | None,
    ) -> RecipeResponse:
        """Submit a recipe. Admin submissions skip the review queue."""
        if user is None:
            raise UnauthorizedError
        if not body.name.strip():
            msg = "Recipe name is required"
            raise ValidationError(msg)
        if not body.ingredients:
            msg = "At least one ingredient is required"
            raise ValidationError(msg)

        now = datetime.now(UTC)
        status = RecipeStatus.APPROVED if user.is_admin() else RecipeStatus.PENDING
        fields: dict[str, Any] = {
            **body.model_dump(by_alias=True),
            "status": str(status),
            "authorId": user.id,
            "authorEmail": user.email,
            "likedBy": [],
            "savedBy": [],
            "likesCount": 0,
            "savesCount": 0,
            "commentsCount": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        recipe = await self._recipes.insert(fields)
        logger.info(
            "Recipe submitted",
            recipe_id=recipe.id,
            author_id=user.id,
            status=str(status),
        )
        return RecipeResponse.from_document(recipe, user.id)

    async def list_recipes(
        self,
        *,
        status: RecipeStatus | None = None,
        include_all: bool = False,
        skip: int = 0,
        limit: int = 0,
        viewer: CurrentUser | None = None,
    ) -> RecipeListResponse:
        """List recipes, newest first.

        By default only approved (and legacy unmoderated) recipes are
        returned and ``status`` is ignored. With ``include_all`` the
        ``status`` filter applies, or nothing is filtered when it is unset.
        Access to ``include_all`` is enforced by the HTTP layer.
        """
        query = status_filter(status) if include_all else VISIBLE_FILTER
        recipes = await self._recipes.find(query, skip=skip, limit=limit)
        total = await self._recipes.count(query)
        viewer_id = viewer.id if viewer else None
        return RecipeListResponse(
            recipes=[RecipeResponse.from_document(r, viewer_id) for r in recipes],
            total=total,
            skip=skip,
            limit=limit,
        )

    async def list_mine(self, user: CurrentUser | None) -> RecipeListResponse:
        """The caller's own submissions in every state."""
        if user is None:
            raise UnauthorizedError
        query = {"authorId": user.id}
        recipes = await self._recipes.find(query)
        return RecipeListResponse(
            recipes=[RecipeResponse.from_document(r, user.id) for r in recipes],
            total=len(recipes),
        )

    async def get(
        self,
        recipe_id: str,
        viewer: CurrentUser | None = None,
    ) -> RecipeResponse:
        """Fetch one recipe; unpublished ones only for their owner or admins."""
        recipe = await self._get(recipe_id)
        if not can_view(recipe, viewer):
            msg = "Recipe not found"
            raise NotFoundError(msg)
        return RecipeResponse.from_document(recipe, viewer.id if viewer else None)

    async def update(
        self,
        recipe_id: str,
        patch: RecipeUpdateRequest,
        user: CurrentUser | None,
    ) -> RecipeResponse:
        """Edit content fields as the owner or an admin.

        The status is left as it is, except that with ``resubmit_on_edit``
        enabled an owner's edit of a rejected recipe returns it to pending.
        """
        if user is None:
            raise UnauthorizedError
        recipe = await self._get(recipe_id)
        if not _can_manage(recipe, user):
            msg = "You can only edit your own recipes"
            raise ForbiddenError(msg)

        fields = patch.model_dump(by_alias=True, exclude_unset=True)
        if "name" in fields and not (fields["name"] or "").strip():
            msg = "Recipe name is required"
            raise ValidationError(msg)
        if "ingredients" in fields and not fields["ingredients"]:
            msg = "At least one ingredient is required"
            raise ValidationError(msg)
        fields = {
            key: value
            for key, value in fields.items()
            if value is not None or key in CLEARABLE_FIELDS
        }

        if (
            self._resubmit_on_edit
            and not user.is_admin()
            and recipe.effective_status == RecipeStatus.REJECTED
        ):
            fields["status"] = str(RecipeStatus.PENDING)

        fields["updatedAt"] = datetime.now(UTC)
        updated = await self._recipes.update_fields(recipe_id, fields)
        if updated is None:
            msg = "Recipe not found"
            raise NotFoundError(msg)

        logger.info(
            "Recipe updated",
            recipe_id=recipe_id,
            user_id=user.id,
            fields=sorted(k for k in fields if k != "updatedAt"),
        )
        return RecipeResponse.from_document(updated, user.id)

    async def delete(
        self,
        recipe_id: str,
        user: CurrentUser | None,
    ) -> RecipeDeletedResponse:
        """Delete a recipe with its comments and every user's reference to it."""
        if user is None:
            raise UnauthorizedError
        recipe = await self._get(recipe_id)
        if not _can_manage(recipe, user):
            msg = "You can only delete your own recipes"
            raise ForbiddenError(msg)

        if not await self._recipes.delete(recipe_id):
            msg = "Recipe not found"
            raise NotFoundError(msg)

        comments_deleted = await self._comments.delete_for_recipe(recipe_id)
        users_updated = await self._users.pull_recipe(recipe_id)
        logger.info(
            "Recipe deleted",
            recipe_id=recipe_id,
            user_id=user.id,
            comments_deleted=comments_deleted,
            users_updated=users_updated,
        )
        return RecipeDeletedResponse(
            recipe_id=recipe_id,
            comments_deleted=comments_deleted,
            users_updated=users_updated,
        )

    async def review(
        self,
        recipe_id: str,
        decision: ReviewDecision,
        user: CurrentUser | None,
        note: str | None = None,
    ) -> RecipeResponse:
        """Approve or reject a recipe. Re-reviewing a decided recipe is allowed."""
        if user is None:
            raise UnauthorizedError
        if not user.is_admin():
            msg = "Only admins can review recipes"
            raise ForbiddenError(msg)

        decision = ReviewDecision(decision)
        now = datetime.now(UTC)
        updated = await self._recipes.update_fields(
            recipe_id,
            {
                "status": str(decision.resulting_status),
                "reviewNote": note or "",
                "reviewedAt": now,
                "updatedAt": now,
            },
        )
        if updated is None:
            msg = "Recipe not found"
            raise NotFoundError(msg)

        logger.info(
            "Recipe reviewed",
            recipe_id=recipe_id,
            decision=str(decision),
            reviewer_id=user.id,
        )
        return RecipeResponse.from_document(updated, user.id)

    async def _get(self, recipe_id: str) -> RecipeDocument:
        recipe = await self._recipes.get(recipe_id)
        if recipe is None:
            msg = "Recipe not found"
            raise NotFoundError(msg)
        return recipe
