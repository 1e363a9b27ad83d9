"""User profile, liked/saved lists and account administration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.core.config import get_settings
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.users import UserRepository
from app.observability.logging import get_logger
from app.schemas.enums import RecipeStatus, SocialKind, UserRole
from app.schemas.recipe import RecipeListResponse, RecipeResponse
from app.schemas.user import (
    AdminUserUpdateRequest,
    HealthProfileRequest,
    UserDeletedResponse,
    UserListResponse,
    UserResponse,
)
from app.services.exceptions import ForbiddenError, NotFoundError, UnauthorizedError


if TYPE_CHECKING:
    from app.auth.dependencies import CurrentUser
    from app.database.documents import UserDocument

logger = get_logger(__name__)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise UnauthorizedError
    return user


class UserService:
    """Reads and updates user documents on behalf of the caller or an admin."""

    def __init__(
        self,
        users: UserRepository | None = None,
        recipes: RecipeRepository | None = None,
        *,
        admin_email: str | None = None,
    ) -> None:
        self._users = users or UserRepository()
        self._recipes = recipes or RecipeRepository()
        self._admin_email = (admin_email or get_settings().auth.admin_email).lower()

    async def get_profile(self, user: CurrentUser | None) -> UserResponse:
        """The caller's profile; identities never stored locally get a blank one."""
        user = _require_user(user)
        stored = await self._users.get(user.id)
        if stored is None:
            return UserResponse(id=user.id, email=user.email or "")
        return UserResponse.from_document(stored)

    async def update_health_profile(
        self,
        user: CurrentUser | None,
        profile: HealthProfileRequest,
    ) -> UserResponse:
        user = _require_user(user)
        fields: dict[str, Any] = {
            **profile.model_dump(by_alias=True),
            "hasCompletedHealthProfile": True,
        }
        if user.email:
            fields["email"] = user.email
        updated = await self._users.update_fields(user.id, fields, upsert=True)
        logger.info("Health profile updated", user_id=user.id)
        return UserResponse.from_document(updated)

    async def liked_recipes(self, user: CurrentUser | None) -> RecipeListResponse:
        return await self._mirrored(user, SocialKind.LIKE)

    async def saved_recipes(self, user: CurrentUser | None) -> RecipeListResponse:
        return await self._mirrored(user, SocialKind.SAVE)

    async def _mirrored(
        self,
        user: CurrentUser | None,
        kind: SocialKind,
    ) -> RecipeListResponse:
        """Hydrate the caller's mirrored list, most recently added first.

        Ids of recipes that were deleted, or that are not visible to the
        caller, are skipped.
        """
        user = _require_user(user)
        stored = await self._users.get(user.id)
        if stored is None:
            return RecipeListResponse(recipes=[], total=0)

        ids = stored.liked_recipes if kind == SocialKind.LIKE else stored.saved_recipes
        recipes = [
            r
            for r in await self._recipes.get_many(list(reversed(ids)))
            if r.effective_status == RecipeStatus.APPROVED
            or r.author_id == user.id
            or user.is_admin()
        ]
        return RecipeListResponse(
            recipes=[RecipeResponse.from_document(r, user.id) for r in recipes],
            total=len(recipes),
        )

    # =========================================================================
    # Administration
    # =========================================================================

    async def list_users(self) -> UserListResponse:
        users = await self._users.list_all()
        return UserListResponse(
            users=[UserResponse.from_document(u) for u in users],
            total=len(users),
        )

    async def update_user(
        self,
        user_id: str,
        patch: AdminUserUpdateRequest,
        actor: CurrentUser,
    ) -> UserResponse:
        target = await self._get(user_id)
        fields = patch.model_dump(by_alias=True, exclude_none=True)
        if self._is_admin_account(target) and (
            fields.get("isActive") is False or fields.get("role") == UserRole.USER
        ):
            msg = "The admin account cannot be demoted or deactivated"
            raise ForbiddenError(msg)
        if not fields:
            return UserResponse.from_document(target)

        updated = await self._users.update_fields(user_id, fields)
        if updated is None:
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info(
            "User updated by admin",
            user_id=user_id,
            admin_id=actor.id,
            fields=sorted(fields),
        )
        return UserResponse.from_document(updated)

    async def delete_user(self, user_id: str, actor: CurrentUser) -> UserDeletedResponse:
        target = await self._get(user_id)
        if self._is_admin_account(target):
            msg = "Cannot delete admin account"
            raise ForbiddenError(msg)
        if not await self._users.delete(user_id):
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info("User deleted by admin", user_id=user_id, admin_id=actor.id)
        return UserDeletedResponse(user_id=user_id)

    def _is_admin_account(self, user: UserDocument) -> bool:
        return user.role == UserRole.ADMIN or user.email.lower() == self._admin_email

    async def _get(self, user_id: str) -> UserDocument:
        user = await self._users.get(user_id)
        if user is None:
            msg = "User not found"
            raise NotFoundError(msg)
        return user
