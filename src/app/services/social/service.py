"""Social counter engine: like/save toggles on recipes.

A toggle is applied in two phases. Phase one is a single guarded update of
the recipe document that changes the membership set and its counter
together. Phase two mirrors the new membership onto the user document.
The two writes are not atomic with each other; a failure in phase two is a
consistency risk that the counter repair job converges later.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.users import UserRepository
from app.observability.logging import get_logger
from app.observability.metrics import CONSISTENCY_RISKS, SOCIAL_TOGGLES
from app.observability.tracing import add_span_attributes
from app.schemas.enums import SocialKind
from app.schemas.social import LikeToggleResponse, SaveToggleResponse
from app.services.exceptions import NotFoundError, UnauthorizedError


if TYPE_CHECKING:
    from app.auth.dependencies import CurrentUser
    from app.database.documents import RecipeDocument, UserDocument

logger = get_logger(__name__)


@dataclass(frozen=True)
class ToggleOutcome:
    """Canonical state after a toggle."""

    recipe_id: str
    kind: SocialKind
    is_active: bool
    count: int
    members: list[str]


def _members(recipe: RecipeDocument, kind: SocialKind) -> list[str]:
    return recipe.liked_by if kind == SocialKind.LIKE else recipe.saved_by


def _count(recipe: RecipeDocument, kind: SocialKind) -> int:
    return recipe.likes_count if kind == SocialKind.LIKE else recipe.saves_count


def _mirror(user: UserDocument, kind: SocialKind) -> list[str]:
    return user.liked_recipes if kind == SocialKind.LIKE else user.saved_recipes


class SocialService:
    """Toggles a user's membership in a recipe's liked-by/saved-by set."""

    def __init__(
        self,
        recipes: RecipeRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self._recipes = recipes or RecipeRepository()
        self._users = users or UserRepository()

    async def toggle_like(
        self,
        recipe_id: str,
        user: CurrentUser | None,
    ) -> LikeToggleResponse:
        outcome = await self.toggle(recipe_id, user, SocialKind.LIKE)
        return LikeToggleResponse(
            recipe_id=outcome.recipe_id,
            is_liked=outcome.is_active,
            likes_count=outcome.count,
            liked_recipes=outcome.members,
        )

    async def toggle_save(
        self,
        recipe_id: str,
        user: CurrentUser | None,
    ) -> SaveToggleResponse:
        outcome = await self.toggle(recipe_id, user, SocialKind.SAVE)
        return SaveToggleResponse(
            recipe_id=outcome.recipe_id,
            is_saved=outcome.is_active,
            saves_count=outcome.count,
            saved_recipes=outcome.members,
        )

    async def toggle(
        self,
        recipe_id: str,
        user: CurrentUser | None,
        kind: SocialKind,
    ) -> ToggleOutcome:
        """Flip ``user``'s membership for ``kind`` and return canonical state.

        Raises:
            UnauthorizedError: No identity.
            NotFoundError: The recipe does not exist.
        """
        if user is None:
            raise UnauthorizedError
        recipe = await self._recipes.get(recipe_id)
        if recipe is None:
            msg = "Recipe not found"
            raise NotFoundError(msg)

        add = user.id not in _members(recipe, kind)
        updated = await self._recipes.apply_membership(recipe_id, user.id, kind, add=add)
        if updated is None:
            # Guard lost to a concurrent toggle; report whatever state won.
            updated = await self._recipes.get(recipe_id)
            if updated is None:
                msg = "Recipe not found"
                raise NotFoundError(msg)
            logger.debug(
                "Toggle guard lost a race, returning canonical state",
                recipe_id=recipe_id,
                user_id=user.id,
                kind=str(kind),
            )

        is_active = user.id in _members(updated, kind)

        try:
            mirrored = await self._users.set_membership(
                user.id, recipe_id, kind, present=is_active
            )
        except Exception:
            CONSISTENCY_RISKS.labels(operation=f"{kind}_mirror").inc()
            logger.warning(
                "Recipe membership updated but user mirror write failed",
                recipe_id=recipe_id,
                user_id=user.id,
                kind=str(kind),
                is_active=is_active,
            )
            raise

        SOCIAL_TOGGLES.labels(kind=str(kind), action="add" if is_active else "remove").inc()
        add_span_attributes(
            **{"recipe.id": recipe_id, "social.kind": str(kind), "social.active": is_active}
        )
        logger.info(
            "Social toggle applied",
            recipe_id=recipe_id,
            user_id=user.id,
            kind=str(kind),
            is_active=is_active,
        )
        return ToggleOutcome(
            recipe_id=recipe_id,
            kind=kind,
            is_active=is_active,
            count=_count(updated, kind),
            members=_mirror(mirrored, kind),
        )
