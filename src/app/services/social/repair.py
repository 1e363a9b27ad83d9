"""Counter repair.

Recomputes every denormalized counter from the data it summarizes and
re-mirrors the users' liked/saved lists from the recipe membership sets,
which are the source of truth. Safe to run at any time; a run against a
consistent store changes nothing.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

from app.database.repositories.comments import CommentRepository
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.users import UserRepository
from app.observability.logging import get_logger
from app.observability.metrics import COUNTER_REPAIRS
from app.schemas.enums import SocialKind
from app.services.comments.tree import count_visible


logger = get_logger(__name__)


@dataclass(frozen=True)
class RepairReport:
    recipes_scanned: int = 0
    recipes_repaired: int = 0
    users_repaired: int = 0


class CounterRepairService:
    """Converges counters and mirrors left inconsistent by partial failures."""

    def __init__(
        self,
        recipes: RecipeRepository | None = None,
        comments: CommentRepository | None = None,
        users: UserRepository | None = None,
    ) -> None:
        self._recipes = recipes or RecipeRepository()
        self._comments = comments or CommentRepository()
        self._users = users or UserRepository()

    async def repair_counters(self) -> RepairReport:
        """Run one full repair pass."""
        threads: dict[str, list[tuple[str, str | None]]] = defaultdict(list)
        async for recipe_id, comment_id, parent_id in self._comments.iter_thread_index():
            threads[recipe_id].append((comment_id, parent_id))

        scanned = 0
        repaired = 0
        users_repaired = 0
        existing_ids: list[str] = []

        async for recipe in self._recipes.iter_social_state():
            scanned += 1
            existing_ids.append(recipe.id)

            expected = {
                "likesCount": len(set(recipe.liked_by)),
                "savesCount": len(set(recipe.saved_by)),
                "commentsCount": count_visible(threads.get(recipe.id, [])),
            }
            actual = {
                "likesCount": recipe.likes_count,
                "savesCount": recipe.saves_count,
                "commentsCount": recipe.comments_count,
            }
            drift = {k: v for k, v in expected.items() if actual[k] != v}
            if drift:
                await self._recipes.set_counters(recipe.id, drift)
                repaired += 1
                logger.info(
                    "Recipe counters repaired",
                    recipe_id=recipe.id,
                    before={k: actual[k] for k in drift},
                    after=drift,
                )

            users_repaired += await self._users.sync_mirror(
                recipe.id, SocialKind.LIKE, recipe.liked_by
            )
            users_repaired += await self._users.sync_mirror(
                recipe.id, SocialKind.SAVE, recipe.saved_by
            )

        users_repaired += await self._users.prune_missing_recipes(existing_ids)

        if repaired:
            COUNTER_REPAIRS.labels(collection="recipes").inc(repaired)
        if users_repaired:
            COUNTER_REPAIRS.labels(collection="users").inc(users_repaired)

        report = RepairReport(
            recipes_scanned=scanned,
            recipes_repaired=repaired,
            users_repaired=users_repaired,
        )
        logger.info(
            "Counter repair finished",
            recipes_scanned=report.recipes_scanned,
            recipes_repaired=report.recipes_repaired,
            users_repaired=report.users_repaired,
        )
        return report
