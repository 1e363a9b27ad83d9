"""Normalized view state for clients rendering recipes on several surfaces.

A recipe's counters may be shown at once by a card grid, a detail dialog
and a recommendation carousel. Rather than each surface holding its own
copy, all of them subscribe to one ``RecipeViewStore`` keyed by recipe id
and are notified when an id they hold changes.

Social toggles are optimistic: ``begin_toggle`` applies a provisional
change, then ``confirm_toggle`` replaces it with the server's absolute
values or ``fail_toggle`` rolls it back. Provisional state is always
recomputed from the last confirmed state plus the toggles still pending,
so out-of-order confirmations never leave a stale delta behind.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from app.observability.logging import get_logger
from app.schemas.enums import SocialKind
from app.schemas.social import LikeToggleResponse, SaveToggleResponse


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from app.schemas.comment import (
        CommentDeletedResponse,
        CommentLikeResponse,
        CommentPostedResponse,
        CommentResponse,
        CommentThreadResponse,
    )
    from app.schemas.recipe import RecipeResponse

logger = get_logger(__name__)


@dataclass(frozen=True)
class RecipeView:
    """What every surface renders for one recipe."""

    recipe_id: str
    likes_count: int = 0
    saves_count: int = 0
    comments_count: int = 0
    is_liked: bool = False
    is_saved: bool = False

    @classmethod
    def from_response(cls, recipe: RecipeResponse) -> RecipeView:
        return cls(
            recipe_id=recipe.id,
            likes_count=recipe.likes_count,
            saves_count=recipe.saves_count,
            comments_count=recipe.comments_count,
            is_liked=recipe.is_liked,
            is_saved=recipe.is_saved,
        )

    def flipped(self, kind: SocialKind) -> RecipeView:
        """Provisional state after one toggle of ``kind``."""
        if kind == SocialKind.LIKE:
            delta = -1 if self.is_liked else 1
            return replace(
                self,
                is_liked=not self.is_liked,
                likes_count=max(0, self.likes_count + delta),
            )
        delta = -1 if self.is_saved else 1
        return replace(
            self,
            is_saved=not self.is_saved,
            saves_count=max(0, self.saves_count + delta),
        )


@dataclass(frozen=True)
class PendingToggle:
    """Handle for one in-flight toggle."""

    token: int
    recipe_id: str
    kind: SocialKind


@dataclass
class Subscription:
    surface: str
    recipe_ids: set[str]
    callback: Callable[[RecipeView], None]


class RecipeViewStore:
    """Single source of truth for recipe counters and the viewer's flags."""

    def __init__(self) -> None:
        self._confirmed: dict[str, RecipeView] = {}
        self._current: dict[str, RecipeView] = {}
        self._pending: dict[int, PendingToggle] = {}
        self._subscriptions: dict[str, Subscription] = {}
        self._tokens = itertools.count(1)
        self.liked_recipes: list[str] = []
        self.saved_recipes: list[str] = []

    # -------------------------------------------------------------------------
    # Surfaces
    # -------------------------------------------------------------------------

    def subscribe(
        self,
        surface: str,
        recipe_ids: Iterable[str],
        callback: Callable[[RecipeView], None],
    ) -> Subscription:
        """Register ``surface`` as holding ``recipe_ids``; replaces a prior one."""
        subscription = Subscription(surface, set(recipe_ids), callback)
        self._subscriptions[surface] = subscription
        return subscription

    def unsubscribe(self, surface: str) -> None:
        self._subscriptions.pop(surface, None)

    def holders(self, recipe_id: str) -> list[str]:
        """Surfaces currently holding ``recipe_id``."""
        return [
            s.surface for s in self._subscriptions.values() if recipe_id in s.recipe_ids
        ]

    # -------------------------------------------------------------------------
    # Server state
    # -------------------------------------------------------------------------

    def load(self, recipes: Iterable[RecipeResponse | RecipeView]) -> None:
        """Take server-rendered recipes as confirmed state."""
        for recipe in recipes:
            if not isinstance(recipe, RecipeView):
                recipe = RecipeView.from_response(recipe)
            self._confirmed[recipe.recipe_id] = recipe
            self._recompute(recipe.recipe_id)

    def get(self, recipe_id: str) -> RecipeView | None:
        return self._current.get(recipe_id)

    def begin_toggle(self, recipe_id: str, kind: SocialKind) -> PendingToggle:
        """Apply an optimistic toggle and return its handle."""
        if recipe_id not in self._confirmed:
            self._confirmed[recipe_id] = RecipeView(recipe_id)
        pending = PendingToggle(next(self._tokens), recipe_id, SocialKind(kind))
        self._pending[pending.token] = pending
        self._recompute(recipe_id)
        return pending

    def confirm_toggle(
        self,
        pending: PendingToggle,
        response: LikeToggleResponse | SaveToggleResponse,
    ) -> RecipeView | None:
        """Replace provisional state with the server's absolute values.

        The response's full liked/saved list replaces the local one, which
        also corrects the flags of any other recipe that had drifted.
        """
        self._pending.pop(pending.token, None)
        recipe_id = response.recipe_id
        confirmed = self._confirmed.get(recipe_id, RecipeView(recipe_id))

        if isinstance(response, LikeToggleResponse):
            self._confirmed[recipe_id] = replace(
                confirmed, is_liked=response.is_liked, likes_count=response.likes_count
            )
            self._replace_list(SocialKind.LIKE, response.liked_recipes)
        else:
            self._confirmed[recipe_id] = replace(
                confirmed, is_saved=response.is_saved, saves_count=response.saves_count
            )
            self._replace_list(SocialKind.SAVE, response.saved_recipes)

        self._recompute(recipe_id)
        return self.get(recipe_id)

    def fail_toggle(self, pending: PendingToggle) -> RecipeView | None:
        """Drop a failed toggle; the recipe returns to confirmed state."""
        if self._pending.pop(pending.token, None) is None:
            return self.get(pending.recipe_id)
        logger.debug(
            "Rolling back optimistic toggle",
            recipe_id=pending.recipe_id,
            kind=str(pending.kind),
        )
        self._recompute(pending.recipe_id)
        return self.get(pending.recipe_id)

    def apply_comment_count(self, recipe_id: str, comments_count: int) -> RecipeView:
        """Apply a server-confirmed comment counter."""
        confirmed = self._confirmed.get(recipe_id, RecipeView(recipe_id))
        self._confirmed[recipe_id] = replace(
            confirmed, comments_count=max(0, comments_count)
        )
        self._recompute(recipe_id)
        return self._current[recipe_id]

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _replace_list(self, kind: SocialKind, recipe_ids: list[str]) -> None:
        members = set(recipe_ids)
        if kind == SocialKind.LIKE:
            self.liked_recipes = list(recipe_ids)
        else:
            self.saved_recipes = list(recipe_ids)

        for recipe_id, view in list(self._confirmed.items()):
            flag = recipe_id in members
            if kind == SocialKind.LIKE and view.is_liked != flag:
                self._confirmed[recipe_id] = replace(view, is_liked=flag)
            elif kind == SocialKind.SAVE and view.is_saved != flag:
                self._confirmed[recipe_id] = replace(view, is_saved=flag)
            else:
                continue
            self._recompute(recipe_id)

    def _recompute(self, recipe_id: str) -> None:
        view = self._confirmed[recipe_id]
        for pending in self._pending.values():
            if pending.recipe_id == recipe_id:
                view = view.flipped(pending.kind)

        if self._current.get(recipe_id) == view:
            return
        self._current[recipe_id] = view
        self._notify(view)

    def _notify(self, view: RecipeView) -> None:
        for subscription in list(self._subscriptions.values()):
            if view.recipe_id in subscription.recipe_ids:
                subscription.callback(view)


class CommentThreadView:
    """Local copy of one recipe's comment tree, patched from responses.

    When given a ``RecipeViewStore``, the recipe's comment counter there is
    kept in step with every post and delete confirmation.
    """

    def __init__(
        self,
        recipe_id: str,
        thread: CommentThreadResponse | None = None,
        store: RecipeViewStore | None = None,
    ) -> None:
        self.recipe_id = recipe_id
        self.comments: list[CommentResponse] = list(thread.comments) if thread else []
        self._store = store

    @property
    def total_count(self) -> int:
        return sum(1 + len(c.replies) for c in self.comments)

    def find(self, comment_id: str) -> CommentResponse | None:
        for comment in self.comments:
            if comment.id == comment_id:
                return comment
            for reply in comment.replies:
                if reply.id == comment_id:
                    return reply
        return None

    def apply_posted(self, response: CommentPostedResponse) -> None:
        """Insert a new comment: top-level first, or a reply last under its parent."""
        comment = response.comment
        if comment.parent_id:
            self._patch_top_level(
                comment.parent_id,
                lambda parent: parent.model_copy(
                    update={"replies": [*parent.replies, comment]}
                ),
            )
        else:
            self.comments.insert(0, comment)
        self._sync_count(response.comments_count)

    def apply_deleted(self, response: CommentDeletedResponse) -> None:
        """Remove a comment whether it is top-level or a reply."""
        comment_id = response.comment_id
        self.comments = [
            c.model_copy(update={"replies": [r for r in c.replies if r.id != comment_id]})
            for c in self.comments
            if c.id != comment_id
        ]
        self._sync_count(response.comments_count)

    def apply_edited(self, comment: CommentResponse) -> None:
        self._replace_node(
            comment.id,
            lambda node: comment.model_copy(update={"replies": node.replies}),
        )

    def apply_like(self, response: CommentLikeResponse) -> None:
        self._replace_node(
            response.comment_id,
            lambda node: node.model_copy(
                update={"is_liked": response.is_liked, "likes_count": response.likes_count}
            ),
        )

    def _sync_count(self, comments_count: int) -> None:
        if self._store is not None:
            self._store.apply_comment_count(self.recipe_id, comments_count)

    def _patch_top_level(
        self,
        comment_id: str,
        change: Callable[[CommentResponse], CommentResponse],
    ) -> None:
        self.comments = [change(c) if c.id == comment_id else c for c in self.comments]

    def _replace_node(
        self,
        comment_id: str,
        change: Callable[[CommentResponse], CommentResponse],
    ) -> None:
        updated: list[CommentResponse] = []
        for comment in self.comments:
            if comment.id == comment_id:
                comment = change(comment)
            elif any(r.id == comment_id for r in comment.replies):
                comment = comment.model_copy(
                    update={
                        "replies": [
                            change(r) if r.id == comment_id else r
                            for r in comment.replies
                        ]
                    }
                )
            updated.append(comment)
        self.comments = updated
