"""Client-side view state that applies server-confirmed changes."""

from app.reconciliation.store import (
    CommentThreadView,
    PendingToggle,
    RecipeView,
    RecipeViewStore,
    Subscription,
)


__all__ = [
    "CommentThreadView",
    "PendingToggle",
    "RecipeView",
    "RecipeViewStore",
    "Subscription",
]
