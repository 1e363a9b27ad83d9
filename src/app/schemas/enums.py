"""Enumeration types shared by documents and API schemas."""

from __future__ import annotations

from enum import StrEnum


class RecipeStatus(StrEnum):
    """Moderation state of a contributed recipe.

    Recipes stored before moderation existed carry no status at all and
    are read as ``APPROVED``.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewDecision(StrEnum):
    """Admin decision applied by a review."""

    APPROVE = "approve"
    REJECT = "reject"

    @property
    def resulting_status(self) -> RecipeStatus:
        if self is ReviewDecision.APPROVE:
            return RecipeStatus.APPROVED
        return RecipeStatus.REJECTED


class MealType(StrEnum):
    """Meal slots of a day's plan, in display order."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class SocialKind(StrEnum):
    """Membership sets toggled by the social counter engine."""

    LIKE = "like"
    SAVE = "save"


class UserRole(StrEnum):
    """Role stored on the user document."""

    USER = "user"
    ADMIN = "admin"


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"
