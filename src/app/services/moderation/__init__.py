"""Recipe moderation service module."""

from app.services.moderation.service import RecipeService


__all__ = ["RecipeService"]
