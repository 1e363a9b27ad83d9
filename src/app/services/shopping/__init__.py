"""Shopping list service module.

Aggregates meal plan ingredients into a per-user shopping list.
"""

from app.services.shopping.service import ShoppingService


__all__ = ["ShoppingService"]
