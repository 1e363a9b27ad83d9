"""Database repositories, one per collection."""

from app.database.repositories.comments import CommentRepository
from app.database.repositories.meal_plans import MealPlanRepository
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.shopping_lists import ShoppingListRepository
from app.database.repositories.users import UserRepository


__all__ = [
    "CommentRepository",
    "MealPlanRepository",
    "RecipeRepository",
    "ShoppingListRepository",
    "UserRepository",
]
