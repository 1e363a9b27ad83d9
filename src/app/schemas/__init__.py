"""Pydantic schemas for request/response validation.

This module exports the schema classes of the public API.
"""

# Admin schemas
from app.schemas.admin import RepairQueuedResponse

# Base classes
from app.schemas.base import (
    APIRequest,
    APIResponse,
    DownstreamRequest,
    DownstreamResponse,
)

# Comment schemas
from app.schemas.comment import (
    CommentCountResponse,
    CommentCreateRequest,
    CommentDeletedResponse,
    CommentLikeResponse,
    CommentPostedResponse,
    CommentResponse,
    CommentThreadResponse,
    CommentUpdateRequest,
)

# Enums
from app.schemas.enums import (
    HealthStatus,
    MealType,
    RecipeStatus,
    ReviewDecision,
    SocialKind,
    UserRole,
)

# Health schemas
from app.schemas.health import HealthResponse, ReadinessResponse

# Meal plan schemas
from app.schemas.meal_plan import (
    AddMealRequest,
    MealPlanListResponse,
    MealPlanResponse,
    MealRemovedResponse,
    ReplaceSlotRequest,
)

# Recipe schemas
from app.schemas.recipe import (
    IngredientIn,
    IngredientResponse,
    RecipeCreateRequest,
    RecipeDeletedResponse,
    RecipeListResponse,
    RecipeResponse,
    RecipeSummary,
    RecipeUpdateRequest,
    ReviewRequest,
)

# Recommendation schemas
from app.schemas.recommendations import RecommendationsResponse

# Shopping list schemas
from app.schemas.shopping import (
    GenerateShoppingListRequest,
    GenerateShoppingListResponse,
    GroupedShoppingListResponse,
    ReplaceShoppingListRequest,
    ShoppingItemIn,
    ShoppingItemResponse,
    ShoppingListResponse,
)

# Social schemas
from app.schemas.social import (
    LikeToggleResponse,
    RepairReportResponse,
    SaveToggleResponse,
)

# User schemas
from app.schemas.user import (
    AdminUserUpdateRequest,
    HealthProfileRequest,
    UserDeletedResponse,
    UserListResponse,
    UserResponse,
)


__all__ = [
    "APIRequest",
    "APIResponse",
    "AddMealRequest",
    "AdminUserUpdateRequest",
    "CommentCountResponse",
    "CommentCreateRequest",
    "CommentDeletedResponse",
    "CommentLikeResponse",
    "CommentPostedResponse",
    "CommentResponse",
    "CommentThreadResponse",
    "CommentUpdateRequest",
    "DownstreamRequest",
    "DownstreamResponse",
    "GenerateShoppingListRequest",
    "GenerateShoppingListResponse",
    "GroupedShoppingListResponse",
    "HealthProfileRequest",
    "HealthResponse",
    "HealthStatus",
    "IngredientIn",
    "IngredientResponse",
    "LikeToggleResponse",
    "MealPlanListResponse",
    "MealPlanResponse",
    "MealRemovedResponse",
    "MealType",
    "ReadinessResponse",
    "RecipeCreateRequest",
    "RecipeDeletedResponse",
    "RecipeListResponse",
    "RecipeResponse",
    "RecipeStatus",
    "RecipeSummary",
    "RecipeUpdateRequest",
    "RecommendationsResponse",
    "RepairQueuedResponse",
    "RepairReportResponse",
    "ReplaceShoppingListRequest",
    "ReplaceSlotRequest",
    "ReviewDecision",
    "ReviewRequest",
    "SaveToggleResponse",
    "ShoppingItemIn",
    "ShoppingItemResponse",
    "ShoppingListResponse",
    "SocialKind",
    "UserDeletedResponse",
    "UserListResponse",
    "UserResponse",
    "UserRole",
]
