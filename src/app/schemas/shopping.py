"""Shopping list schemas.

Items are identified by their lower-cased ingredient name; every path
parameter or body field named ``key`` is compared case-insensitively.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.enums import MealType
from app.schemas.meal_plan import PlanDate
from app.schemas.recipe import AmountText


if TYPE_CHECKING:
    from app.database.documents import ShoppingItem, ShoppingListDocument


class MealInfoModel(APIRequest):
    """Provenance of one ingredient occurrence."""

    date: str
    meal_type: MealType
    recipe_name: str


class ShoppingItemIn(APIRequest):
    """One item of a list submitted wholesale."""

    ingredient: str
    amount: AmountText = ""
    unit: AmountText = ""
    checked: bool = False
    recipe_names: list[str] = Field(default_factory=list)
    meal_info: list[MealInfoModel] = Field(default_factory=list)


class ReplaceShoppingListRequest(APIRequest):
    items: list[ShoppingItemIn] = Field(default_factory=list)


class GenerateShoppingListRequest(APIRequest):
    """Generate items from the caller's meal plan of one date."""

    date: PlanDate


class MealInfoResponse(APIResponse):
    date: str
    meal_type: MealType
    recipe_name: str


class ShoppingItemResponse(APIResponse):
    key: str = Field(..., description="Lower-cased ingredient name")
    ingredient: str
    amount: str = Field(..., description="Sum, or '<sum> (x<count>)' when merged")
    unit: str = ""
    checked: bool = False
    recipe_names: list[str] = Field(default_factory=list)
    meal_info: list[MealInfoResponse] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: ShoppingItem) -> ShoppingItemResponse:
        return cls(
            key=item.key,
            ingredient=item.ingredient,
            amount=item.amount,
            unit=item.unit,
            checked=item.checked,
            recipe_names=item.recipe_names,
            meal_info=[
                MealInfoResponse(
                    date=m.date, meal_type=m.meal_type, recipe_name=m.recipe_name
                )
                for m in item.meal_info
            ],
        )


class ShoppingListResponse(APIResponse):
    items: list[ShoppingItemResponse] = Field(default_factory=list)
    updated_at: datetime | None = None

    @classmethod
    def from_document(
        cls,
        shopping_list: ShoppingListDocument | None,
    ) -> ShoppingListResponse:
        if shopping_list is None:
            return cls()
        return cls(
            items=[ShoppingItemResponse.from_item(i) for i in shopping_list.items],
            updated_at=shopping_list.updated_at,
        )


class GenerateShoppingListResponse(APIResponse):
    """Aggregated items for the date and the list after merging them in."""

    date: str
    generated: list[ShoppingItemResponse]
    added: list[ShoppingItemResponse] = Field(
        ...,
        description="Generated items whose key was not already on the list",
    )
    items: list[ShoppingItemResponse]


class GroupedShoppingListResponse(APIResponse):
    """Read-time view: ``{date: {mealType: [item]}}``."""

    groups: dict[str, dict[str, list[ShoppingItemResponse]]] = Field(
        default_factory=dict
    )
    ungrouped: list[ShoppingItemResponse] = Field(
        default_factory=list,
        description="Items without provenance, such as hand-added ones",
    )
