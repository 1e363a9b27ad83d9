"""Shopping list service.

Provides methods for:
- Generating items from a day's meal plan and merging them into the list
- Replacing, clearing, checking and removing items by ingredient key
- A read-time view grouped by date and meal

Read-modify-write updates go through a compare-and-set on the list's
``updatedAt`` and are retried a few times before failing with a conflict.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from app.core.config import get_settings
from app.database.documents import MealInfo, ShoppingItem, ingredient_key
from app.database.repositories.meal_plans import MealPlanRepository
from app.database.repositories.shopping_lists import ShoppingListRepository
from app.observability.logging import get_logger
from app.schemas.shopping import (
    GenerateShoppingListResponse,
    GroupedShoppingListResponse,
    ShoppingItemIn,
    ShoppingItemResponse,
    ShoppingListResponse,
)
from app.services.exceptions import ConflictError, NotFoundError, UnauthorizedError
from app.services.shopping.aggregation import (
    aggregate_meal_plan,
    dedupe_items,
    group_by_date,
    merge_first_write_wins,
)
from app.services.shopping.constants import MAX_WRITE_ATTEMPTS


if TYPE_CHECKING:
    from collections.abc import Callable

    from app.auth.dependencies import CurrentUser
    from app.database.documents import ShoppingListDocument

logger = get_logger(__name__)


def _require_user(user: CurrentUser | None) -> CurrentUser:
    if user is None:
        raise UnauthorizedError
    return user


def _responses(items: list[ShoppingItem]) -> list[ShoppingItemResponse]:
    return [ShoppingItemResponse.from_item(i) for i in items]


def _find(items: list[ShoppingItem], key: str) -> int:
    wanted = ingredient_key(key)
    for index, item in enumerate(items):
        if item.key == wanted:
            return index
    msg = "Item not found"
    raise NotFoundError(msg)


class ShoppingService:
    """Per-user shopping list built from meal plans."""

    def __init__(
        self,
        shopping_lists: ShoppingListRepository | None = None,
        meal_plans: MealPlanRepository | None = None,
        *,
        convert_units: bool | None = None,
    ) -> None:
        self._lists = shopping_lists or ShoppingListRepository()
        self._meal_plans = meal_plans or MealPlanRepository()
        if convert_units is None:
            convert_units = get_settings().shopping.convert_units
        self._convert_units = convert_units

    async def get(self, user: CurrentUser | None) -> ShoppingListResponse:
        user = _require_user(user)
        return ShoppingListResponse.from_document(await self._lists.get(user.id))

    async def replace_all(
        self,
        user: CurrentUser | None,
        items: list[ShoppingItemIn],
    ) -> ShoppingListResponse:
        """Overwrite the list; duplicate keys keep their first item."""
        user = _require_user(user)
        stored = dedupe_items(
            ShoppingItem(
                ingredient=i.ingredient.strip(),
                amount=i.amount,
                unit=i.unit,
                checked=i.checked,
                recipe_names=i.recipe_names,
                meal_info=[
                    MealInfo(date=m.date, meal_type=m.meal_type, recipe_name=m.recipe_name)
                    for m in i.meal_info
                ],
            )
            for i in items
        )
        shopping_list = await self._lists.replace_items(
            user.id, stored, datetime.now(UTC)
        )
        return ShoppingListResponse.from_document(shopping_list)

    async def clear(self, user: CurrentUser | None) -> ShoppingListResponse:
        user = _require_user(user)
        shopping_list = await self._lists.replace_items(user.id, [], datetime.now(UTC))
        logger.info("Shopping list cleared", user_id=user.id)
        return ShoppingListResponse.from_document(shopping_list)

    async def generate(
        self,
        user: CurrentUser | None,
        date: str,
    ) -> GenerateShoppingListResponse:
        """Aggregate the day's plan and merge it in, first write wins per key.

        Raises:
            NotFoundError: The caller has no meal plan for ``date``.
        """
        user = _require_user(user)
        plan = await self._meal_plans.get(user.id, date)
        if plan is None:
            msg = "No meal plan found for this date"
            raise NotFoundError(msg)

        generated = aggregate_meal_plan(plan, convert_units=self._convert_units)
        added: list[ShoppingItem] = []

        def merge(items: list[ShoppingItem]) -> list[ShoppingItem]:
            merged, new_items = merge_first_write_wins(items, generated)
            added[:] = new_items
            return merged

        shopping_list = await self._update(user.id, merge)
        logger.info(
            "Shopping list generated",
            user_id=user.id,
            date=date,
            generated=len(generated),
            added=len(added),
        )
        return GenerateShoppingListResponse(
            date=date,
            generated=_responses(generated),
            added=_responses(added),
            items=_responses(shopping_list.items),
        )

    async def toggle_checked(
        self,
        user: CurrentUser | None,
        key: str,
    ) -> ShoppingListResponse:
        user = _require_user(user)

        def toggle(items: list[ShoppingItem]) -> list[ShoppingItem]:
            index = _find(items, key)
            item = items[index]
            return [
                *items[:index],
                item.model_copy(update={"checked": not item.checked}),
                *items[index + 1 :],
            ]

        return ShoppingListResponse.from_document(await self._update(user.id, toggle))

    async def remove(self, user: CurrentUser | None, key: str) -> ShoppingListResponse:
        user = _require_user(user)

        def drop(items: list[ShoppingItem]) -> list[ShoppingItem]:
            index = _find(items, key)
            return [*items[:index], *items[index + 1 :]]

        return ShoppingListResponse.from_document(await self._update(user.id, drop))

    async def grouped(self, user: CurrentUser | None) -> GroupedShoppingListResponse:
        user = _require_user(user)
        shopping_list = await self._lists.get(user.id)
        groups, ungrouped = group_by_date(shopping_list.items if shopping_list else [])
        return GroupedShoppingListResponse(
            groups={
                date: {meal: _responses(items) for meal, items in meals.items()}
                for date, meals in groups.items()
            },
            ungrouped=_responses(ungrouped),
        )

    async def _update(
        self,
        user_id: str,
        change: Callable[[list[ShoppingItem]], list[ShoppingItem]],
    ) -> ShoppingListDocument:
        """Apply ``change`` to the current items with compare-and-set retries."""
        for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
            current = await self._lists.get(user_id)
            items = change(list(current.items) if current else [])
            written = await self._lists.replace_items_if_unchanged(
                user_id,
                items,
                current.updated_at if current else None,
                datetime.now(UTC),
            )
            if written is not None:
                return written
            logger.debug(
                "Shopping list changed concurrently, retrying",
                user_id=user_id,
                attempt=attempt,
            )

        logger.warning(
            "Shopping list update gave up after concurrent modifications",
            user_id=user_id,
            attempts=MAX_WRITE_ATTEMPTS,
        )
        msg = "Your shopping list was changed elsewhere, please try again"
        raise ConflictError(msg)
