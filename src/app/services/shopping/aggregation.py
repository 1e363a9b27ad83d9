"""Ingredient aggregation across the meal slots of a day.

Pure functions only; persistence lives in ``ShoppingService``.
"""

from __future__ import annotations

import math
import re
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pint

from app.database.documents import MealInfo, ShoppingItem, ingredient_key
from app.observability.logging import get_logger
from app.schemas.enums import MealType
from app.services.shopping.constants import CONVERSION_PRECISION, PINT_UNIT_MAP


if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.database.documents import MealPlanDocument

logger = get_logger(__name__)

# Module-level unit registry (reused across calls)
_ureg: pint.UnitRegistry[pint.Quantity[float]] = pint.UnitRegistry()

# Leading decimal number, the way a lenient float parser reads "200g" or "1/2".
_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_amount(value: Any) -> float:
    """Read the leading number of an amount; anything else counts as 0.

    >>> parse_amount("200"), parse_amount("1/2"), parse_amount("a pinch")
    (200.0, 1.0, 0.0)
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else 0.0
    match = _LEADING_NUMBER.match(str(value or ""))
    return float(match.group(0)) if match else 0.0


def format_number(value: float) -> str:
    """Render a sum without a trailing ``.0`` for whole numbers."""
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)


def format_amount(total: float, count: int) -> str:
    """``"300"`` for a single occurrence, ``"300 (x2)"`` for merged ones."""
    if count > 1:
        return f"{format_number(total)} (x{count})"
    return format_number(total)


def convert_amount(amount: float, from_unit: str, to_unit: str) -> float | None:
    """Convert between known, compatible units; ``None`` when not possible."""
    source = PINT_UNIT_MAP.get(from_unit.strip().lower())
    target = PINT_UNIT_MAP.get(to_unit.strip().lower())
    if source is None or target is None:
        return None
    if source == target:
        return amount
    try:
        converted = (amount * _ureg(source)).to(target).magnitude
    except pint.DimensionalityError:
        return None
    return round(float(converted), CONVERSION_PRECISION)


@dataclass
class _Accumulator:
    ingredient: str
    unit: str
    total: float = 0.0
    count: int = 0
    recipe_names: list[str] = field(default_factory=list)
    meal_info: list[MealInfo] = field(default_factory=list)

    def add(self, amount: float, recipe_name: str, info: MealInfo) -> None:
        self.total += amount
        self.count += 1
        if recipe_name not in self.recipe_names:
            self.recipe_names.append(recipe_name)
        self.meal_info.append(info)

    def to_item(self) -> ShoppingItem:
        return ShoppingItem(
            ingredient=self.ingredient,
            amount=format_amount(self.total, self.count),
            unit=self.unit,
            checked=False,
            recipe_names=self.recipe_names,
            meal_info=self.meal_info,
        )


def aggregate_meal_plan(
    plan: MealPlanDocument,
    *,
    convert_units: bool = False,
) -> list[ShoppingItem]:
    """Merge every ingredient of a day's plan into one item per ingredient.

    Slots are visited breakfast, lunch, dinner, snack. Each occurrence adds
    its parsed amount, one provenance record and one to the occurrence
    count. Items are named by their lower-cased key, blank names included.
    The unit of the first occurrence wins; with ``convert_units``, later
    occurrences in a compatible known unit are converted to it first.

    Returns:
        Items in first-seen order.
    """
    merged: dict[str, _Accumulator] = {}

    for meal_type in MealType:
        for recipe in plan.slot(meal_type):
            for ingredient in recipe.ingredients:
                key = ingredient_key(ingredient.name)
                amount = parse_amount(ingredient.amount)
                entry = merged.get(key)
                if entry is None:
                    entry = merged[key] = _Accumulator(
                        ingredient=key,
                        unit=ingredient.unit,
                    )
                elif convert_units and ingredient.unit != entry.unit:
                    converted = convert_amount(amount, ingredient.unit, entry.unit)
                    if converted is not None:
                        amount = converted

                entry.add(
                    amount,
                    recipe.name,
                    MealInfo(date=plan.date, meal_type=meal_type, recipe_name=recipe.name),
                )

    return [entry.to_item() for entry in merged.values()]


def merge_first_write_wins(
    existing: list[ShoppingItem],
    generated: Iterable[ShoppingItem],
) -> tuple[list[ShoppingItem], list[ShoppingItem]]:
    """Append generated items whose key is not already on the list.

    Existing items are never modified.

    Returns:
        ``(merged_list, added_items)``
    """
    seen = {item.key for item in existing}
    added: list[ShoppingItem] = []
    for item in generated:
        if item.key in seen:
            continue
        seen.add(item.key)
        added.append(item)
    return [*existing, *added], added


def dedupe_items(items: Iterable[ShoppingItem]) -> list[ShoppingItem]:
    """Keep the first item per key."""
    merged, _ = merge_first_write_wins([], items)
    return merged


def group_by_date(
    items: Iterable[ShoppingItem],
) -> tuple[dict[str, dict[str, list[ShoppingItem]]], list[ShoppingItem]]:
    """Regroup items by the date and meal of each provenance record.

    An item contributed by several occurrences appears under each of their
    groups, once per group.

    Returns:
        ``(groups, ungrouped)`` where ``groups`` is ``{date: {meal_type:
        [item]}}`` with dates ascending and meals in slot order, and
        ``ungrouped`` holds items with no provenance (added by hand).
    """
    groups: dict[str, dict[str, list[ShoppingItem]]] = defaultdict(dict)
    seen: set[tuple[str, str, str]] = set()
    ungrouped: list[ShoppingItem] = []

    for item in items:
        if not item.meal_info:
            ungrouped.append(item)
            continue
        for info in item.meal_info:
            meal = str(info.meal_type)
            marker = (info.date, meal, item.key)
            if marker in seen:
                continue
            seen.add(marker)
            groups[info.date].setdefault(meal, []).append(item)

    meal_order = [str(m) for m in MealType]
    ordered = {
        date: {
            meal: groups[date][meal] for meal in meal_order if meal in groups[date]
        }
        for date in sorted(groups)
    }
    return ordered, ungrouped
