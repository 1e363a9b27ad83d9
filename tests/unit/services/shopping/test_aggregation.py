"""Unit tests for shopping list aggregation."""

from __future__ import annotations

from typing import Any

import pytest

from app.database.documents import MealInfo, MealPlanDocument, ShoppingItem
from app.services.shopping.aggregation import (
    aggregate_meal_plan,
    convert_amount,
    format_amount,
    group_by_date,
    merge_first_write_wins,
    parse_amount,
)


pytestmark = pytest.mark.unit


def _recipe(name: str, *ingredients: tuple[str, str, str]) -> dict[str, Any]:
    return {
        "id": name.lower(),
        "name": name,
        "ingredients": [
            {"name": n, "amount": amount, "unit": unit} for n, amount, unit in ingredients
        ],
    }


def _plan(date: str = "2024-05-01", **slots: list[dict[str, Any]]) -> MealPlanDocument:
    return MealPlanDocument.model_validate(
        {"id": "p", "user_id": "user-1", "date": date, **slots}
    )


class TestParseAmount:
    """Tests for lenient amount parsing."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("200", 200.0),
            ("1.5", 1.5),
            ("200g", 200.0),
            ("1/2", 1.0),
            ("a pinch", 0.0),
            ("", 0.0),
            (None, 0.0),
            (3, 3.0),
        ],
    )
    def test_leading_number(self, raw: Any, expected: float) -> None:
        assert parse_amount(raw) == expected


class TestFormatAmount:
    """Tests for merged amount rendering."""

    def test_single_occurrence(self) -> None:
        assert format_amount(200.0, 1) == "200"

    def test_merged_occurrences(self) -> None:
        """Should append the occurrence count."""
        assert format_amount(300.0, 2) == "300 (x2)"

    def test_fractional_sum(self) -> None:
        assert format_amount(1.5, 3) == "1.5 (x3)"


class TestAggregateMealPlan:
    """Tests for aggregate_meal_plan."""

    def test_merges_case_insensitively(self) -> None:
        """Should sum amounts and name items by their lower-cased key."""
        plan = _plan(
            breakfast=[_recipe("Porridge", ("Milk", "200", "ml"))],
            dinner=[_recipe("Curry", ("milk", "100", "ml"), ("Rice", "1", "cup"))],
        )

        items = aggregate_meal_plan(plan)

        assert [i.ingredient for i in items] == ["milk", "rice"]
        milk = items[0]
        assert milk.amount == "300 (x2)"
        assert milk.unit == "ml"
        assert milk.recipe_names == ["Porridge", "Curry"]
        assert [str(m.meal_type) for m in milk.meal_info] == ["breakfast", "dinner"]
        assert milk.checked is False

    def test_first_unit_wins_without_conversion(self) -> None:
        plan = _plan(
            lunch=[
                _recipe("A", ("Flour", "1", "kg")),
                _recipe("B", ("Flour", "500", "g")),
            ]
        )

        items = aggregate_meal_plan(plan)

        assert items[0].amount == "501 (x2)"
        assert items[0].unit == "kg"

    def test_converts_compatible_units_when_enabled(self) -> None:
        plan = _plan(
            lunch=[
                _recipe("A", ("Flour", "1", "kg")),
                _recipe("B", ("Flour", "500", "g")),
            ]
        )

        items = aggregate_meal_plan(plan, convert_units=True)

        assert items[0].amount == "1.5 (x2)"

    def test_same_recipe_twice_counts_twice(self) -> None:
        """Should add one provenance record per occurrence."""
        soup = _recipe("Soup", ("Onion", "1", ""))
        plan = _plan(lunch=[soup], dinner=[soup])

        items = aggregate_meal_plan(plan)

        assert items[0].amount == "2 (x2)"
        assert items[0].recipe_names == ["Soup"]
        assert len(items[0].meal_info) == 2

    def test_blank_names_share_empty_key(self) -> None:
        """Should count blank names under the empty key with provenance."""
        plan = _plan(
            snack=[_recipe("Odd", ("  ", "1", ""), ("", "2", ""))],
        )

        items = aggregate_meal_plan(plan)

        assert [i.ingredient for i in items] == [""]
        assert items[0].amount == "3 (x2)"
        assert items[0].recipe_names == ["Odd"]
        assert len(items[0].meal_info) == 2


class TestConvertAmount:
    """Tests for convert_amount."""

    def test_weight(self) -> None:
        assert convert_amount(500, "g", "kg") == 0.5

    def test_incompatible_dimensions(self) -> None:
        assert convert_amount(1, "cup", "g") is None

    def test_unknown_unit(self) -> None:
        assert convert_amount(2, "clove", "g") is None


class TestMergeFirstWriteWins:
    """Tests for merging generated items into a list."""

    def test_existing_items_untouched(self) -> None:
        """Should never overwrite an item already on the list."""
        existing = [ShoppingItem(ingredient="Milk", amount="1", unit="l", checked=True)]
        generated = [
            ShoppingItem(ingredient="milk", amount="300", unit="ml"),
            ShoppingItem(ingredient="Rice", amount="1", unit="cup"),
        ]

        merged, added = merge_first_write_wins(existing, generated)

        assert [i.ingredient for i in merged] == ["Milk", "Rice"]
        assert merged[0].checked is True
        assert merged[0].amount == "1"
        assert [i.ingredient for i in added] == ["Rice"]


class TestGroupByDate:
    """Tests for the grouped view."""

    def test_groups_by_provenance(self) -> None:
        item = ShoppingItem(
            ingredient="Milk",
            meal_info=[
                MealInfo(date="2024-05-02", meal_type="dinner", recipe_name="Curry"),
                MealInfo(date="2024-05-01", meal_type="breakfast", recipe_name="Oats"),
                MealInfo(date="2024-05-01", meal_type="breakfast", recipe_name="Tea"),
            ],
        )
        manual = ShoppingItem(ingredient="Soap")

        groups, ungrouped = group_by_date([item, manual])

        assert list(groups) == ["2024-05-01", "2024-05-02"]
        assert [i.ingredient for i in groups["2024-05-01"]["breakfast"]] == ["Milk"]
        assert list(groups["2024-05-02"]) == ["dinner"]
        assert ungrouped == [manual]
