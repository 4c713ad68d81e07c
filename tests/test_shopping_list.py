"""Unit tests for shopping list generation."""

from dataclasses import replace
from datetime import date
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from shoppinglist.enrich import AIUsage, PricingResult
from shoppinglist.plan import NoIngredientsError, ShoppingListGenerator, build_raw_text


def make_meal(title, ingredients, meal_type="cooking", day=0):
    return SimpleNamespace(
        title=title, main_ingredients=ingredients, meal_type=meal_type, day_of_week=day
    )


# =============================================================================
# Raw Text Tests
# =============================================================================


class TestBuildRawText:
    """Tests for rendering meals as grocery list text."""

    def test_cooking_meals_only(self):
        """Test that leftovers and eating out contribute nothing."""
        meals = [
            make_meal("Tacos", "ground beef:1 lb, tortillas"),
            make_meal("Leftovers", "ground beef", meal_type="leftovers"),
            make_meal("Pizza place", "pizza", meal_type="eating_out"),
        ]
        assert build_raw_text(meals) == "# Tacos\nground beef:1 lb\ntortillas"

    def test_multiline_ingredients_kept(self):
        """Test that multi-line ingredients are not split on commas."""
        meals = [make_meal("Soup", "stock:1 qt\nsalt, to taste\n\n")]
        assert build_raw_text(meals) == "# Soup\nstock:1 qt\nsalt, to taste"

    def test_untitled_meal_label(self):
        """Test that untitled meals are labelled by day."""
        meals = [make_meal(None, "rice", day=2)]
        assert build_raw_text(meals) == "# Day 3 Meal\nrice"

    def test_meals_without_ingredients_skipped(self):
        """Test that meals without ingredients produce no block."""
        assert build_raw_text([make_meal("Mystery", None), make_meal("Air", " , ")]) == ""


# =============================================================================
# Generator Tests
# =============================================================================


class TestShoppingListGenerator:
    """Tests for ShoppingListGenerator."""

    @pytest.fixture
    def plan(self):
        return SimpleNamespace(id=1, name="Busy week", week_start_date=date(2026, 2, 1))

    @pytest.fixture
    def estimator(self):
        """Estimator that prices everything at 1.50 and reports one call."""
        mock = AsyncMock()

        async def estimate(items):
            return PricingResult(
                items=[replace(item, price="1.50") for item in items],
                usage=AIUsage(calls=1, tokens=90),
            )

        mock.estimate_prices.side_effect = estimate
        return mock

    @pytest.mark.asyncio
    async def test_generate_consolidates_and_prices(self, plan, estimator):
        """Test that shared ingredients merge and the list is priced."""
        meals = [
            make_meal("Omelette", "eggs:3 ea, cheddar:4 oz"),
            make_meal("Cake", "eggs:4 ea, flour:2 cups", day=1),
        ]

        generated = await ShoppingListGenerator(estimator).generate(plan, meals)

        assert generated.parsed_count == 4
        assert [item.name for item in generated.items] == ["eggs", "cheddar", "flour"]
        eggs = generated.items[0]
        assert eggs.qty == "7 ea"
        assert eggs.meal == "Omelette, Cake"
        assert eggs.category == "Other"
        assert all(item.price == "1.50" for item in generated.items)
        assert generated.usage == AIUsage(calls=1, tokens=90)
        estimator.estimate_prices.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_default_name(self, plan, estimator):
        """Test the generated list name when none is given."""
        generated = await ShoppingListGenerator(estimator).generate(
            plan, [make_meal("Tacos", "tortillas")]
        )
        assert generated.name == "Shopping for Busy week (Week of 2026-02-01)"

    @pytest.mark.asyncio
    async def test_custom_name(self, plan, estimator):
        """Test that a given name is used."""
        generated = await ShoppingListGenerator(estimator).generate(
            plan, [make_meal("Tacos", "tortillas")], list_name="Costco run"
        )
        assert generated.name == "Costco run"

    @pytest.mark.asyncio
    async def test_total_cost(self, plan, estimator):
        """Test that the total multiplies leading quantities by prices."""
        generated = await ShoppingListGenerator(estimator).generate(
            plan, [make_meal("Breakfast", "eggs:2 ea, bread")]
        )
        assert generated.total_cost == pytest.approx(2 * 1.50 + 1.50)

    @pytest.mark.asyncio
    async def test_no_ingredients(self, plan, estimator):
        """Test that a plan without cooking ingredients is refused."""
        meals = [make_meal("Out", "pizza", meal_type="eating_out")]

        with pytest.raises(NoIngredientsError):
            await ShoppingListGenerator(estimator).generate(plan, meals)

        estimator.estimate_prices.assert_not_called()
