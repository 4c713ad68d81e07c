"""Shopping list generation from weekly meal plans."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from shoppinglist.enrich.pricing import PriceEstimator
from shoppinglist.enrich.usage import AIUsage
from shoppinglist.logging_config import get_logger
from shoppinglist.normalize.consolidate import consolidate
from shoppinglist.normalize.items import (
    DEFAULT_CATEGORY,
    ParsedItem,
    calculate_total_cost,
    parse_grocery_list_text,
)

logger = get_logger(__name__)


class NoIngredientsError(ValueError):
    """Raised when a plan has no cooking meals with ingredients."""


@dataclass
class GeneratedList:
    """A consolidated, priced list ready to be stored."""

    name: str
    raw_text: str
    items: list[ParsedItem] = field(default_factory=list)
    parsed_count: int = 0
    usage: AIUsage = field(default_factory=AIUsage)

    @property
    def total_cost(self) -> float:
        return calculate_total_cost(self.items)


def _ingredient_lines(main_ingredients: str) -> list[str]:
    """One line per ingredient: multi-line text is kept, a single line is split on commas."""
    if "\n" in main_ingredients:
        lines = main_ingredients.splitlines()
    else:
        lines = main_ingredients.split(",")
    return [line.strip() for line in lines if line.strip()]


def meal_label(meal: Any) -> str:
    return meal.title or f"Day {meal.day_of_week + 1} Meal"


def build_raw_text(meals: Iterable[Any]) -> str:
    """
    Render the cooking meals of a plan as grocery list text.

    Each meal becomes a ``# <title>`` header followed by its ingredient lines,
    so parsed items carry the meal as their tag.
    """
    blocks = []
    for meal in meals:
        if meal.meal_type != "cooking" or not meal.main_ingredients:
            continue
        lines = _ingredient_lines(meal.main_ingredients)
        if lines:
            blocks.append("\n".join([f"# {meal_label(meal)}", *lines]))
    return "\n\n".join(blocks)


def default_list_name(plan: Any) -> str:
    return f"Shopping for {plan.name} (Week of {plan.week_start_date.isoformat()})"


class ShoppingListGenerator:
    """Turns a plan's meals into a consolidated, priced grocery list."""

    def __init__(self, price_estimator: PriceEstimator):
        self.price_estimator = price_estimator

    async def generate(
        self,
        plan: Any,
        meals: Iterable[Any],
        list_name: str | None = None,
    ) -> GeneratedList:
        """
        Build the list for a plan.

        Raises:
            NoIngredientsError: If no cooking meal lists any ingredients.
        """
        raw_text = build_raw_text(meals)
        parsed = parse_grocery_list_text(raw_text)
        if not parsed:
            raise NoIngredientsError("No cooking meals with ingredients found in this plan")

        for item in parsed:
            if not item.category:
                item.category = DEFAULT_CATEGORY

        consolidated = consolidate(parsed)
        logger.info(
            f"Plan {plan.id}: {len(parsed)} ingredient lines consolidated to {len(consolidated)}"
        )

        pricing = await self.price_estimator.estimate_prices(consolidated)
        return GeneratedList(
            name=list_name or default_list_name(plan),
            raw_text=raw_text,
            items=pricing.items,
            parsed_count=len(parsed),
            usage=pricing.usage,
        )
