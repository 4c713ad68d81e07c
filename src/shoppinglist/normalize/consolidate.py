"""Merge near-duplicate grocery lines into a single shopping list."""

import math
from collections.abc import Iterable
from dataclasses import replace

from shoppinglist.logging_config import get_logger
from shoppinglist.normalize.items import DEFAULT_CATEGORY, DEFAULT_PRICE, ParsedItem
from shoppinglist.normalize.similarity import SIMILARITY_THRESHOLD, is_same_ingredient
from shoppinglist.normalize.units import parse_quantity

logger = get_logger(__name__)


def merge_meal_tags(*tag_lists: str) -> str:
    """Union comma-separated meal tags, keeping first-appearance order."""
    seen: dict[str, None] = {}
    for tags in tag_lists:
        for tag in (tags or "").split(","):
            tag = tag.strip()
            if tag:
                seen.setdefault(tag, None)
    return ", ".join(seen)


def merge_items(existing: ParsedItem, incoming: ParsedItem) -> ParsedItem:
    """
    Fold ``incoming`` into ``existing`` and return the merged item.

    Neither argument is modified.

    - Meal tags are unioned.
    - A specific unit beats the generic "ea": that side's name and qty win.
    - Equal units are summed; a sum too large for a float keeps the existing qty.
    - Different specific units are not converted; the longer name is kept.
    - Price and category are only filled in over empty or placeholder values,
      and only from an incoming value that is itself non-empty. An incoming
      placeholder category never replaces anything.
    """
    merged = replace(existing, meal=merge_meal_tags(existing.meal, incoming.meal))

    current_qty = parse_quantity(existing.qty)
    new_qty = parse_quantity(incoming.qty)

    if current_qty.is_generic and not new_qty.is_generic:
        merged.name = incoming.name
        merged.qty = incoming.qty
    elif new_qty.is_generic and not current_qty.is_generic:
        pass
    elif current_qty.unit == new_qty.unit:
        total = current_qty + new_qty
        if math.isfinite(total.amount):
            merged.qty = total.to_display_string()
    elif len(incoming.name) > len(existing.name):
        merged.name = incoming.name

    if incoming.price and (not existing.price or existing.price == DEFAULT_PRICE):
        merged.price = incoming.price

    if (
        incoming.category
        and incoming.category != DEFAULT_CATEGORY
        and (not existing.category or existing.category == DEFAULT_CATEGORY)
    ):
        merged.category = incoming.category

    return merged


def consolidate(
    items: Iterable[ParsedItem],
    threshold: float = SIMILARITY_THRESHOLD,
) -> list[ParsedItem]:
    """
    Merge items whose names are similar enough to be the same ingredient.

    Single pass in input order: each item is merged into the first earlier
    result it matches, or appended. Matching is not transitive, so with
    A~B, B~C and A!~C the outcome depends on arrival order. Cost is
    quadratic in the number of distinct ingredients.

    The input items are left untouched; the result holds copies.
    """
    result: list[ParsedItem] = []
    merges = 0

    for item in items:
        for index, existing in enumerate(result):
            if is_same_ingredient(existing.name, item.name, threshold):
                result[index] = merge_items(existing, item)
                merges += 1
                break
        else:
            result.append(replace(item))

    if merges:
        logger.debug(f"Consolidated {len(result) + merges} items into {len(result)}")
    return result
