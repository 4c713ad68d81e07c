"""Parse, normalize and consolidate grocery line items."""

from shoppinglist.normalize.consolidate import consolidate, merge_items, merge_meal_tags
from shoppinglist.normalize.items import (
    DEFAULT_CATEGORY,
    DEFAULT_PRICE,
    ParsedItem,
    calculate_cost,
    calculate_total_cost,
    get_price,
    group_items_by_category,
    parse_grocery_list_text,
)
from shoppinglist.normalize.similarity import (
    SIMILARITY_THRESHOLD,
    is_same_ingredient,
    name_similarity,
)
from shoppinglist.normalize.units import (
    DEFAULT_QUANTITY,
    GENERIC_UNIT,
    Quantity,
    format_amount,
    parse_quantity,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_PRICE",
    "DEFAULT_QUANTITY",
    "GENERIC_UNIT",
    "SIMILARITY_THRESHOLD",
    "ParsedItem",
    "Quantity",
    "calculate_cost",
    "calculate_total_cost",
    "consolidate",
    "format_amount",
    "get_price",
    "group_items_by_category",
    "is_same_ingredient",
    "merge_items",
    "merge_meal_tags",
    "name_similarity",
    "parse_grocery_list_text",
    "parse_quantity",
]
