"""Shopping list generation from meal plans."""

from shoppinglist.plan.shopping_list import (
    GeneratedList,
    NoIngredientsError,
    ShoppingListGenerator,
    build_raw_text,
)

__all__ = [
    "GeneratedList",
    "NoIngredientsError",
    "ShoppingListGenerator",
    "build_raw_text",
]
