"""Grocery line items and the plain-text list format they are written in.

Each line of a list reads ``name:qty::price:::category::::meal``. Only the
name is required; blank lines and lines starting with ``//`` are ignored.
A line starting with ``#`` names the meal for the lines below it.
"""

import re
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from typing import Any

DEFAULT_PRICE = "2.99"
DEFAULT_CATEGORY = "Other"

_PRICE_CHARS = re.compile(r"[^0-9.]")
_LEADING_NUMBER = re.compile(r"^\s*(\d*\.?\d+)")


@dataclass
class ParsedItem:
    """A grocery line that has not been persisted yet."""

    name: str
    qty: str = ""
    price: str = ""
    category: str = ""
    meal: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ParsedItem":
        return cls(
            name=str(data.get("name") or ""),
            qty=str(data.get("qty") or ""),
            price=str(data.get("price") or ""),
            category=str(data.get("category") or ""),
            meal=str(data.get("meal") or ""),
        )


def parse_line(line: str) -> ParsedItem | None:
    """Parse one ``name:qty::price:::category::::meal`` line."""
    rest, _, meal = line.partition("::::")
    rest, _, category = rest.partition(":::")
    rest, _, price = rest.partition("::")
    name, _, qty = rest.partition(":")

    name = name.strip()
    if not name:
        return None
    return ParsedItem(
        name=name,
        qty=qty.strip(),
        price=price.strip(),
        category=category.strip(),
        meal=meal.strip(),
    )


def parse_grocery_list_text(text: str) -> list[ParsedItem]:
    """Parse a multi-line grocery list into items, in input order."""
    items: list[ParsedItem] = []
    current_meal = ""

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("//"):
            continue
        if line.startswith("#"):
            current_meal = line.lstrip("#").strip()
            continue

        item = parse_line(line)
        if item is None:
            continue
        if not item.meal:
            item.meal = current_meal
        items.append(item)

    return items


def group_items_by_category(items: Iterable[ParsedItem]) -> dict[str, list[ParsedItem]]:
    """Group items by category, keeping first-seen category order."""
    grouped: dict[str, list[ParsedItem]] = {}
    for item in items:
        grouped.setdefault(item.category or DEFAULT_CATEGORY, []).append(item)
    return grouped


def get_price(price: str) -> float:
    """Read a currency string such as '$3.49' as a float; 0.0 if unreadable."""
    try:
        return float(_PRICE_CHARS.sub("", price or ""))
    except ValueError:
        return 0.0


def calculate_cost(item: ParsedItem) -> float:
    """Line cost: the leading number of qty (1 when absent) times the price."""
    match = _LEADING_NUMBER.match(item.qty or "")
    qty = float(match.group(1)) if match else 0.0
    return (qty or 1.0) * get_price(item.price)


def calculate_total_cost(items: Iterable[ParsedItem]) -> float:
    return sum(calculate_cost(item) for item in items)
