"""Quantity parsing for free-form grocery quantity text."""

import math
import re
from dataclasses import dataclass

from shoppinglist.logging_config import get_logger

logger = get_logger(__name__)


# =============================================================================
# Unit Alias Table
# =============================================================================

GENERIC_UNIT = "ea"

# Alias -> canonical short form
UNIT_ALIASES: dict[str, str] = {
    # Count
    "ea": "ea",
    "each": "ea",
    "x": "ea",
    "piece": "ea",
    "pieces": "ea",
    "pc": "ea",
    "pcs": "ea",
    "whole": "ea",
    "item": "ea",
    "items": "ea",
    # Weight
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "g": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    # Volume
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "liter": "l",
    "liters": "l",
    "litre": "l",
    "litres": "l",
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "tbsp": "tbsp",
    "tbs": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "fl oz": "fl oz",
    "fluid ounce": "fl oz",
    "fluid ounces": "fl oz",
    "gal": "gal",
    "gallon": "gal",
    "gallons": "gal",
    "qt": "qt",
    "quart": "qt",
    "quarts": "qt",
    "pt": "pt",
    "pint": "pt",
    "pints": "pt",
    # Packaging
    "pkg": "pkg",
    "package": "pkg",
    "packages": "pkg",
    "pack": "pkg",
    "packs": "pkg",
    "can": "can",
    "cans": "can",
    "jar": "jar",
    "jars": "jar",
    "bottle": "bottle",
    "bottles": "bottle",
    "bag": "bag",
    "bags": "bag",
    "box": "box",
    "boxes": "box",
    "bunch": "bunch",
    "bunches": "bunch",
    "head": "head",
    "heads": "head",
    "clove": "clove",
    "cloves": "clove",
    "dozen": "dozen",
    "doz": "dozen",
    "loaf": "loaf",
    "loaves": "loaf",
    "stick": "stick",
    "sticks": "stick",
}

KNOWN_UNITS: frozenset[str] = frozenset(UNIT_ALIASES.values())

# Leading amount: mixed fraction, simple fraction, range or decimal
_AMOUNT_PATTERN = re.compile(
    r"^\s*(\d+\s+\d+/\d+|\d+/\d+|\d*\.?\d+(?:\s*-\s*\d*\.?\d+)?)\s*(.*)$"
)
_UNIT_PUNCTUATION = ".,;()[]"
_PARENTHESIZED = re.compile(r"\([^)]*\)")


# =============================================================================
# Quantity Value Type
# =============================================================================


@dataclass(frozen=True)
class Quantity:
    """An amount paired with a canonical unit."""

    amount: float
    unit: str

    @property
    def is_generic(self) -> bool:
        """True when the unit is the generic count fallback."""
        return self.unit == GENERIC_UNIT

    def __add__(self, other: "Quantity") -> "Quantity":
        if self.unit != other.unit:
            raise ValueError(f"Cannot add {other.unit} to {self.unit}")
        return Quantity(amount=self.amount + other.amount, unit=self.unit)

    def to_display_string(self) -> str:
        """Render as '<amount> <unit>', e.g. '7 ea' or '1.5 lb'."""
        return f"{format_amount(self.amount)} {self.unit}"


DEFAULT_QUANTITY = Quantity(amount=1.0, unit=GENERIC_UNIT)


# =============================================================================
# Parsing Functions
# =============================================================================


def _read_amount(amount_str: str) -> float:
    amount_str = amount_str.strip()

    range_match = re.fullmatch(r"(\d*\.?\d+)\s*-\s*(\d*\.?\d+)", amount_str)
    if range_match:
        return (float(range_match.group(1)) + float(range_match.group(2))) / 2

    mixed_match = re.fullmatch(r"(\d+)\s+(\d+)/(\d+)", amount_str)
    if mixed_match:
        whole, num, denom = (int(g) for g in mixed_match.groups())
        if denom == 0:
            raise ValueError(f"Zero denominator in {amount_str!r}")
        return whole + num / denom

    frac_match = re.fullmatch(r"(\d+)/(\d+)", amount_str)
    if frac_match:
        num, denom = (int(g) for g in frac_match.groups())
        if denom == 0:
            raise ValueError(f"Zero denominator in {amount_str!r}")
        return num / denom

    return float(amount_str)


def parse_amount(amount_str: str) -> float:
    """
    Parse the numeric part of a quantity into a float.

    Handles formats like:
    - "2"
    - "1.5" or ".5"
    - "1/2"
    - "1 1/2" (one and a half)
    - "2-3" (range, returns average)

    Raises ValueError for zero denominators and amounts too large for a float.
    """
    try:
        amount = _read_amount(amount_str)
    except OverflowError as e:
        raise ValueError(f"Amount too large in {amount_str!r}") from e
    if not math.isfinite(amount):
        raise ValueError(f"Amount too large in {amount_str!r}")
    return amount


def normalize_unit(token: str) -> str | None:
    """Map a unit alias to its canonical short form, or None if unknown."""
    return UNIT_ALIASES.get(token.lower().strip(_UNIT_PUNCTUATION + " "))


def _read_unit(remainder: str) -> str:
    """Pick the unit out of the text that follows the amount."""
    # "2 (12 oz.) cans" carries a package size; the unit is the word after it
    remainder = _PARENTHESIZED.sub(" ", remainder)
    words = [w.strip(_UNIT_PUNCTUATION) for w in remainder.lower().split()]
    words = [w for w in words if w and not w[0].isdigit()]
    if not words:
        return GENERIC_UNIT

    # two-word aliases such as "fl oz"
    if len(words) > 1:
        canonical = normalize_unit(f"{words[0]} {words[1]}")
        if canonical:
            return canonical

    return normalize_unit(words[0]) or words[0]


def parse_quantity(qty: str | None) -> Quantity:
    """
    Parse free-form quantity text into a Quantity.

    "3 ea" -> (3, "ea"), "2 lbs" -> (2, "lb"), "1 1/2 cups" -> (1.5, "cup").
    A bare known unit ("lb") implies an amount of 1. An unknown unit token is
    kept literally. Anything that cannot be read falls back to (1, "ea").
    """
    if not qty or not qty.strip():
        return DEFAULT_QUANTITY

    match = _AMOUNT_PATTERN.match(qty)
    if not match:
        unit = normalize_unit(qty)
        return Quantity(amount=1.0, unit=unit) if unit else DEFAULT_QUANTITY

    try:
        amount = parse_amount(match.group(1))
    except ValueError:
        logger.debug(f"Unreadable quantity {qty!r}, using default")
        return DEFAULT_QUANTITY

    return Quantity(amount=amount, unit=_read_unit(match.group(2)))


def format_amount(amount: float) -> str:
    """Format an amount without trailing zeros: 7.0 -> '7', 1.50 -> '1.5'."""
    if math.isfinite(amount) and amount == int(amount):
        return str(int(amount))
    return f"{amount:.2f}".rstrip("0").rstrip(".")
