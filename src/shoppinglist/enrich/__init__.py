"""AI enrichment of consolidated grocery items."""

from shoppinglist.enrich.pricing import (
    PriceEstimationError,
    PriceEstimator,
    PricingResult,
    clean_ai_response,
    match_price,
)
from shoppinglist.enrich.usage import AIUsage, record_ai_usage

__all__ = [
    "AIUsage",
    "record_ai_usage",
    "PriceEstimationError",
    "PriceEstimator",
    "PricingResult",
    "clean_ai_response",
    "match_price",
]
