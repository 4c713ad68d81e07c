"""Export all stored data as one versioned JSON document."""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from shoppinglist.database import transaction
from shoppinglist.logging_config import LoggingContext, get_logger
from shoppinglist.models import (
    AIMenuCache,
    BankedMeal,
    GroceryItem,
    GroceryList,
    Meal,
    MealAlternativeHistory,
    PantryItem,
    WeeklyMealPlan,
)
from shoppinglist.transfer.schemas import (
    EXPORT_VERSION,
    DataExportFormat,
    ExportData,
    ExportMetadata,
    PlanDateRange,
)

logger = get_logger(__name__)

# (data key, model, ordering) read in this order; id breaks ties so that
# repeated exports of unchanged data come out identical
EXPORT_QUERIES: list[tuple[str, type, tuple]] = [
    (
        "weekly_meal_plans",
        WeeklyMealPlan,
        (WeeklyMealPlan.week_start_date.desc(), WeeklyMealPlan.id),
    ),
    ("meals", Meal, (Meal.plan_id, Meal.day_of_week, Meal.id)),
    ("grocery_lists", GroceryList, (GroceryList.created_at.desc(), GroceryList.id)),
    ("grocery_items", GroceryItem, (GroceryItem.list_id, GroceryItem.created_at, GroceryItem.id)),
    ("pantry_items", PantryItem, (PantryItem.plan_id, PantryItem.created_at, PantryItem.id)),
    ("banked_meals", BankedMeal, (BankedMeal.created_at.desc(), BankedMeal.id)),
    ("ai_menu_cache", AIMenuCache, (AIMenuCache.week_start_date.desc(), AIMenuCache.id)),
    (
        "meal_alternatives_history",
        MealAlternativeHistory,
        (MealAlternativeHistory.created_at.desc(), MealAlternativeHistory.id),
    ),
]


def to_json_value(value: Any) -> Any:
    """Convert a column value into something ``json.dumps`` accepts."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _read_rows(session: Session, model: type, ordering: tuple) -> list[dict[str, Any]]:
    rows = session.execute(select(model.__table__).order_by(*ordering)).mappings()
    return [{key: to_json_value(value) for key, value in row.items()} for row in rows]


def _parse_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value[:10])
        except ValueError:
            return None
    return None


def compute_plan_date_range(plans: list[dict[str, Any]]) -> PlanDateRange | None:
    """Earliest and latest ``week_start_date`` over the plans, or None if no valid dates."""
    dates = [d for d in (_parse_date(plan.get("week_start_date")) for plan in plans) if d]
    if not dates:
        return None
    return PlanDateRange(earliest=min(dates).isoformat(), latest=max(dates).isoformat())


def export_all_data(session: Session | None = None) -> DataExportFormat:
    """
    Read every table inside one transaction and build the export document.

    Either the complete snapshot is returned or the error propagates after
    rollback; a partial export is never produced.

    Args:
        session: Optional session to use. When omitted a pooled session is
            opened for the export and closed afterwards.

    Returns:
        The export document.
    """
    with LoggingContext(transfer_id=uuid.uuid4().hex):
        logger.info("Starting data export")
        tables: dict[str, list[dict[str, Any]]] = {}

        try:
            with transaction(session) as tx:
                for key, model, ordering in EXPORT_QUERIES:
                    tables[key] = _read_rows(tx, model, ordering)
        except Exception as e:
            logger.error(f"Data export failed: {e}")
            raise

        metadata = ExportMetadata(
            total_plans=len(tables["weekly_meal_plans"]),
            total_lists=len(tables["grocery_lists"]),
            total_items=len(tables["grocery_items"]) + len(tables["pantry_items"]),
            plan_date_range=compute_plan_date_range(tables["weekly_meal_plans"]),
        )
        export = DataExportFormat(
            version=EXPORT_VERSION,
            exported_at=datetime.now(timezone.utc).isoformat(),
            data=ExportData(**tables),
            metadata=metadata,
        )

        logger.info(
            f"Exported {metadata.total_plans} plans, {metadata.total_lists} lists, "
            f"{metadata.total_items} items"
        )
        return export
