"""Import an export document back into the database.

The whole import runs in one transaction. Every record is inserted inside
its own savepoint, so a constraint violation on one row is reported and
rolled back without poisoning the rest of the run. Foreign keys are
rewritten through per-run id maps, since the destination assigns new ids.
"""

import enum
import math
import uuid
from collections.abc import Callable
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import insert, select, text
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import DataError, IntegrityError
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
from shoppinglist.normalize.items import DEFAULT_CATEGORY
from shoppinglist.transfer.sanitize import sanitize_value
from shoppinglist.transfer.schemas import (
    ENTITY_KEYS,
    EXPORT_VERSION,
    ImportOptions,
    ImportResult,
)

logger = get_logger(__name__)

# Errors that fail a single record rather than the whole import
RECORD_ERRORS = (
    IntegrityError,
    DataError,
    ValueError,
    TypeError,
    OverflowError,
    InvalidOperation,
)

# Human-readable entity names used in messages
ENTITY_LABELS = {
    "weeklyMealPlans": "weekly meal plan",
    "meals": "meal",
    "groceryLists": "grocery list",
    "groceryItems": "grocery item",
    "pantryItems": "pantry item",
    "bankedMeals": "banked meal",
    "aiMenuCache": "AI menu cache",
    "mealAlternativesHistory": "meal alternative",
}


class ImportTransactionError(Exception):
    """Raised when the import transaction itself fails and is rolled back."""

    def __init__(self, message: str, result: ImportResult):
        super().__init__(message)
        self.result = result


class Outcome(enum.Enum):
    IMPORTED = "imported"
    SKIPPED = "skipped"
    REJECTED = "rejected"


# =============================================================================
# Value Coercion
# =============================================================================


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    # json.loads reads 1e999 and Infinity as float("inf")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Not a finite number: {value!r}")
    return int(value)


def _decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    amount = Decimal(str(value))
    if not amount.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return amount


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "t", "1", "yes")
    return bool(value)


def _date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip()[:10])
    raise ValueError(f"invalid date {value!r}")


def _datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"invalid timestamp {value!r}")
    # Columns store naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _id(value: Any) -> Any:
    """Normalize a source id for use as an id-map key."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return value


def _timestamps(record: dict[str, Any], *columns: str) -> dict[str, datetime]:
    """Source timestamps that are present; absent ones fall back to column defaults."""
    values = {}
    for column in columns:
        parsed = _datetime(record.get(column))
        if parsed is not None:
            values[column] = parsed
    return values


def _same(column: Any, value: Any) -> Any:
    """Equality that also matches NULL against None."""
    return column.is_(None) if value is None else column == value


def _describe(exc: Exception) -> str:
    return str(getattr(exc, "orig", None) or exc)


# =============================================================================
# Importer
# =============================================================================


class DataImporter:
    """Imports the entity arrays of one document into an open transaction."""

    def __init__(self, session: Session, options: ImportOptions, result: ImportResult):
        self.session = session
        self.options = options
        self.result = result
        self.id_maps: dict[str, dict[Any, int]] = {"plans": {}, "meals": {}, "lists": {}}
        self._preserved_tables: set[str] = set()

    # -------------------------------------------------------------------------
    # Id maps
    # -------------------------------------------------------------------------

    def _remember(self, kind: str, old_id: Any, new_id: int) -> None:
        if old_id is not None:
            self.id_maps[kind][_id(old_id)] = new_id

    def _resolve(self, kind: str, old_id: Any) -> int | None:
        if old_id is None:
            return None
        return self.id_maps[kind].get(_id(old_id))

    def _first_id(self, model: type, *conditions: Any) -> int | None:
        return self.session.execute(
            select(model.id).where(*conditions).order_by(model.id).limit(1)
        ).scalar_one_or_none()

    def _add(self, instance: Any, record: dict[str, Any]) -> int:
        if self.options.preserve_ids and _id(record.get("id")) is not None:
            instance.id = _int(record["id"])
            self._preserved_tables.add(instance.__tablename__)
        self.session.add(instance)
        self.session.flush()
        return instance.id

    # -------------------------------------------------------------------------
    # Driver
    # -------------------------------------------------------------------------

    def run(self, data: dict[str, Any]) -> None:
        handlers: dict[str, Callable[[dict[str, Any]], Outcome]] = {
            "weeklyMealPlans": self.import_weekly_meal_plan,
            "meals": self.import_meal,
            "groceryLists": self.import_grocery_list,
            "groceryItems": self.import_grocery_item,
            "pantryItems": self.import_pantry_item,
            "bankedMeals": self.import_banked_meal,
            "aiMenuCache": self.import_ai_menu_cache,
            "mealAlternativesHistory": self.import_meal_alternative,
        }
        for key in ENTITY_KEYS:
            self._import_entity(key, data, handlers[key])

        if self._preserved_tables:
            self._resync_sequences()

    def _import_entity(
        self,
        key: str,
        data: dict[str, Any],
        handler: Callable[[dict[str, Any]], Outcome],
    ) -> None:
        label = ENTITY_LABELS[key]

        if key not in data:
            self.result.add_warning(f"No {key} found in import data")
            return
        records = data[key]
        if not isinstance(records, list):
            self.result.add_error(
                f"Malformed import data: {key} must be an array, got {type(records).__name__}"
            )
            return

        for record in records:
            if not isinstance(record, dict):
                self.result.add_error(
                    f"Error importing {label}: expected an object, got {type(record).__name__}"
                )
                continue
            try:
                with self.session.begin_nested():
                    outcome = handler(record)
            except RECORD_ERRORS as e:
                self.result.add_error(f"Error importing {label}: {_describe(e)}")
                continue

            if outcome is Outcome.IMPORTED:
                self.result.add_imported(key)
            elif outcome is Outcome.SKIPPED:
                self.result.add_skipped(key)

        logger.info(
            f"{key}: {self.result.imported[key]} imported, {self.result.skipped[key]} skipped"
        )

    def _resync_sequences(self) -> None:
        """Move id sequences past explicitly inserted ids (PostgreSQL only)."""
        if self.session.get_bind().dialect.name != "postgresql":
            return
        for table in sorted(self._preserved_tables):
            self.session.execute(
                text(
                    f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                    f"COALESCE((SELECT MAX(id) FROM {table}), 1))"
                )
            )

    # -------------------------------------------------------------------------
    # Entities
    # -------------------------------------------------------------------------

    def import_weekly_meal_plan(self, record: dict[str, Any]) -> Outcome:
        name = _text(record.get("name"))
        week_start_date = _date(record.get("week_start_date"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                WeeklyMealPlan,
                _same(WeeklyMealPlan.name, name),
                WeeklyMealPlan.week_start_date == week_start_date,
            )
            if existing_id is not None:
                self._remember("plans", record.get("id"), existing_id)
                return Outcome.SKIPPED

        plan = WeeklyMealPlan(
            name=name,
            week_start_date=week_start_date,
            **_timestamps(record, "created_at"),
        )
        self._remember("plans", record.get("id"), self._add(plan, record))
        return Outcome.IMPORTED

    def import_meal(self, record: dict[str, Any]) -> Outcome:
        plan_ref = record.get("plan_id")
        plan_id = self._resolve("plans", plan_ref)
        if plan_id is None:
            self.result.add_error(f"Meal skipped: referenced plan_id {plan_ref} not found")
            return Outcome.REJECTED

        day_of_week = _int(record.get("day_of_week"))
        meal_type = _text(record.get("meal_type"))
        title = _text(record.get("title"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                Meal,
                Meal.plan_id == plan_id,
                _same(Meal.day_of_week, day_of_week),
                _same(Meal.meal_type, meal_type),
                _same(Meal.title, title),
            )
            if existing_id is not None:
                self._remember("meals", record.get("id"), existing_id)
                return Outcome.SKIPPED

        meal = Meal(
            plan_id=plan_id,
            day_of_week=day_of_week,
            meal_type=meal_type,
            title=title,
            brief_description=_text(record.get("brief_description")),
            main_ingredients=_text(record.get("main_ingredients")),
            cooking_instructions=_text(record.get("cooking_instructions")),
            estimated_time_minutes=_int(record.get("estimated_time_minutes")),
            cooking_temp_f=_int(record.get("cooking_temp_f")),
            cooking_time_minutes=_int(record.get("cooking_time_minutes")),
            comfort_flag=_bool(record.get("comfort_flag")),
            shortcut_flag=_bool(record.get("shortcut_flag")),
            cultural_riff_flag=_bool(record.get("cultural_riff_flag")),
            veggie_inclusion=_bool(record.get("veggie_inclusion")),
            **_timestamps(record, "created_at"),
        )
        self._remember("meals", record.get("id"), self._add(meal, record))
        return Outcome.IMPORTED

    def import_grocery_list(self, record: dict[str, Any]) -> Outcome:
        name = _text(record.get("name"))
        plan_ref = record.get("meal_plan_id")
        meal_plan_id = self._resolve("plans", plan_ref)
        if plan_ref is not None and meal_plan_id is None:
            # Lists may exist without a plan; keep the list, drop the link
            self.result.add_warning(
                f"Grocery list '{name}' imported without its plan: "
                f"referenced meal_plan_id {plan_ref} not found"
            )

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                GroceryList,
                _same(GroceryList.name, name),
                _same(GroceryList.meal_plan_id, meal_plan_id),
            )
            if existing_id is not None:
                self._remember("lists", record.get("id"), existing_id)
                return Outcome.SKIPPED

        grocery_list = GroceryList(
            name=name,
            raw_text=_text(record.get("raw_text")) or "",
            meal_plan_id=meal_plan_id,
            **_timestamps(record, "created_at"),
        )
        self._remember("lists", record.get("id"), self._add(grocery_list, record))
        return Outcome.IMPORTED

    def import_grocery_item(self, record: dict[str, Any]) -> Outcome:
        list_ref = record.get("list_id")
        list_id = self._resolve("lists", list_ref)
        if list_id is None:
            self.result.add_error(f"Grocery item skipped: referenced list_id {list_ref} not found")
            return Outcome.REJECTED

        name = _text(record.get("name"))
        category = _text(record.get("category")) or DEFAULT_CATEGORY

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                GroceryItem,
                GroceryItem.list_id == list_id,
                _same(GroceryItem.name, name),
                GroceryItem.category == category,
            )
            if existing_id is not None:
                return Outcome.SKIPPED

        item = GroceryItem(
            name=name,
            qty=_text(record.get("qty")) or "",
            price=_text(record.get("price")) or "",
            category=category,
            meal=_text(record.get("meal")) or "",
            is_purchased=_bool(record.get("is_purchased")),
            is_skipped=_bool(record.get("is_skipped")),
            list_id=list_id,
            **_timestamps(record, "created_at"),
        )
        self._add(item, record)
        return Outcome.IMPORTED

    def import_pantry_item(self, record: dict[str, Any]) -> Outcome:
        plan_ref = record.get("plan_id")
        plan_id = self._resolve("plans", plan_ref)
        if plan_id is None:
            self.result.add_error(f"Pantry item skipped: referenced plan_id {plan_ref} not found")
            return Outcome.REJECTED

        name = _text(record.get("name"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                PantryItem, PantryItem.plan_id == plan_id, _same(PantryItem.name, name)
            )
            if existing_id is not None:
                return Outcome.SKIPPED

        item = PantryItem(
            plan_id=plan_id,
            name=name,
            category=_text(record.get("category")) or DEFAULT_CATEGORY,
            qty=_text(record.get("qty")) or "",
            estimated_price=_decimal(record.get("estimated_price")),
            added_via_prompt=_text(record.get("added_via_prompt")),
            prompt_tokens_used=_int(record.get("prompt_tokens_used")) or 0,
            **_timestamps(record, "created_at", "updated_at"),
        )
        self._add(item, record)
        return Outcome.IMPORTED

    def import_banked_meal(self, record: dict[str, Any]) -> Outcome:
        title = _text(record.get("title"))
        day_of_week = _int(record.get("day_of_week"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                BankedMeal,
                _same(BankedMeal.title, title),
                _same(BankedMeal.day_of_week, day_of_week),
            )
            if existing_id is not None:
                return Outcome.SKIPPED

        banked = BankedMeal(
            title=title,
            brief_description=_text(record.get("brief_description")),
            main_ingredients=_text(record.get("main_ingredients")),
            cooking_instructions=_text(record.get("cooking_instructions")),
            estimated_time_minutes=_int(record.get("estimated_time_minutes")),
            cooking_temp_f=_int(record.get("cooking_temp_f")),
            cooking_time_minutes=_int(record.get("cooking_time_minutes")),
            day_of_week=day_of_week,
            meal_type=_text(record.get("meal_type")),
            comfort_flag=_bool(record.get("comfort_flag")),
            shortcut_flag=_bool(record.get("shortcut_flag")),
            cultural_riff_flag=_bool(record.get("cultural_riff_flag")),
            veggie_inclusion=_bool(record.get("veggie_inclusion")),
            bank_reason=_text(record.get("bank_reason")) or "auto_generated",
            original_meal_title=_text(record.get("original_meal_title")),
            times_used=_int(record.get("times_used")) or 0,
            rating=_int(record.get("rating")),
            status=_text(record.get("status")) or "imported",
            **_timestamps(record, "created_at"),
        )
        self._add(banked, record)
        return Outcome.IMPORTED

    def import_ai_menu_cache(self, record: dict[str, Any]) -> Outcome:
        # The cache is disposable; entries for plans that did not come across are dropped quietly
        plan_id = self._resolve("plans", record.get("plan_id"))
        if plan_id is None:
            return Outcome.SKIPPED

        week_start_date = _date(record.get("week_start_date"))
        preferences_hash = _text(record.get("preferences_hash"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                AIMenuCache,
                AIMenuCache.week_start_date == week_start_date,
                _same(AIMenuCache.preferences_hash, preferences_hash),
            )
            if existing_id is not None:
                return Outcome.SKIPPED

        values = {
            "week_start_date": week_start_date,
            "plan_id": plan_id,
            "preferences_hash": preferences_hash,
            "ai_cost_tokens": _int(record.get("ai_cost_tokens")) or 0,
            "generation_time_ms": _int(record.get("generation_time_ms")) or 0,
            **_timestamps(record, "created_at"),
        }
        inserted = self._insert_ignoring_conflicts(
            AIMenuCache, values, ["week_start_date", "preferences_hash"]
        )
        return Outcome.IMPORTED if inserted else Outcome.SKIPPED

    def import_meal_alternative(self, record: dict[str, Any]) -> Outcome:
        meal_ref = record.get("original_meal_id")
        meal_id = self._resolve("meals", meal_ref)
        if meal_id is None:
            self.result.add_error(
                f"Meal alternative skipped: referenced original_meal_id {meal_ref} not found"
            )
            return Outcome.REJECTED

        alternative_title = _text(record.get("alternative_title"))

        if self.options.skip_duplicates:
            existing_id = self._first_id(
                MealAlternativeHistory,
                MealAlternativeHistory.original_meal_id == meal_id,
                _same(MealAlternativeHistory.alternative_title, alternative_title),
            )
            if existing_id is not None:
                return Outcome.SKIPPED

        alternative = MealAlternativeHistory(
            original_meal_id=meal_id,
            alternative_title=alternative_title,
            chosen=_bool(record.get("chosen")),
            ai_reasoning=_text(record.get("ai_reasoning")),
            generation_cost_tokens=_int(record.get("generation_cost_tokens")) or 0,
            **_timestamps(record, "created_at"),
        )
        self._add(alternative, record)
        return Outcome.IMPORTED

    def _insert_ignoring_conflicts(
        self, model: type, values: dict[str, Any], conflict_columns: list[str]
    ) -> bool:
        """Insert a row, doing nothing on a unique conflict. Returns whether a row was written."""
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = postgresql.insert(model).values(**values).on_conflict_do_nothing(
                index_elements=conflict_columns
            )
        elif dialect == "sqlite":
            stmt = sqlite.insert(model).values(**values).on_conflict_do_nothing(
                index_elements=conflict_columns
            )
        else:
            stmt = insert(model).values(**values)
        return self.session.execute(stmt).rowcount > 0


# =============================================================================
# Entry Point
# =============================================================================


def import_data(
    document: Any,
    options: ImportOptions | dict[str, Any] | None = None,
    session: Session | None = None,
) -> ImportResult:
    """
    Sanitize and import an export document.

    Per-record problems are collected in the result and do not stop the run.
    Malformed documents produce a failed result instead of raising.

    Args:
        document: The parsed JSON export document (untrusted).
        options: Import options; defaults apply to anything not given.
        session: Optional session to use. When omitted a pooled session is
            opened for the import and closed afterwards.

    Returns:
        ImportResult with per-entity counts, errors and warnings.

    Raises:
        ImportTransactionError: If the transaction fails as a whole. It has
            been rolled back and the partial result is attached.
    """
    if not isinstance(options, ImportOptions):
        options = ImportOptions.model_validate(options or {})
    result = ImportResult()

    with LoggingContext(transfer_id=uuid.uuid4().hex):
        document = sanitize_value(document)

        if not isinstance(document, dict):
            result.add_error("Malformed import document: expected a JSON object")
            return result

        version = document.get("version")
        if version != EXPORT_VERSION:
            result.add_warning(
                f"Version mismatch: expected {EXPORT_VERSION}, got {version}. "
                "Import may have compatibility issues."
            )

        data = document.get("data")
        if not isinstance(data, dict):
            result.add_error("Malformed import document: 'data' must be an object")
            return result

        logger.info(
            f"Starting data import (skip_duplicates={options.skip_duplicates}, "
            f"preserve_ids={options.preserve_ids})"
        )

        try:
            with transaction(session) as tx:
                DataImporter(tx, options, result).run(data)
        except Exception as e:
            result.add_error(f"Transaction failed: {e}")
            logger.error(f"Data import rolled back: {e}")
            raise ImportTransactionError(str(e), result) from e

        logger.info(f"Data import finished: {result.get_summary()}")
        return result
