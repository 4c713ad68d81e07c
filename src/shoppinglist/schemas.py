"""Request and response schemas shared by the API routers."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MealType = Literal["cooking", "leftovers", "eating_out"]


# =============================================================================
# Meals and Plans
# =============================================================================


class MealFields(BaseModel):
    """Columns of a meal that callers may set."""

    day_of_week: int = Field(ge=0, le=6, description="0 = first day of the plan week")
    meal_type: MealType = "cooking"
    title: str | None = Field(None, max_length=255)
    brief_description: str | None = None
    main_ingredients: str | None = Field(
        None, description="Ingredient lines in the grocery text format, or comma separated"
    )
    cooking_instructions: str | None = None
    estimated_time_minutes: int | None = Field(None, ge=0)
    cooking_temp_f: int | None = Field(None, ge=0)
    cooking_time_minutes: int | None = Field(None, ge=0)
    comfort_flag: bool = False
    shortcut_flag: bool = False
    cultural_riff_flag: bool = False
    veggie_inclusion: bool = False


class WeeklyMealPlanCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    week_start_date: date
    meals: list[MealFields] = Field(default_factory=list)


class MealResponse(MealFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_id: int | None
    created_at: datetime | None = None


class WeeklyMealPlanResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    week_start_date: date
    created_at: datetime | None = None
    meals: list[MealResponse] = Field(default_factory=list)


class WeeklyMealPlanListResponse(BaseModel):
    plans: list[WeeklyMealPlanResponse]
    total: int


# =============================================================================
# Explicit Update Structs
# =============================================================================


class _UpdateStruct(BaseModel):
    """Base for partial updates: unknown fields are rejected, unset ones untouched."""

    model_config = ConfigDict(extra="forbid")

    def changes(self) -> dict[str, Any]:
        """Only the fields the caller actually sent."""
        return self.model_dump(exclude_unset=True)


class WeeklyMealPlanUpdate(_UpdateStruct):
    name: str | None = Field(None, min_length=1, max_length=255)
    week_start_date: date | None = None


class MealUpdate(_UpdateStruct):
    day_of_week: int | None = Field(None, ge=0, le=6)
    meal_type: MealType | None = None
    title: str | None = Field(None, max_length=255)
    brief_description: str | None = None
    main_ingredients: str | None = None
    cooking_instructions: str | None = None
    estimated_time_minutes: int | None = Field(None, ge=0)
    cooking_temp_f: int | None = Field(None, ge=0)
    cooking_time_minutes: int | None = Field(None, ge=0)
    comfort_flag: bool | None = None
    shortcut_flag: bool | None = None
    cultural_riff_flag: bool | None = None
    veggie_inclusion: bool | None = None


# Columns that may not be cleared to NULL through an update
NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {
        "name",
        "week_start_date",
        "day_of_week",
        "meal_type",
        "comfort_flag",
        "shortcut_flag",
        "cultural_riff_flag",
        "veggie_inclusion",
    }
)


def apply_update(instance: Any, update: _UpdateStruct) -> list[str]:
    """
    Copy the set fields of ``update`` onto a model instance.

    Returns the names of the fields that were written.

    Raises:
        ValueError: If a required column would be set to None.
    """
    changes = update.changes()
    for field_name, value in changes.items():
        if value is None and field_name in NON_NULLABLE_UPDATE_FIELDS:
            raise ValueError(f"{field_name} cannot be null")
    for field_name, value in changes.items():
        setattr(instance, field_name, value)
    return list(changes)


# =============================================================================
# Grocery Lists
# =============================================================================


class GroceryListGenerateRequest(BaseModel):
    plan_id: int
    list_name: str | None = Field(None, max_length=255)


class GroceryItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    qty: str
    price: str
    category: str
    meal: str
    is_purchased: bool = False
    is_skipped: bool = False


class GroceryListSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    meal_plan_id: int | None = None
    created_at: datetime | None = None


class GroceryListResponse(GroceryListSummary):
    raw_text: str = ""
    items: list[GroceryItemResponse] = Field(default_factory=list)
    items_by_category: dict[str, list[GroceryItemResponse]] = Field(default_factory=dict)
    total_cost: float = 0.0


class GroceryListGenerateResponse(BaseModel):
    id: int
    name: str
    item_count: int
    consolidated_from: int
    ai_calls: int = 0
    ai_tokens: int = 0
    message: str = "Shopping list generated successfully"
