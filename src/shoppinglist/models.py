"""SQLAlchemy database models.

Table and column names match the existing shopping-list databases so that
export documents stay interchangeable between installations.
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shoppinglist.database import Base

MEAL_TYPES = ("cooking", "leftovers", "eating_out")
BANKED_MEAL_STATUSES = ("banked", "favorited", "archived", "generated", "imported")


class WeeklyMealPlan(Base):
    """A named week of meals, anchored on its first day."""

    __tablename__ = "weekly_meal_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    meals: Mapped[list["Meal"]] = relationship(
        "Meal",
        back_populates="plan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Meal.day_of_week",
    )
    pantry_items: Mapped[list["PantryItem"]] = relationship(
        "PantryItem", back_populates="plan", cascade="all, delete-orphan", passive_deletes=True
    )
    grocery_lists: Mapped[list["GroceryList"]] = relationship(
        "GroceryList", back_populates="meal_plan", passive_deletes=True
    )

    __table_args__ = (Index("idx_weekly_meal_plans_week_start", "week_start_date"),)


class Meal(Base):
    """One day's meal within a weekly plan."""

    __tablename__ = "meals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("weekly_meal_plans.id", ondelete="CASCADE"), nullable=True
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    brief_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_ingredients: Mapped[str | None] = mapped_column(Text, nullable=True)
    cooking_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cooking_temp_f: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cooking_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comfort_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    shortcut_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    cultural_riff_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    veggie_inclusion: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    plan: Mapped["WeeklyMealPlan | None"] = relationship("WeeklyMealPlan", back_populates="meals")

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_meals_day_of_week"),
        CheckConstraint(
            "meal_type IN ('cooking', 'leftovers', 'eating_out')", name="ck_meals_meal_type"
        ),
        Index("idx_meals_plan_id", "plan_id"),
    )


class GroceryList(Base):
    """A shopping list, optionally generated from a meal plan."""

    __tablename__ = "grocery_lists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    meal_plan_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("weekly_meal_plans.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    meal_plan: Mapped["WeeklyMealPlan | None"] = relationship(
        "WeeklyMealPlan", back_populates="grocery_lists"
    )
    items: Mapped[list["GroceryItem"]] = relationship(
        "GroceryItem", back_populates="grocery_list", cascade="all, delete-orphan"
    )


class GroceryItem(Base):
    """A single line on a grocery list."""

    __tablename__ = "grocery_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    qty: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[str] = mapped_column(String(50), nullable=False)
    category: Mapped[str] = mapped_column(String(255), nullable=False)
    meal: Mapped[str] = mapped_column(String(255), nullable=False)
    is_purchased: Mapped[bool] = mapped_column(Boolean, default=False)
    is_skipped: Mapped[bool] = mapped_column(Boolean, default=False)
    list_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("grocery_lists.id", ondelete="CASCADE"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    grocery_list: Mapped["GroceryList | None"] = relationship(
        "GroceryList", back_populates="items"
    )

    __table_args__ = (Index("idx_grocery_items_list_id", "list_id"),)


class PantryItem(Base):
    """An extra item added to a meal plan outside the generated list."""

    __tablename__ = "pantry_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("weekly_meal_plans.id", ondelete="CASCADE"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    qty: Mapped[str] = mapped_column(String(100), nullable=False)
    estimated_price: Mapped[Decimal] = mapped_column(Numeric(8, 2), default=Decimal("0.00"))
    added_via_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    prompt_tokens_used: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    plan: Mapped["WeeklyMealPlan | None"] = relationship(
        "WeeklyMealPlan", back_populates="pantry_items"
    )


class BankedMeal(Base):
    """A meal saved for reuse outside of any particular plan."""

    __tablename__ = "banked_meals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    brief_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    main_ingredients: Mapped[str | None] = mapped_column(Text, nullable=True)
    cooking_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    estimated_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cooking_temp_f: Mapped[int | None] = mapped_column(Integer, nullable=True)
    cooking_time_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    meal_type: Mapped[str] = mapped_column(String(20), nullable=False)
    comfort_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    shortcut_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    cultural_riff_flag: Mapped[bool] = mapped_column(Boolean, default=False)
    veggie_inclusion: Mapped[bool] = mapped_column(Boolean, default=False)
    bank_reason: Mapped[str] = mapped_column(String(255), default="auto_generated")
    original_meal_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    times_used: Mapped[int] = mapped_column(Integer, default=0)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="generated")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "day_of_week >= 0 AND day_of_week <= 6", name="ck_banked_meals_day_of_week"
        ),
        CheckConstraint(
            "meal_type IN ('cooking', 'leftovers', 'eating_out')", name="ck_banked_meals_meal_type"
        ),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_banked_meals_rating"),
        CheckConstraint(
            "status IN ('banked', 'favorited', 'archived', 'generated', 'imported')",
            name="ck_banked_meals_status",
        ),
    )


class AIMenuCache(Base):
    """Record of an AI-generated menu, keyed by week and preference fingerprint."""

    __tablename__ = "ai_menu_cache"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    week_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    plan_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("weekly_meal_plans.id", ondelete="CASCADE"), nullable=True
    )
    preferences_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    ai_cost_tokens: Mapped[int] = mapped_column(Integer, nullable=False)
    generation_time_ms: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint(
            "week_start_date", "preferences_hash", name="uq_ai_menu_cache_week_preferences"
        ),
    )


class MealAlternativeHistory(Base):
    """An alternative suggested for a meal, and whether it was chosen."""

    __tablename__ = "meal_alternatives_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    original_meal_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=True
    )
    alternative_title: Mapped[str] = mapped_column(String(255), nullable=False)
    chosen: Mapped[bool] = mapped_column(Boolean, default=False)
    ai_reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)
    generation_cost_tokens: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class AIUsageStats(Base):
    """Running totals of AI calls made by the service."""

    __tablename__ = "ai_usage_stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    total_calls: Mapped[int] = mapped_column(Integer, default=0)
    total_tokens: Mapped[int] = mapped_column(Integer, default=0)
    total_cost_estimate: Mapped[Decimal] = mapped_column(Numeric(10, 4), default=Decimal("0"))
    last_updated: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
