"""Export document format, import options and result types."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

EXPORT_VERSION = "1.0.0"

# Keys of the document's ``data`` bag, in dependency order
ENTITY_KEYS: tuple[str, ...] = (
    "weeklyMealPlans",
    "meals",
    "groceryLists",
    "groceryItems",
    "pantryItems",
    "bankedMeals",
    "aiMenuCache",
    "mealAlternativesHistory",
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# Export Document
# =============================================================================


class PlanDateRange(_CamelModel):
    """Earliest and latest plan week, as ISO dates."""

    earliest: str
    latest: str


class ExportMetadata(_CamelModel):
    total_plans: int = 0
    total_lists: int = 0
    total_items: int = Field(0, description="Grocery items plus pantry items")
    plan_date_range: PlanDateRange | None = None


class ExportData(_CamelModel):
    """The eight entity arrays of an export, each a list of plain row dicts."""

    weekly_meal_plans: list[dict[str, Any]] = Field(default_factory=list)
    meals: list[dict[str, Any]] = Field(default_factory=list)
    grocery_lists: list[dict[str, Any]] = Field(default_factory=list)
    grocery_items: list[dict[str, Any]] = Field(default_factory=list)
    pantry_items: list[dict[str, Any]] = Field(default_factory=list)
    banked_meals: list[dict[str, Any]] = Field(default_factory=list)
    ai_menu_cache: list[dict[str, Any]] = Field(default_factory=list)
    meal_alternatives_history: list[dict[str, Any]] = Field(default_factory=list)


class DataExportFormat(_CamelModel):
    """A versioned, self-contained snapshot of all stored data."""

    version: str = EXPORT_VERSION
    exported_at: str
    data: ExportData = Field(default_factory=ExportData)
    metadata: ExportMetadata = Field(default_factory=ExportMetadata)

    def to_document(self) -> dict[str, Any]:
        """Render the JSON document, omitting ``planDateRange`` when unset."""
        return {
            "version": self.version,
            "exportedAt": self.exported_at,
            "data": self.data.model_dump(by_alias=True),
            "metadata": self.metadata.model_dump(by_alias=True, exclude_none=True),
        }


# =============================================================================
# Import
# =============================================================================


class ImportOptions(_CamelModel):
    """Options accepted by an import run.

    ``supplement_mode`` is accepted and echoed, but imports are additive
    either way; nothing is replaced or deleted.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    supplement_mode: bool = True
    skip_duplicates: bool = True
    preserve_ids: bool = False


class ImportResult:
    """Accounting of one import run."""

    def __init__(self) -> None:
        self.imported: dict[str, int] = dict.fromkeys(ENTITY_KEYS, 0)
        self.skipped: dict[str, int] = dict.fromkeys(ENTITY_KEYS, 0)
        self.errors: list[str] = []
        self.warnings: list[str] = []

    @property
    def success(self) -> bool:
        return not self.errors

    def add_imported(self, entity: str) -> None:
        self.imported[entity] += 1

    def add_skipped(self, entity: str) -> None:
        self.skipped[entity] += 1

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "imported": dict(self.imported),
            "skipped": dict(self.skipped),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }

    def get_summary(self) -> str:
        """One-line human readable summary."""
        imported = sum(self.imported.values())
        skipped = sum(self.skipped.values())
        return (
            f"{imported} imported, {skipped} skipped, "
            f"{len(self.errors)} errors, {len(self.warnings)} warnings"
        )


class ImportPreview(_CamelModel):
    """What an import of a document would contain, computed without a database."""

    version: str | None = None
    compatible: bool
    summary: dict[str, int]
    date_range: PlanDateRange | None = None
    warnings: list[str] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
