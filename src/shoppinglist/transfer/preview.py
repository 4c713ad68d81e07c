"""Summarize what importing a document would do, without touching the database."""

from typing import Any

from shoppinglist.logging_config import get_logger
from shoppinglist.transfer.export import compute_plan_date_range
from shoppinglist.transfer.sanitize import sanitize_value
from shoppinglist.transfer.schemas import ENTITY_KEYS, EXPORT_VERSION, ImportPreview

logger = get_logger(__name__)


def get_import_preview(document: Any) -> ImportPreview:
    """
    Count the records per entity type and check version compatibility.

    The document goes through the same sanitization as an import. Entries
    that are missing or not arrays count as zero and produce a warning.
    """
    document = sanitize_value(document)
    warnings: list[str] = []

    if not isinstance(document, dict):
        return ImportPreview(
            version=None,
            compatible=False,
            summary=dict.fromkeys(ENTITY_KEYS, 0),
            warnings=["Malformed import document: expected a JSON object"],
        )

    raw_version = document.get("version")
    version = None if raw_version is None else str(raw_version)
    compatible = version == EXPORT_VERSION
    if not compatible:
        warnings.append(f"Version mismatch: expected {EXPORT_VERSION}, got {version}")

    data = document.get("data")
    if not isinstance(data, dict):
        warnings.append("Malformed import document: 'data' must be an object")
        data = {}

    summary: dict[str, int] = {}
    for key in ENTITY_KEYS:
        records = data.get(key)
        if isinstance(records, list):
            summary[key] = len(records)
        else:
            summary[key] = 0
            if key in data:
                warnings.append(f"{key} is not an array and will be skipped")

    plans = data.get("weeklyMealPlans")
    date_range = None
    if isinstance(plans, list):
        date_range = compute_plan_date_range([p for p in plans if isinstance(p, dict)])

    logger.debug(f"Import preview: version={version}, compatible={compatible}")
    return ImportPreview(
        version=version,
        compatible=compatible,
        summary=summary,
        date_range=date_range,
        warnings=warnings,
    )
