"""Versioned export, import and preview of all stored data."""

from shoppinglist.transfer.backup import prune_backups, read_document, write_backup
from shoppinglist.transfer.export import export_all_data
from shoppinglist.transfer.importer import ImportTransactionError, import_data
from shoppinglist.transfer.preview import get_import_preview
from shoppinglist.transfer.sanitize import sanitize_value
from shoppinglist.transfer.schemas import (
    ENTITY_KEYS,
    EXPORT_VERSION,
    DataExportFormat,
    ImportOptions,
    ImportPreview,
    ImportResult,
)

__all__ = [
    "ENTITY_KEYS",
    "EXPORT_VERSION",
    "DataExportFormat",
    "ImportOptions",
    "ImportPreview",
    "ImportResult",
    "ImportTransactionError",
    "export_all_data",
    "get_import_preview",
    "import_data",
    "prune_backups",
    "read_document",
    "sanitize_value",
    "write_backup",
]
