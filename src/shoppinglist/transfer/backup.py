"""File-based backups built on the export document."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from shoppinglist.logging_config import get_logger
from shoppinglist.transfer.schemas import DataExportFormat

logger = get_logger(__name__)

BACKUP_PREFIX = "shopping-list-data-export-"


def export_filename(moment: datetime | None = None) -> str:
    """File name for an export taken at ``moment`` (now by default)."""
    moment = moment or datetime.now(timezone.utc)
    return f"{BACKUP_PREFIX}{moment.strftime('%Y-%m-%dT%H-%M-%S')}.json"


def write_backup(export: DataExportFormat, directory: str | Path) -> Path:
    """Write an export document to a timestamped JSON file and return its path."""
    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / export_filename()
    path.write_text(json.dumps(export.to_document(), indent=2), encoding="utf-8")

    logger.info(f"Backup written to {path} ({path.stat().st_size / 1024:.1f} KB)")
    return path


def read_document(path: str | Path) -> Any:
    """Load a JSON export document from disk."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def prune_backups(directory: str | Path, keep: int) -> list[Path]:
    """Delete all but the newest ``keep`` backups. Returns the removed paths."""
    backups = sorted(Path(directory).glob(f"{BACKUP_PREFIX}*.json"))
    stale = backups[:-keep] if keep > 0 else backups
    for path in stale:
        path.unlink()
        logger.info(f"Removed old backup {path.name}")
    return stale
