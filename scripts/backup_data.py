"""Back up and restore all shopping-list data as a JSON export document.

Run with:
    python scripts/backup_data.py export [--dir backups]
    python scripts/backup_data.py preview backups/shopping-list-data-export-....json
    python scripts/backup_data.py import backups/shopping-list-data-export-....json [--no-skip-duplicates]

Requires PostgreSQL to be reachable at DATABASE_URL.
"""

import argparse
import json
import sys

from shoppinglist.config import settings
from shoppinglist.database import Base, sync_engine
from shoppinglist.logging_config import configure_logging, get_logger
from shoppinglist.transfer import (
    ImportOptions,
    ImportTransactionError,
    export_all_data,
    get_import_preview,
    import_data,
    read_document,
    write_backup,
)

logger = get_logger(__name__)


def run_export(args: argparse.Namespace) -> int:
    export = export_all_data()
    path = write_backup(export, args.dir)

    print(f"\n{'=' * 60}")
    print(f"Export written: {path}")
    print(f"  Plans: {export.metadata.total_plans}")
    print(f"  Lists: {export.metadata.total_lists}")
    print(f"  Items: {export.metadata.total_items}")
    if export.metadata.plan_date_range:
        date_range = export.metadata.plan_date_range
        print(f"  Weeks: {date_range.earliest} .. {date_range.latest}")
    print(f"{'=' * 60}\n")
    return 0


def run_preview(args: argparse.Namespace) -> int:
    preview = get_import_preview(read_document(args.file))
    print(json.dumps(preview.to_dict(), indent=2))
    return 0 if preview.compatible else 1


def run_import(args: argparse.Namespace) -> int:
    Base.metadata.create_all(sync_engine)

    options = ImportOptions(
        skip_duplicates=not args.no_skip_duplicates,
        preserve_ids=args.preserve_ids,
    )
    try:
        result = import_data(read_document(args.file), options)
    except ImportTransactionError as e:
        logger.error(f"Import rolled back: {e}")
        print(json.dumps(e.result.to_dict(), indent=2))
        return 2

    print(json.dumps(result.to_dict(), indent=2))
    print(result.get_summary())
    return 0 if result.success else 1


def main() -> int:
    """Entry point for the backup script."""
    parser = argparse.ArgumentParser(description="Export, preview or import shopping-list data")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write an export file")
    export_parser.add_argument("--dir", "-d", default=settings.backup_dir, help="Target directory")
    export_parser.set_defaults(handler=run_export)

    preview_parser = subparsers.add_parser("preview", help="Summarize an export file")
    preview_parser.add_argument("file", help="Export file to read")
    preview_parser.set_defaults(handler=run_preview)

    import_parser = subparsers.add_parser("import", help="Import an export file")
    import_parser.add_argument("file", help="Export file to read")
    import_parser.add_argument(
        "--no-skip-duplicates", action="store_true", help="Insert records even if they exist"
    )
    import_parser.add_argument(
        "--preserve-ids", action="store_true", help="Keep the ids from the export file"
    )
    import_parser.set_defaults(handler=run_import)

    args = parser.parse_args()
    configure_logging(settings.log_level)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
