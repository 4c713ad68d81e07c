"""Celery tasks for scheduled data backups."""

from typing import Any

from shoppinglist.celery_app import celery_app
from shoppinglist.config import settings
from shoppinglist.logging_config import LoggingContext, configure_logging, get_logger
from shoppinglist.transfer import export_all_data, prune_backups, write_backup

configure_logging(settings.log_level)
logger = get_logger(__name__)


def run_backup(backup_dir: str | None = None, keep: int | None = None) -> dict[str, Any]:
    """
    Export all data to a timestamped file and drop backups beyond the retention count.

    Returns:
        dict with the written path, totals and the removed files.
    """
    target_dir = backup_dir or settings.backup_dir
    retention = settings.backup_keep if keep is None else keep

    export = export_all_data()
    path = write_backup(export, target_dir)
    removed = prune_backups(target_dir, retention)

    return {
        "status": "completed",
        "path": str(path),
        "version": export.version,
        "total_plans": export.metadata.total_plans,
        "total_lists": export.metadata.total_lists,
        "total_items": export.metadata.total_items,
        "removed": [p.name for p in removed],
    }


@celery_app.task(
    bind=True,
    name="shoppinglist.tasks.backup.export_backup_task",
    max_retries=3,
    default_retry_delay=300,  # 5 minutes
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=3600,
    retry_jitter=True,
    acks_late=True,
)
def export_backup_task(
    self,
    backup_dir: str | None = None,
    keep: int | None = None,
) -> dict[str, Any]:
    """
    Write a nightly export backup.

    Scheduled by Celery Beat; can also be queued manually.
    """
    task_id = self.request.id

    with LoggingContext(task_id=task_id):
        logger.info(f"Starting backup task {task_id} (dir={backup_dir or settings.backup_dir})")
        try:
            result = run_backup(backup_dir, keep)
        except Exception as e:
            logger.error(f"Backup task {task_id} failed: {e}")
            raise

        logger.info(f"Backup task {task_id} wrote {result['path']}")
        return result
