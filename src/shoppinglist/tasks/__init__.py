"""Celery tasks for background job processing."""

from shoppinglist.tasks.backup import export_backup_task, run_backup

__all__ = [
    "export_backup_task",
    "run_backup",
]
