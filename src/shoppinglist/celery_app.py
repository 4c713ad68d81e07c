"""Celery application configuration for background jobs."""

import os

from celery import Celery
from celery.schedules import crontab

from shoppinglist.config import settings

# Results go to the same database the service uses, through the sync driver
RESULT_BACKEND_URL = "db+" + settings.sync_database_url

celery_app = Celery(
    "shoppinglist",
    broker=settings.redis_url,
    backend=RESULT_BACKEND_URL,
    include=["shoppinglist.tasks.backup"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    result_expires=86400 * 7,  # 7 days
    task_default_retry_delay=60,
    task_max_retries=3,
    beat_schedule={
        "nightly-data-export": {
            "task": "shoppinglist.tasks.backup.export_backup_task",
            "schedule": crontab(hour=settings.backup_hour, minute=0),
            "options": {"queue": "backups"},
        },
    },
    task_routes={
        "shoppinglist.tasks.backup.*": {"queue": "backups"},
    },
    worker_hijack_root_logger=False,
)

if os.name == "nt":
    celery_app.conf.update(worker_pool="solo")
