"""Celery application configuration.

This module configures the Celery application for scheduled collection.
Uses Redis as both broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab

from inforanker.core.config import get_config

_config = get_config()

# Create Celery app
celery_app = Celery(
    "inforanker",
    broker=str(_config.celery_broker_url),
    backend=str(_config.celery_result_backend),
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=3600,  # 1 hour hard limit
    task_soft_time_limit=3300,
    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,
    # Result settings
    result_expires=86400,  # 24 hours
    result_extended=True,
    # Beat scheduler settings
    beat_scheduler="celery.beat:PersistentScheduler",
    beat_schedule_filename="celerybeat-schedule",
    beat_schedule={
        "collect-active-keywords": {
            "task": "inforanker.workers.collect.collect_active_keywords",
            "schedule": crontab(minute="0", hour="*/6"),
        },
    },
    # Task routes
    task_routes={
        "inforanker.workers.collect.*": {"queue": "collect"},
    },
    # Default queue
    task_default_queue="default",
)

# Auto-discover tasks from these modules
celery_app.autodiscover_tasks(
    [
        "inforanker.workers.collect",
    ]
)

__all__ = ["celery_app"]
