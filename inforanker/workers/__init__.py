"""Celery workers for InfoRanker.

Modules:
- celery_app: Celery application configuration and beat schedule
- collect: Keyword collection tasks
"""

from inforanker.workers.celery_app import celery_app

__all__ = ["celery_app"]
