"""Keyword collection Celery tasks.

Each task runs the in-process collection queue to completion inside its
own event loop:

1. Load the keywords to collect
2. Enqueue one job per keyword
3. Drain the queue with the collection worker

Tasks:
- collect_active_keywords: Collect every active keyword (scheduled)
- collect_keyword: Collect a single keyword
"""

import asyncio
import uuid
from datetime import UTC, datetime
from typing import Any

from celery import shared_task
from celery.utils.log import get_task_logger
from pydantic import BaseModel, Field

from inforanker.core.container import ApplicationContainer, create_container
from inforanker.core.exceptions import RecordNotFoundError
from inforanker.models.collection import CollectionJob, CollectionPhase, CollectionStatus
from inforanker.models.keyword import Keyword
from inforanker.services.collector.repository import KeywordRepository

logger = get_task_logger(__name__)


class CollectionRunSummary(BaseModel):
    """Result of one collection task run.

    Attributes:
        keywords: Keyword terms that were queued
        completed: Jobs that completed
        failed: Jobs that failed
        articles_collected: New articles across all jobs
        articles_scored: Scored articles across all jobs
        started_at: Task start time
        completed_at: Task completion time
        errors: Fatal error messages by keyword term
    """

    keywords: list[str] = Field(default_factory=list)
    completed: int = 0
    failed: int = 0
    articles_collected: int = 0
    articles_scored: int = 0
    started_at: datetime
    completed_at: datetime | None = None
    errors: dict[str, str] = Field(default_factory=dict)

    def add_status(self, status: CollectionStatus) -> None:
        self.articles_collected += status.articles_collected
        self.articles_scored += status.articles_scored
        if status.phase == CollectionPhase.COMPLETED:
            self.completed += 1
        elif status.phase == CollectionPhase.FAILED:
            self.failed += 1
            self.errors[status.keyword_term] = status.fatal_error_message or "unknown error"


async def _collect_keywords_async(
    keyword_id: uuid.UUID | None = None,
    debug_mode: bool = False,
) -> CollectionRunSummary:
    """Queue and drain collection jobs.

    Args:
        keyword_id: Single keyword to collect; every active keyword if None
        debug_mode: Cap articles per source

    Returns:
        CollectionRunSummary with per-run totals

    Raises:
        RecordNotFoundError: If keyword_id does not exist
    """
    summary = CollectionRunSummary(started_at=datetime.now(UTC))

    # Async clients must belong to this task's event loop
    task_container = create_container()
    try:
        pipeline_config = task_container.services.pipeline_config()
        session_factory = task_container.infrastructure.db_session_factory()
        async with session_factory() as session:
            repository = KeywordRepository(session)
            keywords: list[Keyword] = (
                [await repository.get(keyword_id)]
                if keyword_id is not None
                else list(await repository.list_active())
            )

        queue = task_container.collection_queue()
        for keyword in keywords:
            await queue.enqueue(
                CollectionJob(
                    keyword_id=keyword.id,
                    keyword_term=keyword.term,
                    debug_mode=debug_mode,
                    debug_article_limit=pipeline_config.collection.debug_article_limit,
                )
            )
            summary.keywords.append(keyword.term)

        await task_container.collection_worker().drain()

        for keyword in keywords:
            status = queue.get_status(keyword.id)
            if status is not None:
                summary.add_status(status)
    finally:
        await _close_clients(task_container)

    summary.completed_at = datetime.now(UTC)
    return summary


async def _close_clients(task_container: ApplicationContainer) -> None:
    await task_container.infrastructure.http_client().close()
    await task_container.infrastructure.redis_async_client().aclose()
    await task_container.infrastructure.db_engine().dispose()


@shared_task(
    bind=True,
    name="inforanker.workers.collect.collect_active_keywords",
    max_retries=3,
    default_retry_delay=300,
)
def collect_active_keywords(self, debug_mode: bool = False) -> dict[str, Any]:
    """Collect every active keyword.

    Runs on the beat schedule. Per-keyword failures are reported in the
    summary; only infrastructure failures trigger a retry.

    Returns:
        CollectionRunSummary as dict
    """
    logger.info("Starting collection of active keywords")

    try:
        summary = asyncio.run(_collect_keywords_async(debug_mode=debug_mode))
    except Exception as exc:
        logger.error(f"Keyword collection failed: {exc}", exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info(
        f"Keyword collection complete: {len(summary.keywords)} keywords, "
        f"completed={summary.completed}, failed={summary.failed}, "
        f"collected={summary.articles_collected}, scored={summary.articles_scored}"
    )
    return summary.model_dump(mode="json")


@shared_task(
    bind=True,
    name="inforanker.workers.collect.collect_keyword",
    max_retries=3,
    default_retry_delay=60,
)
def collect_keyword(self, keyword_id: str, debug_mode: bool = False) -> dict[str, Any]:
    """Collect a single keyword.

    Args:
        self: Celery task instance
        keyword_id: Keyword UUID
        debug_mode: Cap articles per source

    Returns:
        CollectionRunSummary as dict
    """
    logger.info(f"Starting collection for keyword: {keyword_id}")

    try:
        summary = asyncio.run(
            _collect_keywords_async(keyword_id=uuid.UUID(keyword_id), debug_mode=debug_mode)
        )
    except RecordNotFoundError as exc:
        logger.error(f"Keyword not found: {keyword_id}")
        return {"error": str(exc)}
    except Exception as exc:
        logger.error(f"Collection failed for keyword {keyword_id}: {exc}", exc_info=True)
        raise self.retry(exc=exc) from exc

    logger.info(
        f"Keyword {keyword_id} collection complete: "
        f"collected={summary.articles_collected}, scored={summary.articles_scored}"
    )
    return summary.model_dump(mode="json")


__all__ = [
    "CollectionRunSummary",
    "collect_active_keywords",
    "collect_keyword",
]
