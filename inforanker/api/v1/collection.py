"""Collection endpoints.

Enqueue collection jobs, read or clear their status, follow their progress
events live, and read a keyword's ranked articles.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import aclosing
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse
from pydantic import BaseModel
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from inforanker.config.pipeline import PipelineConfig
from inforanker.core.container import container, get_db_session, get_redis
from inforanker.core.exceptions import RecordNotFoundError
from inforanker.core.logging import get_logger
from inforanker.core.redis import subscribe_channel
from inforanker.models.article import Article
from inforanker.models.collection import CollectionJob, CollectionStatus
from inforanker.services.collection.events import (
    JobCompletedEvent,
    JobErrorEvent,
    parse_event,
)
from inforanker.services.collection.progress import progress_channel
from inforanker.services.collection.queue import CollectionQueue
from inforanker.services.collector.repository import ArticleRepository, KeywordRepository

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["collection"])


class RankedArticleResponse(BaseModel):
    """A ranked article as returned by the API."""

    id: uuid.UUID
    title: str
    url: str
    source_name: str
    published_at: datetime | None = None
    native_score: int | None = None
    relevance_score: float | None = None
    technical_score: float | None = None
    novelty_score: float | None = None
    impact_score: float | None = None
    quality_score: float | None = None
    ensemble_relevance_score: float | None = None
    llm_score: float | None = None
    final_score: float
    summary_ja: str | None = None

    @classmethod
    def from_article(cls, article: Article) -> "RankedArticleResponse":
        fields = {
            name: getattr(article, name) for name in cls.model_fields if name != "source_name"
        }
        return cls.model_validate({**fields, "source_name": article.source.name})


def get_collection_queue() -> CollectionQueue:
    """FastAPI dependency for the process-wide collection queue."""
    return container.collection_queue()


def get_pipeline_config() -> PipelineConfig:
    return container.services.pipeline_config()


@router.post(
    "/keywords/{keyword_id}/collect",
    response_model=CollectionStatus,
    status_code=status.HTTP_202_ACCEPTED,
)
async def enqueue_collection(
    keyword_id: uuid.UUID,
    debug: bool = Query(default=False, description="Cap articles per source"),
    session: AsyncSession = Depends(get_db_session),
    queue: CollectionQueue = Depends(get_collection_queue),
    pipeline_config: PipelineConfig = Depends(get_pipeline_config),
) -> CollectionStatus:
    """Queue a collection job for a keyword."""
    try:
        keyword = await KeywordRepository(session).get(keyword_id)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    job = CollectionJob(
        keyword_id=keyword.id,
        keyword_term=keyword.term,
        debug_mode=debug,
        debug_article_limit=pipeline_config.collection.debug_article_limit,
    )
    return await queue.enqueue(job)


@router.get("/collection/status", response_model=list[CollectionStatus])
async def list_statuses(
    queue: CollectionQueue = Depends(get_collection_queue),
) -> list[CollectionStatus]:
    """Every known job status, most recently queued first."""
    return queue.get_all_statuses()


@router.get("/collection/status/{keyword_id}", response_model=CollectionStatus)
async def get_status(
    keyword_id: uuid.UUID,
    queue: CollectionQueue = Depends(get_collection_queue),
) -> CollectionStatus:
    job_status = queue.get_status(keyword_id)
    if job_status is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No collection status")
    return job_status


@router.delete("/collection/status/{keyword_id}", status_code=status.HTTP_204_NO_CONTENT)
async def clear_status(
    keyword_id: uuid.UUID,
    queue: CollectionQueue = Depends(get_collection_queue),
) -> None:
    if not queue.clear_status(keyword_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No collection status")


def _is_final(payload: str) -> bool:
    event = parse_event(payload)
    if isinstance(event, JobErrorEvent):
        return event.is_fatal
    return isinstance(event, JobCompletedEvent)


async def stream_progress(redis: Redis, keyword_id: uuid.UUID) -> AsyncIterator[str]:
    """Relay a keyword's progress events as server-sent events.

    The stream ends after the job completes or fails.

    Args:
        redis: Async Redis client
        keyword_id: Keyword ID

    Yields:
        SSE frames carrying the event JSON
    """
    channel = progress_channel(keyword_id)
    async with aclosing(subscribe_channel(redis, channel)) as payloads:
        async for payload in payloads:
            yield f"data: {payload}\n\n"
            if _is_final(payload):
                logger.debug("Progress stream finished", keyword_id=str(keyword_id))
                return


@router.get("/collection/status/{keyword_id}/events")
async def progress_events(
    keyword_id: uuid.UUID,
    redis: Redis = Depends(get_redis),
) -> StreamingResponse:
    """Follow a job's progress events live."""
    return StreamingResponse(
        stream_progress(redis, keyword_id),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/keywords/{keyword_id}/articles", response_model=list[RankedArticleResponse])
async def ranked_articles(
    keyword_id: uuid.UUID,
    limit: int = Query(default=50, ge=1, le=500),
    session: AsyncSession = Depends(get_db_session),
) -> list[RankedArticleResponse]:
    """Ranked articles of a keyword, best first."""
    articles = await ArticleRepository(session).ranked(keyword_id, limit=limit)
    return [RankedArticleResponse.from_article(article) for article in articles]


__all__ = [
    "router",
    "RankedArticleResponse",
    "get_collection_queue",
    "get_pipeline_config",
    "stream_progress",
]
