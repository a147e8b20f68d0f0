"""Progress sink.

Projects collection events onto the status store and forwards them to
live subscribers over Redis pub/sub. Events of one keyword are applied in
the order they are emitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from inforanker.core.logging import get_logger
from inforanker.models.collection import (
    ArticlePreview,
    CollectionErrorRecord,
    CollectionPhase,
    CollectionStatus,
)
from inforanker.services.collection.events import (
    ArticlesFetchedEvent,
    ArticlesPassedFilterEvent,
    ArticlesQualityScoredEvent,
    CollectionEvent,
    JobCompletedEvent,
    JobErrorEvent,
    PhaseChangedEvent,
    SourceCompletedEvent,
    TokenUsageEvent,
)
from inforanker.services.collection.status import StatusStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

PROGRESS_CHANNEL_PREFIX = "collection:progress"


def progress_channel(keyword_id: Any) -> str:
    return f"{PROGRESS_CHANNEL_PREFIX}:{keyword_id}"


def estimate_cost(
    input_tokens: int,
    output_tokens: int,
    input_cost_per_million: float,
    output_cost_per_million: float,
) -> float:
    """Estimated USD cost of a token count.

    Example:
        >>> estimate_cost(1_000_000, 500_000, 0.15, 0.60)
        0.45
    """
    cost = (
        input_tokens * input_cost_per_million + output_tokens * output_cost_per_million
    ) / 1_000_000
    return round(cost, 6)


class ProgressPublisher(Protocol):
    """Anything that accepts progress events."""

    async def publish(self, event: CollectionEvent) -> None: ...


# ============================================
# Status projection
# ============================================


def _without_source(previews: list[ArticlePreview], source_name: str) -> list[ArticlePreview]:
    return [p for p in previews if p.source_name != source_name]


class StatusProjector:
    """Applies events to the status store.

    Preview rules:
    - fetched previews are appended per source and cleared for that source
      once its relevance filter results land
    - articles that passed the filter become pending previews until their
      quality scores land, then move to scored previews
    - completing a source clears whatever fetched or pending previews it
      left behind
    - job completion clears every preview list; counters and source
      results remain
    """

    def __init__(self, store: StatusStore):
        self.store = store

    async def publish(self, event: CollectionEvent) -> None:
        self.apply(event)

    def apply(self, event: CollectionEvent) -> CollectionStatus | None:
        """Apply one event.

        Args:
            event: Progress event

        Returns:
            Updated status copy, or None when the keyword has no status
        """
        return self.store.mutate(event.keyword_id, lambda status: self._project(status, event))

    def _project(self, status: CollectionStatus, event: CollectionEvent) -> None:
        if isinstance(event, PhaseChangedEvent):
            status.phase = event.phase
            status.current_source = event.source_name
            status.source_index = event.source_index
            status.total_sources = event.total_sources
            if event.message:
                status.message = event.message
            if status.started_at is None and event.phase != CollectionPhase.QUEUED:
                status.started_at = event.occurred_at
            if event.phase.is_terminal:
                status.completed_at = event.occurred_at
        elif isinstance(event, ArticlesFetchedEvent):
            status.articles_collected += len(event.articles)
            status.fetched_previews.extend(event.articles)
        elif isinstance(event, ArticlesPassedFilterEvent):
            status.fetched_previews = _without_source(
                status.fetched_previews, event.source_name
            )
            status.pending_scoring_previews.extend(event.articles)
        elif isinstance(event, ArticlesQualityScoredEvent):
            status.pending_scoring_previews = _without_source(
                status.pending_scoring_previews, event.source_name
            )
            status.scored_previews.extend(event.articles)
            status.articles_scored += len(event.articles)
        elif isinstance(event, TokenUsageEvent):
            status.input_tokens += event.input_tokens
            status.output_tokens += event.output_tokens
            status.estimated_cost_usd = round(
                status.estimated_cost_usd + event.estimated_cost_usd, 6
            )
        elif isinstance(event, SourceCompletedEvent):
            name = event.result.source_name
            status.source_results.append(event.result)
            status.fetched_previews = _without_source(status.fetched_previews, name)
            status.pending_scoring_previews = _without_source(
                status.pending_scoring_previews, name
            )
        elif isinstance(event, JobErrorEvent):
            status.errors.append(
                CollectionErrorRecord(
                    severity=event.severity,
                    message=event.message,
                    source_name=event.source_name,
                    article_title=event.article_title,
                    is_fatal=event.is_fatal,
                    occurred_at=event.occurred_at,
                )
            )
            if event.is_fatal:
                status.has_fatal_error = True
                status.fatal_error_message = event.message
                status.phase = CollectionPhase.FAILED
                status.completed_at = event.occurred_at
                status.message = f"Failed: {event.message}"
        elif isinstance(event, JobCompletedEvent):
            status.phase = CollectionPhase.COMPLETED
            status.completed_at = status.completed_at or event.occurred_at
            status.current_source = None
            status.message = event.message or "Completed"
            status.fetched_previews.clear()
            status.pending_scoring_previews.clear()
            status.scored_previews.clear()
        else:
            logger.debug("Unhandled progress event", event_type=type(event).__name__)


# ============================================
# Live publishing
# ============================================


class RedisProgressPublisher:
    """Publishes events as JSON to ``collection:progress:{keyword_id}``.

    Delivery is best effort: publish failures are logged, never raised.
    """

    def __init__(self, redis: Redis[Any]):
        self.redis = redis

    async def publish(self, event: CollectionEvent) -> None:
        channel = progress_channel(event.keyword_id)
        try:
            await self.redis.publish(channel, event.model_dump_json())
        except Exception as e:
            logger.warning("Progress publish failed", channel=channel, error=str(e))


class ProgressSink:
    """Fans events out to the projector, then to every publisher, in order.

    Example:
        >>> sink = ProgressSink(StatusProjector(store), [RedisProgressPublisher(redis)])
        >>> await sink.emit(JobCompletedEvent(keyword_id=keyword_id))
    """

    def __init__(
        self,
        projector: StatusProjector,
        publishers: list[ProgressPublisher] | None = None,
    ):
        self.projector = projector
        self.publishers: list[ProgressPublisher] = list(publishers or [])

    async def emit(self, event: CollectionEvent) -> None:
        self.projector.apply(event)
        for publisher in self.publishers:
            await publisher.publish(event)


__all__ = [
    "PROGRESS_CHANNEL_PREFIX",
    "progress_channel",
    "estimate_cost",
    "ProgressPublisher",
    "StatusProjector",
    "RedisProgressPublisher",
    "ProgressSink",
]
