"""Collection progress events.

Emitted by the orchestrator in pipeline order and consumed by the progress
sink. Every event carries the keyword it belongs to and serializes to JSON
for live subscribers.
"""

import uuid
from datetime import UTC, datetime
from typing import Annotated, Literal

from pydantic import BaseModel, Field, TypeAdapter

from inforanker.core.exceptions import ErrorSeverity
from inforanker.models.collection import ArticlePreview, CollectionPhase, SourceCollectionResult


class CollectionEvent(BaseModel):
    """Base class for progress events."""

    keyword_id: uuid.UUID
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class PhaseChangedEvent(CollectionEvent):
    """The job moved to a new phase.

    Attributes:
        phase: New phase
        source_name: Source being processed, if any
        source_index: 1-based index of the source
        total_sources: Number of sources in the job
        message: Human readable progress message
    """

    type: Literal["phase_changed"] = "phase_changed"
    phase: CollectionPhase
    source_name: str | None = None
    source_index: int = 0
    total_sources: int = 0
    message: str | None = None


class ArticlesFetchedEvent(CollectionEvent):
    """A source returned new (deduplicated, persisted) articles."""

    type: Literal["articles_fetched"] = "articles_fetched"
    source_name: str
    articles: list[ArticlePreview] = Field(default_factory=list)


class ArticlesPassedFilterEvent(CollectionEvent):
    """Relevance filter results for a source landed.

    Attributes:
        source_name: Source the articles came from
        evaluated_count: Articles the filter looked at
        articles: Articles that passed, now pending quality evaluation
        bypassed: The filter was skipped for this source
    """

    type: Literal["articles_passed_filter"] = "articles_passed_filter"
    source_name: str
    evaluated_count: int = 0
    articles: list[ArticlePreview] = Field(default_factory=list)
    bypassed: bool = False


class ArticlesQualityScoredEvent(CollectionEvent):
    """Quality evaluation and final scoring of a source finished."""

    type: Literal["articles_quality_scored"] = "articles_quality_scored"
    source_name: str
    articles: list[ArticlePreview] = Field(default_factory=list)


class TokenUsageEvent(CollectionEvent):
    """Token usage delta. Always additive."""

    type: Literal["token_usage"] = "token_usage"
    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    estimated_cost_usd: float = Field(default=0.0, ge=0)


class SourceCompletedEvent(CollectionEvent):
    type: Literal["source_completed"] = "source_completed"
    result: SourceCollectionResult


class JobErrorEvent(CollectionEvent):
    """A failure of any severity.

    Attributes:
        severity: Failure severity
        source_name: Source being processed, if any
        message: Failure message
        article_title: Article the failure concerns, for warnings
        is_fatal: Whether the job is aborted
    """

    type: Literal["job_error"] = "job_error"
    severity: ErrorSeverity
    source_name: str | None = None
    message: str
    article_title: str | None = None
    is_fatal: bool = False


class JobCompletedEvent(CollectionEvent):
    type: Literal["job_completed"] = "job_completed"
    total_collected: int = 0
    total_scored: int = 0
    message: str | None = None


AnyCollectionEvent = Annotated[
    PhaseChangedEvent
    | ArticlesFetchedEvent
    | ArticlesPassedFilterEvent
    | ArticlesQualityScoredEvent
    | TokenUsageEvent
    | SourceCompletedEvent
    | JobErrorEvent
    | JobCompletedEvent,
    Field(discriminator="type"),
]

event_adapter: TypeAdapter[AnyCollectionEvent] = TypeAdapter(AnyCollectionEvent)


def parse_event(payload: str | bytes) -> CollectionEvent:
    """Decode an event published as JSON."""
    return event_adapter.validate_json(payload)


__all__ = [
    "CollectionEvent",
    "PhaseChangedEvent",
    "ArticlesFetchedEvent",
    "ArticlesPassedFilterEvent",
    "ArticlesQualityScoredEvent",
    "TokenUsageEvent",
    "SourceCompletedEvent",
    "JobErrorEvent",
    "JobCompletedEvent",
    "AnyCollectionEvent",
    "parse_event",
]
