"""Collection job and status models.

These are not persisted. A CollectionJob lives from enqueue until the
worker consumes it; a CollectionStatus is kept in the status store until it
is explicitly cleared.
"""

import enum
import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from inforanker.core.exceptions import ErrorSeverity


class CollectionPhase(str, enum.Enum):
    """Collection job phase."""

    QUEUED = "queued"
    COLLECTING_SOURCE = "collecting_source"
    SCORING_SOURCE = "scoring_source"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CollectionPhase.COMPLETED, CollectionPhase.FAILED)


class CollectionJob(BaseModel):
    """A queued request to collect one keyword.

    Attributes:
        keyword_id: Keyword to collect
        keyword_term: Term, for display
        queued_at: Enqueue time
        debug_mode: Cap the number of articles per source
        debug_article_limit: Cap applied in debug mode
    """

    keyword_id: uuid.UUID
    keyword_term: str
    queued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    debug_mode: bool = False
    debug_article_limit: int = Field(default=3, ge=1)


class SourceCollectionResult(BaseModel):
    """Outcome of one source within a job."""

    source_name: str
    count: int = 0
    scored_count: int = 0
    success: bool = True
    error_message: str | None = None


class CollectionErrorRecord(BaseModel):
    """Diagnostic recorded on the status for any severity."""

    severity: ErrorSeverity
    message: str
    source_name: str | None = None
    article_title: str | None = None
    is_fatal: bool = False
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ArticlePreview(BaseModel):
    """Lightweight article snapshot shown while a job is running."""

    title: str
    url: str
    source_name: str
    native_score: int | None = None
    relevance_score: float | None = None
    llm_score: float | None = None
    final_score: float | None = None
    summary_ja: str | None = None


class CollectionStatus(BaseModel):
    """Pollable progress of one keyword's collection.

    Counters only grow during a run. Preview lists are transient and are
    cleared when the stage that follows them lands.
    """

    keyword_id: uuid.UUID
    keyword_term: str
    phase: CollectionPhase = CollectionPhase.QUEUED
    current_source: str | None = None
    source_index: int = 0
    total_sources: int = 0
    message: str | None = None

    articles_collected: int = 0
    articles_scored: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    estimated_cost_usd: float = 0.0

    queued_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    started_at: datetime | None = None
    completed_at: datetime | None = None

    has_fatal_error: bool = False
    fatal_error_message: str | None = None

    source_results: list[SourceCollectionResult] = Field(default_factory=list)
    errors: list[CollectionErrorRecord] = Field(default_factory=list)

    fetched_previews: list[ArticlePreview] = Field(default_factory=list)
    pending_scoring_previews: list[ArticlePreview] = Field(default_factory=list)
    scored_previews: list[ArticlePreview] = Field(default_factory=list)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def is_finished(self) -> bool:
        return self.phase.is_terminal


__all__ = [
    "CollectionPhase",
    "CollectionJob",
    "SourceCollectionResult",
    "CollectionErrorRecord",
    "ArticlePreview",
    "CollectionStatus",
]
