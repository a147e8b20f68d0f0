"""Article ORM model.

This module defines the Article model for collected, evaluated and ranked
articles.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inforanker.models.base import Base, TimestampMixin, UUIDMixin
from inforanker.models.keyword import Keyword
from inforanker.models.source import Source


class Article(Base, UUIDMixin, TimestampMixin):
    """Collected article and its evaluation results.

    Evaluation fields stay NULL until the stage that produces them has run.
    An article whose relevance filter decision is False never receives
    quality fields.

    Attributes:
        source_id: Owning source
        keyword_id: Owning keyword
        title: Title as published
        url: Canonical link
        normalized_url: Dedup key, unique per keyword
        normalized_title: Title dedup key, unique per keyword (NULL when
            title matching is disabled)
        summary: Short summary or excerpt
        content: Full text, when the source provides it
        published_at: Publication time, if the source reports it
        collected_at: When the article was persisted
        native_score: Source popularity metric (points, upvotes, likes)
        relevance_score: Relevance filter score (0-10)
        is_relevant: Relevance filter decision
        technical_score: Quality axis (0-20)
        novelty_score: Quality axis (0-20)
        impact_score: Quality axis (0-20)
        quality_score: Quality axis (0-20)
        ensemble_relevance_score: Quality evaluation relevance axis (0-20)
        llm_score: Aggregate quality score (0-100)
        final_score: Hybrid ranking score (0-100)
        recommend_score: Reserved for recommendation ranking
        summary_ja: Localized summary
        excluded_from_ranking: Set when the relevance axis is below cutoff
    """

    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint("keyword_id", "normalized_url", name="uq_articles_keyword_url"),
        UniqueConstraint("keyword_id", "normalized_title", name="uq_articles_keyword_title"),
    )

    # Foreign Keys
    source_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sources.id", ondelete="CASCADE"), nullable=False, index=True
    )
    keyword_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("keywords.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Content
    title: Mapped[str] = mapped_column(String(1000), nullable=False)
    url: Mapped[str] = mapped_column(String(2000), nullable=False)
    normalized_url: Mapped[str] = mapped_column(String(2000), nullable=False)
    normalized_title: Mapped[str | None] = mapped_column(String(1000))
    summary: Mapped[str | None] = mapped_column(Text)
    content: Mapped[str | None] = mapped_column(Text)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    collected_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    native_score: Mapped[int | None] = mapped_column(Integer)

    # Relevance filter
    relevance_score: Mapped[float | None] = mapped_column(Float)
    is_relevant: Mapped[bool | None] = mapped_column(Boolean)

    # Quality evaluation
    technical_score: Mapped[float | None] = mapped_column(Float)
    novelty_score: Mapped[float | None] = mapped_column(Float)
    impact_score: Mapped[float | None] = mapped_column(Float)
    quality_score: Mapped[float | None] = mapped_column(Float)
    ensemble_relevance_score: Mapped[float | None] = mapped_column(Float)
    llm_score: Mapped[float | None] = mapped_column(Float)
    summary_ja: Mapped[str | None] = mapped_column(Text)

    # Ranking
    final_score: Mapped[float | None] = mapped_column(Float, index=True)
    recommend_score: Mapped[float | None] = mapped_column(Float)
    excluded_from_ranking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    source: Mapped[Source] = relationship("Source", back_populates="articles")
    keyword: Mapped[Keyword] = relationship("Keyword", back_populates="articles")

    @property
    def has_quality_scores(self) -> bool:
        """Whether quality evaluation has produced a result."""
        return self.llm_score is not None

    def __repr__(self) -> str:
        return f"<Article(id={self.id}, title={self.title[:30]}, final_score={self.final_score})>"


__all__ = ["Article"]
