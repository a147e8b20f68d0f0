"""Source ORM model and M:N relationship with Keyword.

This module defines article sources and their keyword associations.
"""

import enum
from typing import TYPE_CHECKING
from urllib.parse import quote

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Enum,
    Float,
    ForeignKey,
    String,
    Table,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inforanker.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from inforanker.models.article import Article
    from inforanker.models.keyword import Keyword


class SourceType(str, enum.Enum):
    """Source collection method type."""

    API = "api"  # JSON search APIs (Hacker News, Reddit)
    RSS = "rss"  # RSS/Atom feeds (arXiv)
    SCRAPING = "scraping"  # HTML scraping


# M:N Association Table
keyword_sources = Table(
    "keyword_sources",
    Base.metadata,
    Column("keyword_id", ForeignKey("keywords.id", ondelete="CASCADE"), primary_key=True),
    Column("source_id", ForeignKey("sources.id", ondelete="CASCADE"), primary_key=True),
)


class Source(Base, UUIDMixin, TimestampMixin):
    """Article source.

    Sources are read-only during collection.

    Attributes:
        name: Unique display name, also used to resolve score normalization
        base_url: Site URL
        search_url_template: Search URL with a {keyword} placeholder
        type: Collection method type
        has_native_score: Whether articles carry a popularity metric
        has_server_side_filtering: Whether the source search is keyword scoped,
            in which case the relevance filter is skipped
        authority_weight: Trust multiplier in (0, 1]
        is_active: Whether the source is collected
    """

    __tablename__ = "sources"
    __table_args__ = (
        CheckConstraint(
            "authority_weight > 0 AND authority_weight <= 1", name="authority_weight_range"
        ),
    )

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    base_url: Mapped[str] = mapped_column(String(500), nullable=False)
    search_url_template: Mapped[str | None] = mapped_column(String(1000))
    type: Mapped[SourceType] = mapped_column(Enum(SourceType), nullable=False)

    has_native_score: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_server_side_filtering: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    authority_weight: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    keywords: Mapped[list["Keyword"]] = relationship(
        "Keyword", secondary=keyword_sources, back_populates="sources"
    )
    articles: Mapped[list["Article"]] = relationship("Article", back_populates="source")

    def build_search_url(self, term: str) -> str | None:
        """Fill the search template with a URL-encoded term.

        Args:
            term: Search term

        Returns:
            Search URL, or None when the source has no template
        """
        if not self.search_url_template:
            return None
        return self.search_url_template.replace("{keyword}", quote(term))

    def __repr__(self) -> str:
        return f"<Source(id={self.id}, name={self.name}, type={self.type})>"


__all__ = [
    "Source",
    "SourceType",
    "keyword_sources",
]
