"""Keyword ORM model.

A keyword is the topic articles are collected and ranked for.
"""

from collections.abc import Iterator
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inforanker.config.validators import normalize_alias_list
from inforanker.models.base import Base, TimestampMixin, UUIDMixin
from inforanker.models.source import keyword_sources

if TYPE_CHECKING:
    from inforanker.models.article import Article
    from inforanker.models.source import Source


class Keyword(Base, UUIDMixin, TimestampMixin):
    """Collection keyword.

    Attributes:
        term: Main search term (e.g., "quantum computing")
        aliases: Alternative search terms (translations, abbreviations)
        is_active: Whether scheduled collection includes this keyword
        sources: Sources of interest (M:N). Empty means every active source.
        articles: Collected articles (1:N)
    """

    __tablename__ = "keywords"

    term: Mapped[str] = mapped_column(String(200), unique=True, nullable=False, index=True)
    aliases: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    sources: Mapped[list["Source"]] = relationship(
        "Source", secondary=keyword_sources, back_populates="keywords"
    )
    articles: Mapped[list["Article"]] = relationship(
        "Article", back_populates="keyword", cascade="all, delete-orphan"
    )

    def search_terms(self) -> Iterator[str]:
        """Yield the main term followed by every non-empty alias."""
        yield self.term
        for alias in normalize_alias_list(self.aliases):
            if alias != self.term:
                yield alias

    def __repr__(self) -> str:
        return f"<Keyword(id={self.id}, term={self.term})>"


__all__ = ["Keyword"]
