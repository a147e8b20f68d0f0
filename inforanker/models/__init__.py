"""SQLAlchemy ORM models and in-memory collection models."""

from inforanker.models.article import Article
from inforanker.models.base import Base, TimestampMixin, UUIDMixin
from inforanker.models.collection import (
    ArticlePreview,
    CollectionErrorRecord,
    CollectionJob,
    CollectionPhase,
    CollectionStatus,
    SourceCollectionResult,
)
from inforanker.models.keyword import Keyword
from inforanker.models.source import Source, SourceType, keyword_sources

__all__ = [
    "Base",
    "UUIDMixin",
    "TimestampMixin",
    # Persisted
    "Keyword",
    "Source",
    "SourceType",
    "keyword_sources",
    "Article",
    # In-memory
    "CollectionPhase",
    "CollectionJob",
    "SourceCollectionResult",
    "CollectionErrorRecord",
    "ArticlePreview",
    "CollectionStatus",
]
