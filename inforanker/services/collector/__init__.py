"""Article collection services.

This package implements the collection front of the pipeline:
1. Source adapters search external sources for a keyword
2. Deduplicator drops known articles and persists the rest
3. Repositories load keywords, sources and ranked articles
"""

from inforanker.config import DedupConfig, TitleMatching
from inforanker.services.collector.base import BaseSourceAdapter, CandidateArticle
from inforanker.services.collector.deduplicator import (
    ArticleDeduplicator,
    DedupReason,
    DedupResult,
    normalize_title,
    normalize_url,
)
from inforanker.services.collector.repository import ArticleRepository, KeywordRepository

__all__ = [
    # Base DTOs
    "CandidateArticle",
    "BaseSourceAdapter",
    # Deduplicator
    "ArticleDeduplicator",
    "DedupConfig",
    "DedupResult",
    "DedupReason",
    "TitleMatching",
    "normalize_url",
    "normalize_title",
    # Repositories
    "KeywordRepository",
    "ArticleRepository",
]
