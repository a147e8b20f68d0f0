"""Base interfaces and DTOs for article collection.

This module defines the candidate article DTO produced by source adapters
and the adapter interface every source implementation follows.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, TypeVar
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field

from inforanker.infrastructure.http_client import HTTPClient
from inforanker.models.source import Source


class CandidateArticle(BaseModel):
    """Raw article fetched from a source, before deduplication.

    Attributes:
        title: Title as published
        url: Link to the article
        summary: Short summary or excerpt
        content: Full text, when the source provides it
        published_at: Publication time, if reported
        native_score: Popularity metric (points, upvotes, likes)
    """

    title: str = Field(min_length=1)
    url: str = Field(min_length=1)
    summary: str | None = None
    content: str | None = None
    published_at: datetime | None = None
    native_score: int | None = None


ConfigT = TypeVar("ConfigT", bound=BaseModel)


class BaseSourceAdapter(ABC, Generic[ConfigT]):
    """Abstract base class for all source adapters.

    Each adapter handles one or more Source records (resolved by
    ``can_handle``) and searches them for a term. Duplicates across calls
    are expected; the deduplication gate drops them.

    Attributes:
        config: Typed adapter configuration
    """

    def __init__(self, config: ConfigT, http_client: HTTPClient):
        """Initialize source adapter.

        Args:
            config: Typed configuration object
            http_client: Shared HTTP client for connection reuse
        """
        self._config = config
        self._http_client = http_client

    @property
    def config(self) -> ConfigT:
        return self._config

    @abstractmethod
    def can_handle(self, source: Source) -> bool:
        """Whether this adapter collects the given source.

        Args:
            source: Source record

        Returns:
            True if the adapter handles the source
        """

    @abstractmethod
    async def collect(
        self,
        source: Source,
        term: str,
        since: datetime | None = None,
    ) -> list[CandidateArticle]:
        """Search the source for a term.

        Args:
            source: Source record
            term: Search term
            since: Only articles published after this time

        Returns:
            Candidate articles

        Raises:
            httpx.HTTPError: If the source request fails
        """

    @staticmethod
    def _is_recent(published_at: datetime | None, since: datetime | None) -> bool:
        """Articles without a publication date are kept."""
        if since is None or published_at is None:
            return True
        return published_at >= since


def add_query_params(url: str, **params: Any) -> str:
    """Set query parameters on a URL, replacing existing values."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    query.update({k: str(v) for k, v in params.items() if v is not None})
    return urlunsplit(parts._replace(query=urlencode(query)))


def source_matches(source: Source, names: tuple[str, ...], hosts: tuple[str, ...]) -> bool:
    """Match a source by name fragment or by host in its URLs (case-insensitive)."""
    name = source.name.lower()
    if any(n.lower() in name for n in names):
        return True
    urls = f"{source.base_url} {source.search_url_template or ''}".lower()
    return any(host in urls for host in hosts)


__all__ = [
    "CandidateArticle",
    "BaseSourceAdapter",
    "source_matches",
    "add_query_params",
]
