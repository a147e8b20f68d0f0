"""Article deduplication gate.

Candidates are matched per keyword against every persisted article by
normalized URL, or by normalized title. Survivors are persisted before
they are returned, so replaying the same batch persists nothing.

Known limitation: with title matching enabled, two distinct articles from
different sources that share a title collide and the later one is
dropped. ``DedupConfig.title_matching = off`` disables title matching.
"""

import re
import uuid
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import Enum
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inforanker.config.collection import DedupConfig, TitleMatching
from inforanker.core.logging import get_logger
from inforanker.models.article import Article
from inforanker.models.source import Source
from inforanker.services.collector.base import CandidateArticle

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def normalize_url(url: str, strip_params: Sequence[str] = ()) -> str:
    """Canonical form of a URL for duplicate matching.

    Lowercases scheme and host, drops ``www.``, the fragment, ``utm_*``
    and the given tracking parameters, sorts the remaining query and
    strips a trailing slash.

    Example:
        >>> normalize_url("https://WWW.Example.com/a/?utm_source=x&b=2&a=1#top")
        'https://example.com/a?a=1&b=2'
    """
    parts = urlsplit(url.strip())
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]

    stripped = {p.lower() for p in strip_params}
    query = sorted(
        (k, v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
        if not k.lower().startswith("utm_") and k.lower() not in stripped
    )

    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), host, path, urlencode(query), ""))


def normalize_title(title: str) -> str:
    """Trimmed, whitespace-collapsed, lowercased title."""
    return _WHITESPACE.sub(" ", title.strip()).lower()


class DedupReason(str, Enum):
    """Reason a candidate was dropped."""

    URL = "url"
    TITLE = "title"


class DedupResult(BaseModel):
    """Outcome of one deduplication pass.

    Attributes:
        persisted: Newly persisted articles
        duplicates: Dropped candidates and the key they matched on
    """

    model_config = {"arbitrary_types_allowed": True}

    persisted: list[Article] = Field(default_factory=list)
    duplicates: list[tuple[str, DedupReason]] = Field(default_factory=list)


class ArticleDeduplicator:
    """Drops already-known candidates and persists the rest.

    Attributes:
        session: Async database session (injected)
        config: Deduplication configuration
    """

    def __init__(self, session: AsyncSession, config: DedupConfig | None = None):
        """Initialize deduplicator.

        Args:
            session: Async database session
            config: Deduplication configuration (uses defaults if not provided)
        """
        self.session = session
        self.config = config or DedupConfig()

    async def filter_and_persist(
        self,
        keyword_id: uuid.UUID,
        source: Source,
        candidates: Sequence[CandidateArticle],
    ) -> list[Article]:
        """Persist the candidates not yet known for the keyword.

        Args:
            keyword_id: Owning keyword
            source: Source the candidates were fetched from
            candidates: Freshly fetched candidates

        Returns:
            Newly persisted articles, in candidate order
        """
        result = await self.deduplicate(keyword_id, source, candidates)
        return result.persisted

    async def deduplicate(
        self,
        keyword_id: uuid.UUID,
        source: Source,
        candidates: Sequence[CandidateArticle],
    ) -> DedupResult:
        """Like ``filter_and_persist`` but also reports what was dropped."""
        match_titles = self.config.title_matching != TitleMatching.OFF
        seen_urls, seen_titles = await self._existing_keys(keyword_id)

        result = DedupResult()
        now = datetime.now(UTC)
        for candidate in candidates:
            url_key = normalize_url(candidate.url, self.config.strip_query_params)
            title_key = normalize_title(candidate.title) if match_titles else None

            if url_key in seen_urls:
                result.duplicates.append((candidate.url, DedupReason.URL))
                continue
            if title_key is not None and title_key in seen_titles:
                result.duplicates.append((candidate.url, DedupReason.TITLE))
                continue

            seen_urls.add(url_key)
            if title_key is not None:
                seen_titles.add(title_key)

            article = Article(
                id=uuid.uuid4(),
                keyword_id=keyword_id,
                source_id=source.id,
                source=source,
                title=candidate.title.strip(),
                url=candidate.url,
                normalized_url=url_key,
                normalized_title=title_key,
                summary=candidate.summary,
                content=candidate.content,
                published_at=candidate.published_at,
                collected_at=now,
                native_score=candidate.native_score,
                excluded_from_ranking=False,
            )
            self.session.add(article)
            result.persisted.append(article)

        if result.persisted:
            await self.session.commit()

        logger.info(
            "Deduplication complete",
            source=source.name,
            candidates=len(candidates),
            persisted=len(result.persisted),
            duplicates=len(result.duplicates),
        )
        return result

    async def _existing_keys(self, keyword_id: uuid.UUID) -> tuple[set[str], set[str]]:
        rows = await self.session.execute(
            select(Article.normalized_url, Article.normalized_title).where(
                Article.keyword_id == keyword_id
            )
        )
        urls: set[str] = set()
        titles: set[str] = set()
        for url_key, title_key in rows:
            urls.add(url_key)
            if title_key is not None:
                titles.add(title_key)
        return urls, titles


__all__ = [
    "ArticleDeduplicator",
    "DedupResult",
    "DedupReason",
    "normalize_url",
    "normalize_title",
]
