"""arXiv source adapter.

Searches the arXiv export API, which answers with an Atom feed.
Uses feedparser for parsing.
"""

from datetime import UTC, datetime
from typing import Any

import feedparser

from inforanker.config.sources import ArxivConfig
from inforanker.core.logging import get_logger
from inforanker.models.source import Source
from inforanker.services.collector.base import (
    BaseSourceAdapter,
    CandidateArticle,
    add_query_params,
    source_matches,
)

logger = get_logger(__name__)

ARXIV_API_URL = "https://export.arxiv.org/api/query"
SUMMARY_CHARS = 1000


def build_search_query(term: str) -> str:
    """arXiv treats spaces as OR; multi-word terms are joined with AND.

    Example:
        >>> build_search_query("quantum computing")
        'all:quantum AND all:computing'
    """
    words = term.split()
    return " AND ".join(f"all:{word}" for word in words)


class ArxivAdapter(BaseSourceAdapter[ArxivConfig]):
    """arXiv paper search, newest submissions first. Papers have no native score."""

    def can_handle(self, source: Source) -> bool:
        return source_matches(source, names=("arxiv",), hosts=("arxiv.org",))

    async def collect(
        self,
        source: Source,
        term: str,
        since: datetime | None = None,
    ) -> list[CandidateArticle]:
        """Search arXiv papers.

        Args:
            source: arXiv source record
            term: Search term
            since: Only papers published after this time

        Returns:
            Candidate articles
        """
        url = add_query_params(
            ARXIV_API_URL,
            search_query=build_search_query(term),
            sortBy="submittedDate",
            sortOrder="descending",
            max_results=self._config.limit,
        )

        logger.info("Collecting from arXiv", term=term, url=url)
        response = await self._http_client.get(url, timeout=self._config.request_timeout)
        response.raise_for_status()

        feed = feedparser.parse(response.text)
        if feed.bozo and feed.bozo_exception:
            logger.warning("Feed parsing had issues", url=url, error=str(feed.bozo_exception))

        articles: list[CandidateArticle] = []
        for entry in feed.entries:
            article = self._to_candidate(entry)
            if article and self._is_recent(article.published_at, since):
                articles.append(article)

        logger.info("arXiv collection complete", term=term, collected=len(articles))
        return articles

    def _to_candidate(self, entry: Any) -> CandidateArticle | None:
        title = " ".join((entry.get("title") or "").split())
        link = entry.get("link") or entry.get("id")
        if not title or not link:
            return None

        published_at = None
        parsed = entry.get("published_parsed")
        if parsed:
            published_at = datetime(*parsed[:6], tzinfo=UTC)

        abstract = " ".join((entry.get("summary") or "").split()) or None
        summary = abstract
        if summary and len(summary) > SUMMARY_CHARS:
            summary = summary[:SUMMARY_CHARS] + "..."

        return CandidateArticle(
            title=title,
            url=link,
            summary=summary,
            content=abstract,
            published_at=published_at,
        )


__all__ = ["ArxivAdapter", "build_search_query"]
