"""Hacker News source adapter.

Searches stories through the Algolia Hacker News search API.
https://hn.algolia.com/api
"""

from datetime import UTC, datetime
from typing import Any

from inforanker.config.sources import HackerNewsConfig
from inforanker.core.logging import get_logger
from inforanker.models.source import Source
from inforanker.services.collector.base import (
    BaseSourceAdapter,
    CandidateArticle,
    add_query_params,
    source_matches,
)

logger = get_logger(__name__)

HN_SEARCH_URL = "https://hn.algolia.com/api/v1/search?query={keyword}&tags=story"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
SUMMARY_CHARS = 500


class HackerNewsAdapter(BaseSourceAdapter[HackerNewsConfig]):
    """Hacker News story search.

    Points are reported as the native score. Text posts without a link use
    the discussion URL.
    """

    def can_handle(self, source: Source) -> bool:
        return source_matches(
            source,
            names=("hacker news",),
            hosts=("news.ycombinator.com", "hn.algolia.com"),
        )

    async def collect(
        self,
        source: Source,
        term: str,
        since: datetime | None = None,
    ) -> list[CandidateArticle]:
        """Search Hacker News stories.

        Args:
            source: Hacker News source record
            term: Search term
            since: Only stories created after this time

        Returns:
            Candidate articles
        """
        url = source.build_search_url(term)
        if url is None or "hn.algolia.com" not in url:
            url = HN_SEARCH_URL.replace("{keyword}", term)
        url = add_query_params(
            url,
            hitsPerPage=self._config.limit,
            numericFilters=f"created_at_i>{int(since.timestamp())}" if since else None,
        )

        logger.info("Collecting from Hacker News", term=term, url=url)
        data = await self._http_client.get_json(url, timeout=self._config.request_timeout)

        articles: list[CandidateArticle] = []
        for hit in data.get("hits") or []:
            article = self._to_candidate(hit)
            if article and self._is_recent(article.published_at, since):
                articles.append(article)

        logger.info("Hacker News collection complete", term=term, collected=len(articles))
        return articles

    def _to_candidate(self, hit: dict[str, Any]) -> CandidateArticle | None:
        title = hit.get("title")
        if not title:
            return None

        url = hit.get("url")
        if not url:
            object_id = hit.get("objectID")
            if not object_id:
                return None
            url = HN_ITEM_URL.format(id=object_id)

        published_at = None
        if hit.get("created_at_i"):
            published_at = datetime.fromtimestamp(hit["created_at_i"], tz=UTC)

        story_text = hit.get("story_text") or None
        summary = story_text
        if summary and len(summary) > SUMMARY_CHARS:
            summary = summary[:SUMMARY_CHARS] + "..."

        return CandidateArticle(
            title=title,
            url=url,
            summary=summary,
            content=story_text,
            published_at=published_at,
            native_score=hit.get("points"),
        )


__all__ = ["HackerNewsAdapter"]
