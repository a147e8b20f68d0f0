"""Reddit source adapter.

Searches posts across Reddit using the public JSON search endpoint.
No authentication required.
"""

from datetime import UTC, datetime
from typing import Any

from inforanker.config.sources import RedditConfig
from inforanker.core.logging import get_logger
from inforanker.models.source import Source
from inforanker.services.collector.base import (
    BaseSourceAdapter,
    CandidateArticle,
    add_query_params,
    source_matches,
)

logger = get_logger(__name__)

REDDIT_BASE = "https://www.reddit.com"
REDDIT_SEARCH_URL = REDDIT_BASE + "/search.json"
SUMMARY_CHARS = 500


class RedditAdapter(BaseSourceAdapter[RedditConfig]):
    """Reddit post search.

    Upvote score is reported as the native score. Self posts and links back
    into Reddit use the post permalink.
    """

    def can_handle(self, source: Source) -> bool:
        return source_matches(source, names=("reddit",), hosts=("reddit.com",))

    async def collect(
        self,
        source: Source,
        term: str,
        since: datetime | None = None,
    ) -> list[CandidateArticle]:
        """Search Reddit posts.

        Args:
            source: Reddit source record
            term: Search term
            since: Only posts created after this time

        Returns:
            Candidate articles
        """
        url = add_query_params(
            REDDIT_SEARCH_URL,
            q=term,
            sort=self._config.sort,
            t="month",
            limit=self._config.limit,
        )

        logger.info("Collecting from Reddit", term=term, url=url)
        data = await self._http_client.get_json(url, timeout=self._config.request_timeout)

        children = (data.get("data") or {}).get("children") or []
        articles: list[CandidateArticle] = []
        for child in children:
            article = self._to_candidate(child.get("data") or {})
            if article and self._is_recent(article.published_at, since):
                articles.append(article)

        logger.info("Reddit collection complete", term=term, collected=len(articles))
        return articles

    def _to_candidate(self, post: dict[str, Any]) -> CandidateArticle | None:
        title = post.get("title")
        if not title:
            return None

        url = post.get("url") or ""
        if not url or "reddit.com" in url:
            permalink = post.get("permalink")
            if not permalink:
                return None
            url = REDDIT_BASE + permalink

        published_at = None
        if post.get("created_utc"):
            published_at = datetime.fromtimestamp(float(post["created_utc"]), tz=UTC)

        selftext = post.get("selftext") or None
        summary = selftext
        if summary and len(summary) > SUMMARY_CHARS:
            summary = summary[:SUMMARY_CHARS] + "..."

        return CandidateArticle(
            title=title,
            url=url,
            summary=summary,
            content=selftext,
            published_at=published_at,
            native_score=post.get("score"),
        )


__all__ = ["RedditAdapter"]
