"""Source adapters for article collection.

API sources:
- HackerNews: Algolia Hacker News search
- Reddit: Reddit JSON search

Feed sources:
- arXiv: arXiv export API (Atom)
"""

from inforanker.services.collector.sources.arxiv import ArxivAdapter
from inforanker.services.collector.sources.factory import (
    SourceAdapterRegistry,
    create_default_registry,
)
from inforanker.services.collector.sources.hackernews import HackerNewsAdapter
from inforanker.services.collector.sources.reddit import RedditAdapter

__all__ = [
    "HackerNewsAdapter",
    "RedditAdapter",
    "ArxivAdapter",
    "SourceAdapterRegistry",
    "create_default_registry",
]
