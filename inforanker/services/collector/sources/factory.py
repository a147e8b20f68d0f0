"""Adapter registry.

Resolves the adapter for a Source record by asking each registered
adapter whether it handles the source, in registration order.
"""

from typing import Any

from inforanker.config.sources import ArxivConfig, HackerNewsConfig, RedditConfig
from inforanker.core.logging import get_logger
from inforanker.infrastructure.http_client import HTTPClient
from inforanker.models.source import Source
from inforanker.services.collector.base import BaseSourceAdapter
from inforanker.services.collector.sources.arxiv import ArxivAdapter
from inforanker.services.collector.sources.hackernews import HackerNewsAdapter
from inforanker.services.collector.sources.reddit import RedditAdapter

logger = get_logger(__name__)


class SourceAdapterRegistry:
    """Ordered collection of source adapters.

    Example:
        >>> registry = SourceAdapterRegistry([HackerNewsAdapter(HackerNewsConfig(), http)])
        >>> registry.resolve(hn_source)
        <HackerNewsAdapter ...>
    """

    def __init__(self, adapters: list[BaseSourceAdapter[Any]] | None = None):
        self._adapters: list[BaseSourceAdapter[Any]] = list(adapters or [])

    def register(self, adapter: BaseSourceAdapter[Any]) -> None:
        self._adapters.append(adapter)

    @property
    def adapters(self) -> list[BaseSourceAdapter[Any]]:
        return list(self._adapters)

    def resolve(self, source: Source) -> BaseSourceAdapter[Any] | None:
        """Return the first adapter that handles the source.

        Args:
            source: Source record

        Returns:
            Adapter, or None if no adapter handles the source
        """
        for adapter in self._adapters:
            if adapter.can_handle(source):
                return adapter
        logger.debug("No adapter for source", source=source.name)
        return None


def create_default_registry(http_client: HTTPClient) -> SourceAdapterRegistry:
    """Build the registry with every built-in adapter.

    Args:
        http_client: Shared HTTP client for connection reuse

    Returns:
        Registry with Hacker News, Reddit and arXiv adapters
    """
    return SourceAdapterRegistry(
        [
            HackerNewsAdapter(HackerNewsConfig(), http_client),
            RedditAdapter(RedditConfig(), http_client),
            ArxivAdapter(ArxivConfig(), http_client),
        ]
    )


__all__ = ["SourceAdapterRegistry", "create_default_registry"]
