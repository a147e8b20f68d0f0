"""Tests for the source adapter registry."""

from unittest.mock import MagicMock

from inforanker.services.collector.sources import (
    ArxivAdapter,
    HackerNewsAdapter,
    RedditAdapter,
    SourceAdapterRegistry,
    create_default_registry,
)


class TestSourceAdapterRegistry:
    """Tests for adapter resolution."""

    def test_default_registry_resolves_builtin_sources(self, mock_http_client, source_factory):
        """Test each built-in source maps to its adapter."""
        registry = create_default_registry(mock_http_client)

        assert isinstance(registry.resolve(source_factory()), HackerNewsAdapter)
        assert isinstance(
            registry.resolve(source_factory(name="Reddit", base_url="https://www.reddit.com")),
            RedditAdapter,
        )
        assert isinstance(
            registry.resolve(source_factory(name="arXiv", base_url="https://arxiv.org")),
            ArxivAdapter,
        )

    def test_unknown_source(self, mock_http_client, source_factory):
        """Test None when no adapter handles the source."""
        registry = create_default_registry(mock_http_client)

        assert registry.resolve(source_factory(name="Qiita", base_url="https://qiita.com")) is None

    def test_first_match_wins(self, source_factory):
        """Test registration order decides between overlapping adapters."""
        first, second = MagicMock(), MagicMock()
        first.can_handle.return_value = True
        second.can_handle.return_value = True
        registry = SourceAdapterRegistry([first])
        registry.register(second)

        assert registry.resolve(source_factory()) is first
        assert registry.adapters == [first, second]
