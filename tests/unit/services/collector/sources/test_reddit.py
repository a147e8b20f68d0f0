"""Tests for the Reddit adapter."""

from urllib.parse import parse_qs, urlsplit

import pytest

from inforanker.config.sources import RedditConfig
from inforanker.services.collector.sources.reddit import RedditAdapter


def _listing(*posts):
    return {"data": {"children": [{"kind": "t3", "data": post} for post in posts]}}


class TestRedditAdapter:
    """Tests for RedditAdapter."""

    @pytest.fixture
    def adapter(self, mock_http_client):
        return RedditAdapter(RedditConfig(limit=25, sort="top"), mock_http_client)

    @pytest.fixture
    def reddit_source(self, source_factory):
        return source_factory(name="Reddit", base_url="https://www.reddit.com")

    def test_can_handle(self, adapter, reddit_source, source_factory):
        """Test resolution by name."""
        assert adapter.can_handle(reddit_source)
        assert not adapter.can_handle(source_factory())

    @pytest.mark.asyncio
    async def test_collect_maps_posts(self, adapter, mock_http_client, reddit_source):
        """Test link posts keep their URL and self posts use the permalink."""
        mock_http_client.get_json.return_value = _listing(
            {
                "title": "IBM unveils new quantum processor",
                "url": "https://example.com/ibm",
                "permalink": "/r/QuantumComputing/comments/abc/ibm/",
                "created_utc": 1_760_000_000.0,
                "score": 1520,
            },
            {
                "title": "Where to start with qubits?",
                "url": "https://www.reddit.com/r/QuantumComputing/comments/def/start/",
                "permalink": "/r/QuantumComputing/comments/def/start/",
                "selftext": "Any book recommendations?",
                "score": 8,
            },
            {"title": "", "url": "https://example.com/empty"},
        )

        articles = await adapter.collect(reddit_source, "quantum computing")

        assert [a.native_score for a in articles] == [1520, 8]
        assert articles[0].url == "https://example.com/ibm"
        assert articles[1].url == "https://www.reddit.com/r/QuantumComputing/comments/def/start/"
        assert articles[1].summary == "Any book recommendations?"
        assert articles[1].published_at is None

    @pytest.mark.asyncio
    async def test_collect_builds_query(self, adapter, mock_http_client, reddit_source):
        """Test term, sort and limit in the request URL."""
        mock_http_client.get_json.return_value = _listing()

        await adapter.collect(reddit_source, "quantum computing")

        query = parse_qs(urlsplit(mock_http_client.get_json.call_args[0][0]).query)
        assert query["q"] == ["quantum computing"]
        assert query["sort"] == ["top"]
        assert query["limit"] == ["25"]

    @pytest.mark.asyncio
    async def test_collect_empty_payload(self, adapter, mock_http_client, reddit_source):
        """Test a payload without data yields nothing."""
        mock_http_client.get_json.return_value = {}

        assert await adapter.collect(reddit_source, "quantum") == []
