"""Unit tests for Redis helper functions."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from inforanker.core.redis import check_redis_connection, subscribe_channel


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    client = AsyncMock()
    return client


def _pubsub(messages):
    """Pub/sub stub replaying messages from listen()."""
    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()

    async def listen():
        for message in messages:
            yield message

    pubsub.listen = listen
    return pubsub


class TestCheckRedisConnection:
    """Tests for check_redis_connection function."""

    @pytest.mark.asyncio
    async def test_healthy(self, mock_redis):
        mock_redis.ping.return_value = True

        assert await check_redis_connection(mock_redis) is True
        mock_redis.ping.assert_called_once()

    @pytest.mark.asyncio
    async def test_returns_false_on_exception(self, mock_redis):
        mock_redis.ping.side_effect = ConnectionError("Connection refused")

        assert await check_redis_connection(mock_redis) is False


class TestSubscribeChannel:
    """Tests for subscribe_channel function."""

    @pytest.mark.asyncio
    async def test_yields_messages_only(self):
        """Test subscription confirmations are skipped and bytes decoded."""
        pubsub = _pubsub(
            [
                {"type": "subscribe", "data": 1},
                {"type": "message", "data": b'{"type": "job_completed"}'},
                {"type": "message", "data": "plain"},
            ]
        )
        client = MagicMock()
        client.pubsub.return_value = pubsub

        payloads = [p async for p in subscribe_channel(client, "collection:progress:42")]

        assert payloads == ['{"type": "job_completed"}', "plain"]
        pubsub.subscribe.assert_awaited_once_with("collection:progress:42")
        pubsub.unsubscribe.assert_awaited_once_with("collection:progress:42")
        pubsub.aclose.assert_awaited_once()
