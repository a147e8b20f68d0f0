"""Redis client utilities.

All Redis client lifecycle management is handled by the DI container.
The helpers here accept a DI-injected client:
    - FastAPI: Use Depends(get_redis) from inforanker.core.container
    - Services: Accept Redis[Any] in constructor
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from inforanker.core.logging import get_logger

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)


async def subscribe_channel(client: Redis[Any], channel: str) -> AsyncIterator[str]:
    """Yield messages published to a channel until the consumer stops.

    Args:
        client: Async Redis client (from DI)
        channel: Pub/sub channel name

    Yields:
        Message payloads as strings

    Example:
        >>> async for payload in subscribe_channel(redis, "collection:progress:42"):
        ...     event = parse_event(payload)
    """
    pubsub = client.pubsub()
    await pubsub.subscribe(channel)
    logger.debug("Subscribed", channel=channel)
    try:
        async for message in pubsub.listen():
            if message.get("type") != "message":
                continue
            data = message["data"]
            yield data.decode() if isinstance(data, bytes) else str(data)
    finally:
        await pubsub.unsubscribe(channel)
        await pubsub.aclose()
        logger.debug("Unsubscribed", channel=channel)


async def check_redis_connection(client: Redis[Any]) -> bool:
    """Check if Redis connection is healthy.

    Args:
        client: Async Redis client (from DI)

    Returns:
        True if connection is successful, False otherwise

    Example:
        >>> redis = container.redis()
        >>> is_healthy = await check_redis_connection(redis)
    """
    try:
        await client.ping()
        return True
    except Exception as e:
        logger.error("Redis health check failed", error=str(e), exc_info=True)
        return False


__all__ = ["subscribe_channel", "check_redis_connection"]
