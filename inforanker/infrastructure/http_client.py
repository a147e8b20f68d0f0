"""HTTP Client for shared connection management.

This module provides a managed httpx.AsyncClient shared by the source
adapters.
"""

from typing import Any

import httpx

from inforanker.core.logging import get_logger

logger = get_logger(__name__)


class HTTPClient:
    """Managed HTTP client with connection reuse.

    Create once at application startup, inject into source adapters,
    close at shutdown.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        max_connections: int = 20,
        max_keepalive_connections: int = 10,
        user_agent: str = "InfoRanker/1.0",
    ) -> None:
        """Initialize HTTP client.

        Args:
            timeout: Default request timeout in seconds
            max_connections: Maximum number of connections
            max_keepalive_connections: Maximum keepalive connections
            user_agent: User-Agent header sent with every request
        """
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_keepalive_connections,
            ),
            headers={"User-Agent": user_agent},
            follow_redirects=True,
        )
        logger.info(
            "HTTP client initialized",
            timeout=timeout,
            max_connections=max_connections,
        )

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Send GET request."""
        return await self._client.get(url, **kwargs)

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """Send GET request and decode the JSON body.

        Raises:
            httpx.HTTPStatusError: On a non-2xx response
        """
        response = await self._client.get(url, **kwargs)
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._client.aclose()
        logger.info("HTTP client closed")


__all__ = ["HTTPClient"]
