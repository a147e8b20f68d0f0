"""Shared fixtures for source adapter tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from inforanker.infrastructure.http_client import HTTPClient


@pytest.fixture
def mock_http_client() -> HTTPClient:
    """Create a mock HTTP client."""
    client = MagicMock(spec=HTTPClient)
    client.get = AsyncMock()
    client.get_json = AsyncMock()
    return client
