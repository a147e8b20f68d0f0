"""Source adapter configuration models.

Defines default settings for each source adapter.
"""

from pydantic import BaseModel, Field


class HackerNewsConfig(BaseModel):
    """Hacker News (Algolia search) configuration.

    Attributes:
        limit: Maximum stories per search
        request_timeout: HTTP request timeout in seconds
    """

    limit: int = Field(default=50, ge=1, le=1000)
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


class RedditConfig(BaseModel):
    """Reddit search configuration.

    Attributes:
        limit: Maximum posts per search
        sort: Sort method
        request_timeout: HTTP request timeout in seconds
    """

    limit: int = Field(default=50, ge=1, le=100)
    sort: str = Field(default="relevance", pattern="^(relevance|hot|top|new|comments)$")
    request_timeout: float = Field(default=10.0, ge=1.0, le=60.0)


class ArxivConfig(BaseModel):
    """arXiv Atom API configuration.

    Attributes:
        limit: Maximum entries per search
        request_timeout: HTTP request timeout in seconds
    """

    limit: int = Field(default=50, ge=1, le=200)
    request_timeout: float = Field(default=20.0, ge=1.0, le=60.0)


__all__ = [
    "HackerNewsConfig",
    "RedditConfig",
    "ArxivConfig",
]
