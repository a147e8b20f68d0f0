"""Pytest configuration and fixtures.

This module provides common fixtures used across all tests.
"""

import uuid
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

import inforanker.models  # noqa: F401  (register mappers)
from inforanker.core.database import Base, create_session_maker
from inforanker.core.logging import setup_logging
from inforanker.infrastructure.llm import LLMJSONResponse, LLMResponse
from inforanker.models.article import Article
from inforanker.models.keyword import Keyword
from inforanker.models.source import Source, SourceType

# Setup logging for tests
setup_logging()


# ============================================
# Database
# ============================================


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the full schema.

    Yields:
        Async engine shared by every session of the test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session.

    Yields:
        Test database session
    """
    async with create_session_maker(db_engine)() as session:
        yield session


@pytest_asyncio.fixture
async def keyword(db_session: AsyncSession) -> Keyword:
    """Persisted keyword without aliases."""
    record = Keyword(id=uuid.uuid4(), term="quantum computing", aliases=[], is_active=True)
    db_session.add(record)
    await db_session.commit()
    return record


@pytest_asyncio.fixture
async def hn_source(db_session: AsyncSession) -> Source:
    """Persisted Hacker News source."""
    record = _build_source()
    db_session.add(record)
    await db_session.commit()
    return record


# ============================================
# Builders
# ============================================


def _build_source(
    name: str = "Hacker News",
    base_url: str = "https://news.ycombinator.com",
    **overrides: Any,
) -> Source:
    """Build a transient Source with sensible defaults."""
    fields: dict[str, Any] = {
        "id": uuid.uuid4(),
        "name": name,
        "base_url": base_url,
        "search_url_template": None,
        "type": SourceType.API,
        "has_native_score": True,
        "has_server_side_filtering": False,
        "authority_weight": 0.8,
        "is_active": True,
    }
    fields.update(overrides)
    return Source(**fields)


def _build_article(
    title: str = "Quantum error correction milestone",
    source: Source | None = None,
    **overrides: Any,
) -> Article:
    """Build a transient Article attached to a source."""
    source = source or _build_source()
    url = overrides.pop("url", f"https://example.com/{uuid.uuid4().hex[:8]}")
    fields: dict[str, Any] = {
        "id": uuid.uuid4(),
        "keyword_id": uuid.uuid4(),
        "source_id": source.id,
        "title": title,
        "url": url,
        "normalized_url": url,
        "summary": "A summary",
        "content": None,
        "native_score": 120,
        "excluded_from_ranking": False,
    }
    fields.update(overrides)
    article = Article(**fields)
    article.source = source
    return article


def _json_response(
    data: dict[str, Any],
    input_tokens: int = 100,
    output_tokens: int = 50,
    model: str = "test/model",
) -> LLMJSONResponse:
    """Wrap a parsed payload the way LLMClient.complete_json returns it."""
    return LLMJSONResponse(
        data=data,
        response=LLMResponse(
            content="",
            model=model,
            usage={
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            },
        ),
    )


def _axis_scores(
    relevance: float = 15,
    technical: float = 14,
    novelty: float = 12,
    impact: float = 13,
    quality: float = 16,
) -> dict[str, float]:
    """Quality axis payload as a model returns it."""
    return {
        "relevance": relevance,
        "technical": technical,
        "novelty": novelty,
        "impact": impact,
        "quality": quality,
    }


@pytest.fixture
def prompt_manager():
    """Prompt manager stub rendering the prompt type and its variables."""
    manager = MagicMock()
    manager.get_llm_settings.return_value = MagicMock(model=None, temperature=0.0)
    manager.render_messages.side_effect = lambda prompt_type, **variables: [
        {"role": "system", "content": prompt_type.value},
        {"role": "user", "content": variables.get("articles_json", "")},
    ]
    return manager


@pytest.fixture
def source_factory():
    """Factory for transient sources."""
    return _build_source


@pytest.fixture
def article_factory():
    """Factory for transient articles attached to a source."""
    return _build_article


@pytest.fixture
def llm_json():
    """Factory for LLMClient.complete_json results."""
    return _json_response


@pytest.fixture
def axis_scores():
    """Factory for quality axis payloads."""
    return _axis_scores
