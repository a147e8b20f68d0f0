"""Unit tests for Source and Keyword models.

Tests cover:
- Search URL templating
- Keyword search terms
- M:N relationship between keywords and sources
- Authority weight constraint
"""

import uuid

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inforanker.models.keyword import Keyword
from inforanker.models.source import Source, SourceType


class TestSource:
    """Test Source model."""

    def test_build_search_url_encodes_term(self, source_factory) -> None:
        """Test the keyword placeholder is URL-encoded."""
        source = source_factory(
            search_url_template="https://hn.algolia.com/api/v1/search?query={keyword}"
        )
        assert (
            source.build_search_url("quantum computing")
            == "https://hn.algolia.com/api/v1/search?query=quantum%20computing"
        )

    def test_build_search_url_without_template(self, source_factory) -> None:
        """Test sources without a template return None."""
        assert source_factory().build_search_url("rust") is None

    @pytest.mark.asyncio
    async def test_create_source(self, db_session: AsyncSession) -> None:
        """Test creating a basic source."""
        source = Source(
            name="arXiv",
            base_url="https://arxiv.org",
            type=SourceType.RSS,
            authority_weight=1.0,
        )
        db_session.add(source)
        await db_session.commit()
        await db_session.refresh(source)

        assert isinstance(source.id, uuid.UUID)
        assert source.type == SourceType.RSS
        assert source.is_active is True
        assert source.has_native_score is False

    @pytest.mark.asyncio
    async def test_authority_weight_must_be_positive(
        self, db_session: AsyncSession, source_factory
    ) -> None:
        """Test the authority weight check constraint."""
        db_session.add(source_factory(authority_weight=0.0))
        with pytest.raises(IntegrityError):
            await db_session.commit()
        await db_session.rollback()


class TestKeyword:
    """Test Keyword model."""

    def test_search_terms_include_aliases(self) -> None:
        """Test main term first, then distinct non-empty aliases."""
        keyword = Keyword(
            term="quantum computing",
            aliases=["量子コンピュータ", " ", "quantum computing", "qc"],
        )
        assert list(keyword.search_terms()) == ["quantum computing", "量子コンピュータ", "qc"]

    @pytest.mark.asyncio
    async def test_keyword_sources_relationship(
        self, db_session: AsyncSession, source_factory
    ) -> None:
        """Test the keyword_sources association."""
        hn = source_factory()
        keyword = Keyword(term="rust", aliases=[], sources=[hn])
        db_session.add(keyword)
        await db_session.commit()

        result = await db_session.execute(
            select(Keyword).where(Keyword.term == "rust").options(selectinload(Keyword.sources))
        )
        loaded = result.scalar_one()
        assert [s.name for s in loaded.sources] == ["Hacker News"]
