"""Tests for keyword and article repositories."""

import uuid

import pytest

from inforanker.core.exceptions import RecordNotFoundError
from inforanker.models.keyword import Keyword
from inforanker.models.source import keyword_sources
from inforanker.services.collector.repository import ArticleRepository, KeywordRepository


@pytest.fixture
def sources(source_factory):
    """Three sources, one inactive, deliberately out of name order."""
    return [
        source_factory(name="Reddit", base_url="https://www.reddit.com"),
        source_factory(name="Hacker News"),
        source_factory(name="arXiv", base_url="https://arxiv.org", is_active=False),
    ]


async def _link(db_session, keyword, *linked):
    for source in linked:
        await db_session.execute(
            keyword_sources.insert().values(keyword_id=keyword.id, source_id=source.id)
        )
    await db_session.commit()


class TestKeywordRepository:
    """Tests for KeywordRepository."""

    @pytest.mark.asyncio
    async def test_get_missing_keyword(self, db_session):
        """Test unknown ids raise RecordNotFoundError."""
        with pytest.raises(RecordNotFoundError):
            await KeywordRepository(db_session).get(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_active(self, db_session, keyword):
        """Test inactive keywords are skipped."""
        db_session.add(Keyword(term="paused", aliases=[], is_active=False))
        await db_session.commit()

        active = await KeywordRepository(db_session).list_active()

        assert [k.term for k in active] == ["quantum computing"]

    @pytest.mark.asyncio
    async def test_unlinked_keyword_uses_all_active_sources(self, db_session, keyword, sources):
        """Test fallback to every active source, ordered by name."""
        db_session.add_all(sources)
        await db_session.commit()

        result = await KeywordRepository(db_session).sources_for(keyword.id)

        assert [s.name for s in result] == ["Hacker News", "Reddit"]

    @pytest.mark.asyncio
    async def test_linked_sources_only(self, db_session, keyword, sources):
        """Test linked active sources are used."""
        db_session.add_all(sources)
        await db_session.commit()
        await _link(db_session, keyword, sources[0], sources[2])

        result = await KeywordRepository(db_session).sources_for(keyword.id)

        assert [s.name for s in result] == ["Reddit"]

    @pytest.mark.asyncio
    async def test_all_linked_sources_inactive(self, db_session, keyword, sources):
        """Test no fallback when every linked source is inactive."""
        db_session.add_all(sources)
        await db_session.commit()
        await _link(db_session, keyword, sources[2])

        assert await KeywordRepository(db_session).sources_for(keyword.id) == []


class TestArticleRepository:
    """Tests for ArticleRepository."""

    @pytest.mark.asyncio
    async def test_ranked_filters_and_orders(
        self, db_session, keyword, hn_source, article_factory
    ):
        """Test only relevant, scored, non-excluded articles, best first."""

        def article(title, **fields):
            fields.setdefault("keyword_id", keyword.id)
            return article_factory(title=title, source=hn_source, **fields)

        db_session.add_all(
            [
                article("mid", is_relevant=True, final_score=55.0),
                article("top", is_relevant=True, final_score=81.5),
                article("irrelevant", is_relevant=False, final_score=None),
                article("unscored", is_relevant=True, final_score=None),
                article("excluded", is_relevant=True, final_score=90.0, excluded_from_ranking=True),
                article(
                    "other keyword", keyword_id=uuid.uuid4(), is_relevant=True, final_score=99.0
                ),
            ]
        )
        await db_session.commit()
        repository = ArticleRepository(db_session)

        ranked = await repository.ranked(keyword.id)

        assert [a.title for a in ranked] == ["top", "mid"]
        assert ranked[0].source.name == "Hacker News"
        assert len(await repository.ranked(keyword.id, limit=1)) == 1
        assert await repository.count_for_keyword(keyword.id) == 5
