"""Data access for keywords, sources and ranked articles."""

import uuid
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from inforanker.core.exceptions import RecordNotFoundError
from inforanker.models.article import Article
from inforanker.models.keyword import Keyword
from inforanker.models.source import Source, keyword_sources


class KeywordRepository:
    """Keyword and source lookups used by collection."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, keyword_id: uuid.UUID) -> Keyword:
        """Load a keyword.

        Raises:
            RecordNotFoundError: If the keyword does not exist
        """
        keyword = await self.session.get(Keyword, keyword_id)
        if keyword is None:
            raise RecordNotFoundError("Keyword", str(keyword_id))
        return keyword

    async def list_active(self) -> Sequence[Keyword]:
        result = await self.session.execute(
            select(Keyword).where(Keyword.is_active.is_(True)).order_by(Keyword.term)
        )
        return result.scalars().all()

    async def sources_for(self, keyword_id: uuid.UUID) -> list[Source]:
        """Active sources to collect for a keyword, ordered by name.

        A keyword with no linked sources is collected from every active
        source.

        Args:
            keyword_id: Keyword ID

        Returns:
            Sources in collection order
        """
        linked = await self.session.execute(
            select(Source)
            .join(keyword_sources, keyword_sources.c.source_id == Source.id)
            .where(keyword_sources.c.keyword_id == keyword_id, Source.is_active.is_(True))
            .order_by(Source.name)
        )
        sources = list(linked.scalars().all())
        if sources:
            return sources

        linked_any = await self.session.execute(
            select(keyword_sources.c.source_id).where(keyword_sources.c.keyword_id == keyword_id)
        )
        if linked_any.first() is not None:
            # Linked sources exist but all are inactive
            return []

        everything = await self.session.execute(
            select(Source).where(Source.is_active.is_(True)).order_by(Source.name)
        )
        return list(everything.scalars().all())


class ArticleRepository:
    """Article queries."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def ranked(self, keyword_id: uuid.UUID, limit: int = 50) -> Sequence[Article]:
        """Ranked articles of a keyword, best first.

        Only relevant, scored articles that passed the relevance cutoff
        are ranked.

        Args:
            keyword_id: Keyword ID
            limit: Maximum articles

        Returns:
            Articles ordered by final score descending
        """
        result = await self.session.execute(
            select(Article)
            .options(selectinload(Article.source))
            .where(
                Article.keyword_id == keyword_id,
                Article.is_relevant.is_(True),
                Article.final_score.is_not(None),
                Article.excluded_from_ranking.is_(False),
            )
            .order_by(Article.final_score.desc())
            .limit(limit)
        )
        return result.scalars().all()

    async def count_for_keyword(self, keyword_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(Article.id).where(Article.keyword_id == keyword_id)
        )
        return len(result.all())


__all__ = ["KeywordRepository", "ArticleRepository"]
