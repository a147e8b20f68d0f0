"""Unit tests for keyword collection tasks."""

import uuid
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from inforanker.config import PipelineConfig
from inforanker.core.exceptions import RecordNotFoundError
from inforanker.models.collection import CollectionPhase, CollectionStatus
from inforanker.services.collection.queue import CollectionQueue, CollectionWorker
from inforanker.workers.collect import (
    CollectionRunSummary,
    _collect_keywords_async,
    collect_active_keywords,
    collect_keyword,
)


def _status(term: str, phase: CollectionPhase, **fields) -> CollectionStatus:
    return CollectionStatus(keyword_id=uuid.uuid4(), keyword_term=term, phase=phase, **fields)


@pytest.fixture
def task_container(db_session):
    """Container stub backed by the test session and a real queue."""
    queue = CollectionQueue()

    async def run_job(job):
        def finish(status):
            status.phase = CollectionPhase.COMPLETED
            status.articles_collected = 4
            status.articles_scored = 2

        queue.store.mutate(job.keyword_id, finish)

    @asynccontextmanager
    async def session_factory():
        yield db_session

    mock_container = MagicMock()
    mock_container.services.pipeline_config.return_value = PipelineConfig()
    mock_container.infrastructure.db_session_factory.return_value = session_factory
    mock_container.collection_queue.return_value = queue
    mock_container.collection_worker.return_value = CollectionWorker(queue, run_job)
    mock_container.infrastructure.http_client.return_value.close = AsyncMock()
    mock_container.infrastructure.redis_async_client.return_value.aclose = AsyncMock()
    mock_container.infrastructure.db_engine.return_value.dispose = AsyncMock()
    return mock_container


class TestCollectionRunSummary:
    """Tests for CollectionRunSummary."""

    def test_add_status(self):
        """Test per-keyword statuses roll up into totals."""
        summary = CollectionRunSummary(started_at=datetime.now(UTC))

        summary.add_status(
            _status("rust", CollectionPhase.COMPLETED, articles_collected=7, articles_scored=5)
        )
        summary.add_status(
            _status(
                "llm",
                CollectionPhase.FAILED,
                articles_collected=2,
                fatal_error_message="Evaluation service unavailable",
            )
        )
        summary.add_status(_status("quantum", CollectionPhase.QUEUED))

        assert (summary.completed, summary.failed) == (1, 1)
        assert summary.articles_collected == 9
        assert summary.articles_scored == 5
        assert summary.errors == {"llm": "Evaluation service unavailable"}


class TestTaskRegistration:
    """Tests for task decoration."""

    def test_collect_active_keywords(self):
        assert collect_active_keywords.name == "inforanker.workers.collect.collect_active_keywords"
        assert collect_active_keywords.max_retries == 3
        assert collect_active_keywords.default_retry_delay == 300

    def test_collect_keyword(self):
        assert collect_keyword.name == "inforanker.workers.collect.collect_keyword"
        assert collect_keyword.max_retries == 3
        assert collect_keyword.default_retry_delay == 60


class TestCollectKeywordsAsync:
    """Tests for _collect_keywords_async()."""

    @pytest.mark.asyncio
    async def test_collects_active_keywords(self, task_container, keyword):
        """Test every active keyword is queued, drained and summarized."""
        with patch("inforanker.workers.collect.create_container", return_value=task_container):
            summary = await _collect_keywords_async(debug_mode=True)

        assert summary.keywords == ["quantum computing"]
        assert summary.completed == 1
        assert summary.articles_collected == 4
        assert summary.articles_scored == 2
        assert summary.completed_at is not None
        task_container.infrastructure.http_client.return_value.close.assert_awaited_once()
        task_container.infrastructure.db_engine.return_value.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_keyword(self, task_container, keyword):
        """Test a missing keyword raises and clients are still closed."""
        with (
            patch("inforanker.workers.collect.create_container", return_value=task_container),
            pytest.raises(RecordNotFoundError),
        ):
            await _collect_keywords_async(keyword_id=uuid.uuid4())

        task_container.infrastructure.redis_async_client.return_value.aclose.assert_awaited_once()


class TestCollectKeywordTask:
    """Tests for the collect_keyword task body."""

    def test_returns_summary(self):
        summary = CollectionRunSummary(
            started_at=datetime.now(UTC), keywords=["rust"], completed=1
        )
        keyword_id = uuid.uuid4()

        with patch(
            "inforanker.workers.collect._collect_keywords_async",
            new=AsyncMock(return_value=summary),
        ) as collect:
            result = collect_keyword.run(str(keyword_id))

        assert result["keywords"] == ["rust"]
        assert result["completed"] == 1
        collect.assert_awaited_once_with(keyword_id=keyword_id, debug_mode=False)

    def test_missing_keyword_is_not_retried(self):
        with patch(
            "inforanker.workers.collect._collect_keywords_async",
            new=AsyncMock(side_effect=RecordNotFoundError("Keyword", "42")),
        ):
            result = collect_keyword.run(str(uuid.uuid4()))

        assert result == {"error": "Keyword with id=42 not found"}
