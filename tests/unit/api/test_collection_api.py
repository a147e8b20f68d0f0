"""Tests for the collection API endpoints."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from inforanker.api.v1.collection import (
    get_collection_queue,
    get_pipeline_config,
    router,
    stream_progress,
)
from inforanker.config import PipelineConfig
from inforanker.core.container import get_db_session, get_redis
from inforanker.core.exceptions import ErrorSeverity
from inforanker.models.collection import CollectionPhase
from inforanker.services.collection.events import (
    JobCompletedEvent,
    JobErrorEvent,
    PhaseChangedEvent,
)
from inforanker.services.collection.queue import CollectionQueue


@pytest.fixture
def queue():
    return CollectionQueue()


def _pubsub(events):
    """Pub/sub stub replaying events as published messages."""
    pubsub = MagicMock()
    pubsub.subscribe = AsyncMock()
    pubsub.unsubscribe = AsyncMock()
    pubsub.aclose = AsyncMock()

    async def listen():
        yield {"type": "subscribe", "data": 1}
        for event in events:
            yield {"type": "message", "data": event.model_dump_json()}

    pubsub.listen = listen
    return pubsub


@pytest.fixture
def redis():
    return MagicMock()


@pytest_asyncio.fixture
async def client(db_session, queue, redis):
    """HTTP client for an app wired to the test session and a fresh queue.

    Yields:
        Async HTTP client
    """
    app = FastAPI()
    app.include_router(router)

    async def session_override():
        yield db_session

    app.dependency_overrides[get_db_session] = session_override
    app.dependency_overrides[get_collection_queue] = lambda: queue
    app.dependency_overrides[get_pipeline_config] = lambda: PipelineConfig()
    app.dependency_overrides[get_redis] = lambda: redis

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


class TestEnqueue:
    """Tests for POST /keywords/{id}/collect."""

    @pytest.mark.asyncio
    async def test_enqueue(self, client, queue, keyword):
        response = await client.post(f"/api/v1/keywords/{keyword.id}/collect")

        assert response.status_code == 202
        data = response.json()
        assert data["phase"] == "queued"
        assert data["keyword_term"] == "quantum computing"
        job = queue.dequeue_nowait()
        assert job.keyword_id == keyword.id
        assert job.debug_mode is False

    @pytest.mark.asyncio
    async def test_enqueue_debug(self, client, queue, keyword):
        """Test debug jobs carry the configured article cap."""
        await client.post(f"/api/v1/keywords/{keyword.id}/collect", params={"debug": "true"})

        job = queue.dequeue_nowait()
        assert job.debug_mode is True
        assert job.debug_article_limit == 3

    @pytest.mark.asyncio
    async def test_unknown_keyword(self, client, queue):
        response = await client.post(f"/api/v1/keywords/{uuid.uuid4()}/collect")

        assert response.status_code == 404
        assert queue.empty()


class TestStatusEndpoints:
    """Tests for the status endpoints."""

    @pytest.mark.asyncio
    async def test_read_and_clear(self, client, keyword):
        await client.post(f"/api/v1/keywords/{keyword.id}/collect")

        listed = await client.get("/api/v1/collection/status")
        single = await client.get(f"/api/v1/collection/status/{keyword.id}")
        cleared = await client.delete(f"/api/v1/collection/status/{keyword.id}")
        missing = await client.get(f"/api/v1/collection/status/{keyword.id}")

        assert [s["keyword_id"] for s in listed.json()] == [str(keyword.id)]
        assert single.json()["message"] == "Queued"
        assert cleared.status_code == 204
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_clear_unknown(self, client):
        response = await client.delete(f"/api/v1/collection/status/{uuid.uuid4()}")

        assert response.status_code == 404


class TestRankedArticles:
    """Tests for GET /keywords/{id}/articles."""

    @pytest.mark.asyncio
    async def test_ranked(self, client, db_session, keyword, hn_source, article_factory):
        """Test only ranked articles are returned, best first."""
        db_session.add_all(
            [
                article_factory(
                    title=title,
                    source=hn_source,
                    keyword_id=keyword.id,
                    is_relevant=relevant,
                    llm_score=70,
                    final_score=score,
                )
                for title, relevant, score in [
                    ("Mid", True, 55.0),
                    ("Top", True, 81.5),
                    ("Filtered", False, None),
                ]
            ]
        )
        await db_session.commit()

        response = await client.get(f"/api/v1/keywords/{keyword.id}/articles")

        assert response.status_code == 200
        data = response.json()
        assert [a["title"] for a in data] == ["Top", "Mid"]
        assert data[0]["source_name"] == "Hacker News"
        assert data[0]["final_score"] == 81.5

    @pytest.mark.asyncio
    async def test_limit_validation(self, client, keyword):
        response = await client.get(f"/api/v1/keywords/{keyword.id}/articles", params={"limit": 0})

        assert response.status_code == 422


class TestProgressEvents:
    """Tests for GET /collection/status/{id}/events."""

    @pytest.mark.asyncio
    async def test_streams_until_completion(self, client, redis):
        keyword_id = uuid.uuid4()
        pubsub = _pubsub(
            [
                PhaseChangedEvent(keyword_id=keyword_id, phase=CollectionPhase.COLLECTING_SOURCE),
                JobCompletedEvent(keyword_id=keyword_id, total_collected=7, total_scored=5),
                PhaseChangedEvent(keyword_id=keyword_id, phase=CollectionPhase.QUEUED),
            ]
        )
        redis.pubsub.return_value = pubsub

        response = await client.get(f"/api/v1/collection/status/{keyword_id}/events")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        frames = [f for f in response.text.split("\n\n") if f]
        assert len(frames) == 2
        assert '"job_completed"' in frames[1]
        pubsub.subscribe.assert_awaited_once_with(f"collection:progress:{keyword_id}")
        pubsub.unsubscribe.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fatal_error_ends_stream(self):
        """Test warnings pass through and a fatal error closes the stream."""
        keyword_id = uuid.uuid4()
        redis = MagicMock()
        pubsub = _pubsub(
            [
                JobErrorEvent(
                    keyword_id=keyword_id, severity=ErrorSeverity.WARNING, message="skipped"
                ),
                JobErrorEvent(
                    keyword_id=keyword_id,
                    severity=ErrorSeverity.CRITICAL,
                    message="Evaluation service unavailable",
                    is_fatal=True,
                ),
                JobCompletedEvent(keyword_id=keyword_id),
            ]
        )
        redis.pubsub.return_value = pubsub

        frames = [frame async for frame in stream_progress(redis, keyword_id)]

        assert len(frames) == 2
        assert all(frame.startswith("data: ") for frame in frames)
        assert "Evaluation service unavailable" in frames[1]
        pubsub.aclose.assert_awaited_once()
