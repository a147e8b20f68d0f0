"""Unit tests for the dependency injection container."""

from unittest.mock import MagicMock

import pytest

from inforanker.config import PipelineConfig
from inforanker.core.container import container, create_container, get_container


@pytest.fixture
def fresh_container():
    """Container with external clients replaced by mocks."""
    new_container = create_container()
    new_container.infrastructure.llm_client.override(MagicMock(name="llm"))
    new_container.infrastructure.http_client.override(MagicMock(name="http"))
    yield new_container
    new_container.infrastructure.llm_client.reset_override()
    new_container.infrastructure.http_client.reset_override()


class TestContainerCreation:
    """Tests for container creation and configuration."""

    def test_has_sub_containers(self) -> None:
        new_container = create_container()

        assert hasattr(new_container, "config")
        assert hasattr(new_container, "infrastructure")
        assert hasattr(new_container, "services")

    def test_config_wired(self) -> None:
        new_container = create_container()

        assert new_container.config().redis_url is not None
        assert new_container.config().database_url is not None

    def test_get_container_returns_global(self) -> None:
        assert get_container() is container


class TestServiceContainer:
    """Tests for ServiceContainer wiring."""

    def test_pipeline_config_is_singleton(self, fresh_container) -> None:
        config = fresh_container.services.pipeline_config()

        assert isinstance(config, PipelineConfig)
        assert fresh_container.services.pipeline_config() is config

    def test_relevance_filter_uses_overridden_client(self, fresh_container) -> None:
        relevance = fresh_container.services.relevance_filter()

        assert relevance.llm_client is fresh_container.infrastructure.llm_client()
        assert relevance.model == fresh_container.config().llm_model_light

    def test_queue_and_projector_share_status_store(self, fresh_container) -> None:
        """Test statuses written by the queue are visible to the projector."""
        queue = fresh_container.services.collection_queue()
        projector = fresh_container.services.status_projector()

        assert queue.store is projector.store
        assert fresh_container.collection_queue() is queue

    def test_override_is_reverted(self, fresh_container) -> None:
        mock_queue = MagicMock()

        with fresh_container.services.collection_queue.override(mock_queue):
            assert fresh_container.services.collection_queue() is mock_queue

        assert fresh_container.services.collection_queue() is not mock_queue
