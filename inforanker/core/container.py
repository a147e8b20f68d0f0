"""Dependency Injection Container.

This module provides a centralized DI container using dependency-injector.
Lifecycles:
- Singleton: One instance for the entire process (clients, evaluators,
  the queue and its worker)
- Factory: New instance every time (database sessions)

Usage:
    # In FastAPI
    from inforanker.core.container import get_db_session

    @router.get("/")
    async def endpoint(session: AsyncSession = Depends(get_db_session)):
        ...

    # In Celery
    from inforanker.core.container import container

    worker = container.collection_worker()
    await worker.drain()

    # In tests
    with container.infrastructure.llm_client.override(mock_llm):
        ...
"""

from collections.abc import AsyncGenerator

from dependency_injector import containers, providers
from redis.asyncio import Redis as AsyncRedis
from sqlalchemy.ext.asyncio import AsyncSession

from inforanker.core.config import Config, get_config
from inforanker.core.config_loader import build_pipeline_config


class InfrastructureContainer(containers.DeclarativeContainer):
    """Infrastructure layer dependencies (database, cache, external clients)."""

    global_config = providers.Dependency(instance_of=Config)

    # ============================================
    # Redis
    # ============================================

    redis_async_client = providers.Singleton(
        AsyncRedis.from_url,
        url=global_config.provided.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_keepalive=True,
    )

    # ============================================
    # Database
    # ============================================

    db_engine = providers.Singleton(
        "inforanker.core.database.create_engine_from_url",
        url=global_config.provided.database_url,
        echo=global_config.provided.database_echo,
    )

    db_session_factory = providers.Singleton(
        "inforanker.core.database.create_session_maker",
        engine=db_engine,
    )

    # New session per request/task
    db_session = providers.Factory(
        lambda factory: factory(),
        factory=db_session_factory,
    )

    # ============================================
    # LLM and HTTP Clients
    # ============================================

    # LiteLLM-based, provider-agnostic
    llm_client = providers.Singleton(
        "inforanker.infrastructure.llm.LLMClient",
    )

    http_client = providers.Singleton(
        "inforanker.infrastructure.http_client.HTTPClient",
        user_agent=global_config.provided.source_user_agent,
    )


class ServiceContainer(containers.DeclarativeContainer):
    """Service layer dependencies.

    Evaluators and the queue are process-wide Singletons; the job runner
    opens a fresh database session for every job.
    """

    global_config = providers.Dependency(instance_of=Config)
    infrastructure = providers.DependenciesContainer()

    pipeline_config = providers.Singleton(
        build_pipeline_config,
        config=global_config,
    )

    prompt_manager = providers.Singleton(
        "inforanker.prompts.manager.PromptManager",
    )

    # ============================================
    # Sources
    # ============================================

    source_registry = providers.Singleton(
        "inforanker.services.collector.sources.factory.create_default_registry",
        http_client=infrastructure.http_client,
    )

    # ============================================
    # Evaluation
    # ============================================

    relevance_filter = providers.Singleton(
        "inforanker.services.scoring.relevance.RelevanceFilter",
        llm_client=infrastructure.llm_client,
        prompt_manager=prompt_manager,
        model=global_config.provided.llm_model_light,
        config=pipeline_config.provided.relevance,
        timeout=global_config.provided.llm_timeout,
    )

    quality_evaluator = providers.Singleton(
        "inforanker.services.scoring.evaluator.QualityEvaluator",
        llm_client=infrastructure.llm_client,
        prompt_manager=prompt_manager,
        model=global_config.provided.llm_model_heavy,
        config=pipeline_config.provided.quality,
        ensemble_config=pipeline_config.provided.ensemble,
        timeout=global_config.provided.llm_timeout,
    )

    score_calculator = providers.Singleton(
        "inforanker.services.scoring.calculator.ScoreCalculator",
        config=pipeline_config.provided.scoring,
    )

    # ============================================
    # Collection Jobs
    # ============================================

    status_store = providers.Singleton(
        "inforanker.services.collection.status.StatusStore",
    )

    collection_queue = providers.Singleton(
        "inforanker.services.collection.queue.CollectionQueue",
        store=status_store,
    )

    status_projector = providers.Singleton(
        "inforanker.services.collection.progress.StatusProjector",
        store=status_store,
    )

    redis_publisher = providers.Singleton(
        "inforanker.services.collection.progress.RedisProgressPublisher",
        redis=infrastructure.redis_async_client,
    )

    progress_sink = providers.Singleton(
        "inforanker.services.collection.progress.ProgressSink",
        projector=status_projector,
        publishers=providers.List(redis_publisher),
    )

    job_runner = providers.Singleton(
        "inforanker.services.collection.orchestrator.CollectionJobRunner",
        session_factory=infrastructure.db_session_factory,
        registry=source_registry,
        relevance_filter=relevance_filter,
        quality_evaluator=quality_evaluator,
        calculator=score_calculator,
        sink=progress_sink,
        llm_client=infrastructure.llm_client,
        config=pipeline_config,
        health_check_model=global_config.provided.llm_model_light,
        input_cost_per_million=global_config.provided.llm_input_cost_per_million,
        output_cost_per_million=global_config.provided.llm_output_cost_per_million,
    )

    collection_worker = providers.Singleton(
        "inforanker.services.collection.queue.CollectionWorker",
        queue=collection_queue,
        run_job=job_runner,
        sink=progress_sink,
    )


class ApplicationContainer(containers.DeclarativeContainer):
    """Root application container.

    Composes the sub-containers and exposes shortcuts.
    """

    # Uses get_config() to ensure same instance across the app
    config = providers.Singleton(get_config)

    infrastructure = providers.Container(
        InfrastructureContainer,
        global_config=config,
    )

    services = providers.Container(
        ServiceContainer,
        global_config=config,
        infrastructure=infrastructure,
    )

    # ============================================
    # Convenience accessors (shortcuts)
    # ============================================

    redis = providers.Singleton(
        lambda client: client,
        client=infrastructure.redis_async_client,
    )

    http_client = providers.Singleton(
        lambda client: client,
        client=infrastructure.http_client,
    )

    db_session = providers.Factory(
        lambda session: session,
        session=infrastructure.db_session,
    )

    collection_queue = providers.Singleton(
        lambda svc: svc,
        svc=services.collection_queue,
    )

    collection_worker = providers.Singleton(
        lambda svc: svc,
        svc=services.collection_worker,
    )


def create_container() -> ApplicationContainer:
    """Create and configure the application container.

    Returns:
        Configured ApplicationContainer instance
    """
    return ApplicationContainer()


# Global container instance
container = create_container()


# ============================================
# FastAPI Integration
# ============================================


def get_container() -> ApplicationContainer:
    """Get the global container (for FastAPI Depends)."""
    return container


async def get_redis() -> AsyncRedis:
    """FastAPI dependency for async Redis client."""
    return container.redis()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database session.

    Yields a session and ensures cleanup.
    """
    session = container.db_session()
    try:
        yield session
    finally:
        await session.close()


__all__ = [
    "ApplicationContainer",
    "InfrastructureContainer",
    "ServiceContainer",
    "container",
    "create_container",
    "get_config",
    "get_container",
    "get_db_session",
    "get_redis",
]
