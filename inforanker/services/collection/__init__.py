"""Collection jobs: orchestration, queueing and progress reporting."""

from inforanker.services.collection.events import (
    AnyCollectionEvent,
    ArticlesFetchedEvent,
    ArticlesPassedFilterEvent,
    ArticlesQualityScoredEvent,
    CollectionEvent,
    JobCompletedEvent,
    JobErrorEvent,
    PhaseChangedEvent,
    SourceCompletedEvent,
    TokenUsageEvent,
    parse_event,
)
from inforanker.services.collection.orchestrator import (
    CollectionJobRunner,
    CollectionOrchestrator,
    CollectionOutcome,
)
from inforanker.services.collection.progress import (
    ProgressSink,
    RedisProgressPublisher,
    StatusProjector,
    progress_channel,
)
from inforanker.services.collection.queue import CollectionQueue, CollectionWorker
from inforanker.services.collection.status import StatusStore

__all__ = [
    # Events
    "CollectionEvent",
    "AnyCollectionEvent",
    "PhaseChangedEvent",
    "ArticlesFetchedEvent",
    "ArticlesPassedFilterEvent",
    "ArticlesQualityScoredEvent",
    "TokenUsageEvent",
    "SourceCompletedEvent",
    "JobErrorEvent",
    "JobCompletedEvent",
    "parse_event",
    # Orchestration
    "CollectionOrchestrator",
    "CollectionOutcome",
    "CollectionJobRunner",
    # Queue and status
    "CollectionQueue",
    "CollectionWorker",
    "StatusStore",
    "StatusProjector",
    "ProgressSink",
    "RedisProgressPublisher",
    "progress_channel",
]
