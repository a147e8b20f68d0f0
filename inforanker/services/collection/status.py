"""In-process collection status store.

One mutable CollectionStatus per keyword. A status is created when its
job is enqueued, mutated by event projection during the run and kept
after the job finishes until it is explicitly cleared.

Reads return copies so callers always see a consistent snapshot.
"""

import uuid
from collections.abc import Callable

from inforanker.core.logging import get_logger
from inforanker.models.collection import CollectionJob, CollectionPhase, CollectionStatus

logger = get_logger(__name__)


class StatusStore:
    """Keyword-keyed status projection.

    Writes for a keyword come from a single job at a time, so no locking
    is needed beyond the event loop's own serialization.
    """

    def __init__(self) -> None:
        self._statuses: dict[uuid.UUID, CollectionStatus] = {}

    def create(self, job: CollectionJob) -> CollectionStatus:
        """Create (or replace) the queued status of a job."""
        status = CollectionStatus(
            keyword_id=job.keyword_id,
            keyword_term=job.keyword_term,
            phase=CollectionPhase.QUEUED,
            queued_at=job.queued_at,
            message="Queued",
        )
        self._statuses[job.keyword_id] = status
        return status.model_copy(deep=True)

    def get(self, keyword_id: uuid.UUID) -> CollectionStatus | None:
        status = self._statuses.get(keyword_id)
        return status.model_copy(deep=True) if status is not None else None

    def all(self) -> list[CollectionStatus]:
        """Every status, most recently queued first."""
        statuses = sorted(self._statuses.values(), key=lambda s: s.queued_at, reverse=True)
        return [s.model_copy(deep=True) for s in statuses]

    def put(self, status: CollectionStatus) -> None:
        self._statuses[status.keyword_id] = status.model_copy(deep=True)

    def mutate(
        self,
        keyword_id: uuid.UUID,
        change: Callable[[CollectionStatus], None],
    ) -> CollectionStatus | None:
        """Apply a change to the stored status in place.

        Args:
            keyword_id: Keyword ID
            change: Function mutating the status

        Returns:
            Copy of the updated status, or None when no status exists
        """
        status = self._statuses.get(keyword_id)
        if status is None:
            logger.debug("No status to update", keyword_id=str(keyword_id))
            return None
        change(status)
        return status.model_copy(deep=True)

    def clear(self, keyword_id: uuid.UUID) -> bool:
        return self._statuses.pop(keyword_id, None) is not None

    def __len__(self) -> int:
        return len(self._statuses)


__all__ = ["StatusStore"]
