"""Collection job queue and its single consumer.

Jobs are processed one at a time in FIFO order. Enqueueing creates the
job's queued status; the worker's progress events keep it current.
"""

import asyncio
import contextlib
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from inforanker.core.exceptions import ErrorSeverity
from inforanker.core.logging import get_logger
from inforanker.models.collection import CollectionJob, CollectionStatus
from inforanker.services.collection.events import JobErrorEvent
from inforanker.services.collection.progress import ProgressSink, StatusProjector
from inforanker.services.collection.status import StatusStore

logger = get_logger(__name__)

JobRunner = Callable[[CollectionJob], Awaitable[Any]]


class CollectionQueue:
    """FIFO of collection jobs plus the status store they report to.

    Example:
        >>> queue = CollectionQueue()
        >>> status = await queue.enqueue(CollectionJob(keyword_id=kid, keyword_term="rust"))
        >>> status.phase
        <CollectionPhase.QUEUED: 'queued'>
    """

    def __init__(self, store: StatusStore | None = None):
        self.store = store if store is not None else StatusStore()
        self._jobs: asyncio.Queue[CollectionJob] = asyncio.Queue()

    async def enqueue(self, job: CollectionJob) -> CollectionStatus:
        """Add a job and create its queued status.

        A status left over from an earlier run of the same keyword is
        replaced.

        Args:
            job: Collection job

        Returns:
            The queued status
        """
        status = self.store.create(job)
        await self._jobs.put(job)
        logger.info(
            "Collection job queued",
            keyword_id=str(job.keyword_id),
            keyword=job.keyword_term,
            debug_mode=job.debug_mode,
            queue_size=self._jobs.qsize(),
        )
        return status

    async def dequeue(self) -> CollectionJob:
        """Wait for the next job."""
        return await self._jobs.get()

    def dequeue_nowait(self) -> CollectionJob | None:
        try:
            return self._jobs.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def task_done(self) -> None:
        self._jobs.task_done()

    def get_status(self, keyword_id: uuid.UUID) -> CollectionStatus | None:
        return self.store.get(keyword_id)

    def get_all_statuses(self) -> list[CollectionStatus]:
        """Every known status, most recently queued first."""
        return self.store.all()

    def update_status(self, status: CollectionStatus) -> None:
        self.store.put(status)

    def clear_status(self, keyword_id: uuid.UUID) -> bool:
        """Forget a keyword's status.

        Returns:
            True if a status was removed
        """
        return self.store.clear(keyword_id)

    def qsize(self) -> int:
        return self._jobs.qsize()

    def empty(self) -> bool:
        return self._jobs.empty()


class CollectionWorker:
    """Single consumer of the collection queue.

    One job's failure never stops the loop: unexpected exceptions become a
    fatal error on that job's status. Cancellation stops the worker.
    """

    def __init__(
        self,
        queue: CollectionQueue,
        run_job: JobRunner,
        sink: ProgressSink | None = None,
    ):
        """Initialize worker.

        Args:
            queue: Job queue
            run_job: Coroutine function running one job
            sink: Sink for failures the job itself could not report
        """
        self.queue = queue
        self.run_job = run_job
        self.sink = sink or ProgressSink(StatusProjector(queue.store))
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self) -> None:
        """Consume jobs until cancelled."""
        logger.info("Collection worker started")
        try:
            while True:
                job = await self.queue.dequeue()
                try:
                    await self.process_job(job)
                finally:
                    self.queue.task_done()
        finally:
            logger.info("Collection worker stopped")

    async def drain(self) -> int:
        """Process every queued job, then return.

        Returns:
            Number of jobs processed
        """
        processed = 0
        while (job := self.queue.dequeue_nowait()) is not None:
            try:
                await self.process_job(job)
            finally:
                self.queue.task_done()
            processed += 1
        return processed

    async def process_job(self, job: CollectionJob) -> None:
        """Run one job, absorbing everything but cancellation."""
        logger.info("Processing collection job", keyword_id=str(job.keyword_id))
        try:
            await self.run_job(job)
        except asyncio.CancelledError:
            logger.warning("Collection job cancelled", keyword_id=str(job.keyword_id))
            raise
        except Exception as e:
            logger.error(
                "Collection job crashed",
                keyword_id=str(job.keyword_id),
                error=str(e),
                exc_info=True,
            )
            await self.sink.emit(
                JobErrorEvent(
                    keyword_id=job.keyword_id,
                    severity=ErrorSeverity.CRITICAL,
                    message=f"Unexpected error: {e}",
                    is_fatal=True,
                )
            )

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self.run(), name="collection-worker")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None


__all__ = ["JobRunner", "CollectionQueue", "CollectionWorker"]
