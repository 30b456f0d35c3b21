"""Background export scheduler.

A bounded in-process pool of asyncio worker tasks that pull job IDs from a
single FIFO queue. Jobs beyond the pool size wait in the queue (and stay
``pending`` in the database) until a worker frees up.
"""

import asyncio
import contextlib
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

JobRunner = Callable[[uuid.UUID], Awaitable[Any]]


class ExportScheduler:
    """FIFO worker pool for export jobs.

    Args:
        run_job: Coroutine function that processes one job by ID.
        max_workers: Number of jobs allowed to run at the same time.
    """

    def __init__(self, run_job: JobRunner, max_workers: int = 3) -> None:
        if max_workers < 1:
            msg = f"max_workers must be at least 1, got {max_workers}"
            raise ValueError(msg)
        self._run_job = run_job
        self._max_workers = max_workers
        self._queue: asyncio.Queue[uuid.UUID | None] = asyncio.Queue()
        self._workers: list[asyncio.Task[None]] = []
        self._queued: set[uuid.UUID] = set()
        self._skipped: set[uuid.UUID] = set()
        self._active: set[uuid.UUID] = set()
        self._cancelled: set[uuid.UUID] = set()

    @property
    def max_workers(self) -> int:
        return self._max_workers

    @property
    def is_running(self) -> bool:
        return any(not task.done() for task in self._workers)

    @property
    def active_jobs(self) -> frozenset[uuid.UUID]:
        """IDs of jobs currently held by a worker."""
        return frozenset(self._active)

    @property
    def queued_count(self) -> int:
        """Number of submitted jobs waiting for a worker."""
        return len(self._queued)

    def start(self) -> None:
        """Spawn the worker tasks. Calling it again while running is a no-op."""
        if self.is_running:
            return
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"export-worker-{index}")
            for index in range(self._max_workers)
        ]
        logger.info(f"Export scheduler started with {self._max_workers} worker(s)")

    def submit(self, job_id: uuid.UUID) -> None:
        """Queue a job for execution in admission order."""
        self._skipped.discard(job_id)
        self._queued.add(job_id)
        self._queue.put_nowait(job_id)
        logger.debug(f"Export job {job_id} queued ({len(self._queued)} waiting)")

    def discard(self, job_id: uuid.UUID) -> None:
        """Drop a deleted job.

        A queued job is skipped when it reaches the head of the queue; a
        running job is flagged so its worker stops at the next checkpoint.
        """
        if job_id in self._active:
            self._cancelled.add(job_id)
            logger.info(f"Export job {job_id} flagged for cancellation")
        elif job_id in self._queued:
            self._skipped.add(job_id)
            logger.info(f"Export job {job_id} will be skipped")

    def is_cancelled(self, job_id: uuid.UUID) -> bool:
        """Return True once a running job has been discarded."""
        return job_id in self._cancelled

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def shutdown(self, *, drain: bool = False) -> None:
        """Stop the worker tasks.

        Args:
            drain: Let the workers finish every queued job first. Otherwise
                running jobs are cancelled and stay ``processing`` until the
                next startup recovery.
        """
        if drain:
            for _ in self._workers:
                self._queue.put_nowait(None)
        else:
            for task in self._workers:
                task.cancel()
        for task in self._workers:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._workers = []
        logger.info("Export scheduler stopped")

    async def _worker(self, index: int) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                if job_id is None:
                    return
                self._queued.discard(job_id)
                if job_id in self._skipped:
                    self._skipped.discard(job_id)
                    logger.info(f"Export job {job_id} was deleted before it started, skipping")
                    continue
                self._active.add(job_id)
                try:
                    await self._run_job(job_id)
                except Exception:
                    logger.exception(f"Export worker {index} crashed while running job {job_id}")
                finally:
                    self._active.discard(job_id)
                    self._cancelled.discard(job_id)
            finally:
                self._queue.task_done()


# Application-wide scheduler instance
_scheduler: ExportScheduler | None = None


def init_scheduler(run_job: JobRunner, max_workers: int) -> ExportScheduler:
    """Create, start and store the application scheduler."""
    global _scheduler  # noqa: PLW0603
    _scheduler = ExportScheduler(run_job, max_workers)
    _scheduler.start()
    return _scheduler


def get_scheduler() -> ExportScheduler:
    """Return the application scheduler.

    Raises:
        RuntimeError: If the scheduler has not been initialized.
    """
    if _scheduler is None:
        msg = "Export scheduler not initialized. Call init_scheduler() first."
        raise RuntimeError(msg)
    return _scheduler


async def shutdown_scheduler() -> None:
    """Stop and forget the application scheduler."""
    global _scheduler  # noqa: PLW0603
    if _scheduler is not None:
        await _scheduler.shutdown()
        _scheduler = None
