"""
Worker pools that execute fired jobs.

Each pool owns a FIFO queue and a fixed number of worker coroutines (the
pool's concurrency cap). A job key that is already queued or running is not
queued again, so one entity never has two runs of the same job class at once.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List

import structlog

from .payloads import JobPayload

logger = structlog.get_logger(__name__)

Dispatch = Callable[[JobPayload], Awaitable[Any]]


@dataclass
class QueuedJob:
    """A fired job waiting for a worker."""

    key: str
    payload: JobPayload
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class WorkerPool:
    """Fixed-size pool of workers draining one queue."""

    def __init__(self, name: str, concurrency: int, dispatch: Dispatch):
        """
        Initialize worker pool.

        Args:
            name: Queue name, used in logs and stats
            concurrency: Number of jobs allowed to run at once
            dispatch: Coroutine function executing one payload
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.name = name
        self.concurrency = concurrency
        self.dispatch = dispatch
        self.queue: asyncio.Queue[QueuedJob] = asyncio.Queue()
        self.outstanding: set[str] = set()
        self.active: Dict[str, QueuedJob] = {}
        self.stats: Dict[str, int] = defaultdict(int)
        self.running = False
        self._worker_tasks: List[asyncio.Task] = []

    def submit(self, key: str, payload: JobPayload) -> bool:
        """Queue a job unless the same key is already queued or running.

        :returns: True if the job was queued
        """
        if key in self.outstanding:
            self.stats["jobs_skipped"] += 1
            logger.debug("Job already outstanding, skipping", queue=self.name, job_key=key)
            return False

        self.outstanding.add(key)
        self.queue.put_nowait(QueuedJob(key=key, payload=payload))
        self.stats["jobs_queued"] += 1
        return True

    async def start(self) -> None:
        """Start the pool's workers."""
        if self.running:
            logger.warning("Worker pool is already running", queue=self.name)
            return

        self.running = True
        self._worker_tasks = [
            asyncio.create_task(self._worker(f"{self.name}-{i}"))
            for i in range(self.concurrency)
        ]
        logger.info("Worker pool started", queue=self.name, concurrency=self.concurrency)

    async def stop(self) -> None:
        """Stop consuming. Queued jobs are dropped; running jobs are cancelled."""
        if not self.running:
            return

        self.running = False
        for worker_task in self._worker_tasks:
            worker_task.cancel()
        await asyncio.gather(*self._worker_tasks, return_exceptions=True)
        self._worker_tasks = []

        dropped = 0
        while not self.queue.empty():
            self.queue.get_nowait()
            self.queue.task_done()
            dropped += 1
        # Dropped keys must be submittable again after a restart
        self.outstanding.clear()
        self.active.clear()

        logger.info("Worker pool stopped", queue=self.name, dropped_jobs=dropped)

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self.queue.join()

    async def _worker(self, worker_name: str) -> None:
        while True:
            job = await self.queue.get()
            try:
                await self._process(job, worker_name)
            finally:
                self.queue.task_done()

    async def _process(self, job: QueuedJob, worker_name: str) -> None:
        payload = job.payload
        self.active[job.key] = job

        with structlog.contextvars.bound_contextvars(
            job_key=job.key,
            job_class=payload.job_class.value,
            entity_id=payload.entity_id,
        ):
            started = datetime.now(timezone.utc)
            try:
                await self.dispatch(payload)
            except Exception as e:
                # One entity's failure never stops the worker
                self.stats["jobs_failed"] += 1
                logger.error(
                    "Job failed",
                    queue=self.name,
                    worker=worker_name,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                self.stats["jobs_completed"] += 1
                logger.debug(
                    "Job completed",
                    queue=self.name,
                    worker=worker_name,
                    duration_seconds=(datetime.now(timezone.utc) - started).total_seconds(),
                )
            finally:
                self.active.pop(job.key, None)
                self.outstanding.discard(job.key)

    def get_stats(self) -> Dict[str, Any]:
        """Get queue statistics."""
        return {
            "running": self.running,
            "concurrency": self.concurrency,
            "queued": self.queue.qsize(),
            "active": len(self.active),
            "completed": self.stats["jobs_completed"],
            "failed": self.stats["jobs_failed"],
            "skipped": self.stats["jobs_skipped"],
        }

    def is_outstanding(self, key: str) -> bool:
        return key in self.outstanding
