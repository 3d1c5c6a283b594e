"""Scheduler service owning every background job of the worker."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

import structlog
from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.jobstores.base import JobLookupError
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from bootcamp_tracker.features.games.reconciler import ReconciliationResult

from .definitions import (
    QUEUE_CONCURRENCY,
    JobClass,
    JobDescriptor,
    WorkerQueue,
    delayed_job_id,
    job_key,
)
from .handlers import JobHandlers
from .payloads import (
    CurrentRankPollJob,
    JobPayload,
    PeakRankPollJob,
    PlayrateRefreshJob,
)
from .roster import RosterSynchronizer
from .worker_pool import WorkerPool

logger = structlog.get_logger(__name__)

MAINTENANCE_JOBSTORE = "maintenance"

INITIAL_RANK_CHECK_DELAY_MS = 2_000
PLAYRATE_STARTUP_DELAY_SECONDS = 5
ROSTER_FIRST_RUN_SECONDS = 10
ROSTER_RECONCILE_INTERVAL_SECONDS = 120
STALE_RECONCILE_INTERVAL_SECONDS = 300
STATUS_LOG_INTERVAL_SECONDS = 60


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SchedulerService:
    """APScheduler plus one worker pool per queue.

    Every job class has its own memory job store, so a class can be listed
    or obliterated without touching the others. A firing job only submits its
    payload to the worker pool of its queue; the pool runs it.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self.clock = clock
        self._handlers: Optional[JobHandlers] = None
        self._roster: Optional[RosterSynchronizer] = None

        jobstores = {job_class.value: MemoryJobStore() for job_class in JobClass}
        jobstores[MAINTENANCE_JOBSTORE] = MemoryJobStore()

        self.scheduler = AsyncIOScheduler(
            jobstores=jobstores,
            executors={"default": AsyncIOExecutor()},
            job_defaults={
                "coalesce": True,  # Combine multiple missed runs into one
                "max_instances": 1,
                "misfire_grace_time": 60,
            },
            timezone="UTC",
        )
        self.pools: Dict[WorkerQueue, WorkerPool] = {
            queue: WorkerPool(queue.value, concurrency, self._execute)
            for queue, concurrency in QUEUE_CONCURRENCY.items()
        }

    def configure(self, handlers: JobHandlers, roster: RosterSynchronizer) -> None:
        """Attach the handler registry and the roster synchronizer."""
        self._handlers = handlers
        self._roster = roster

    @property
    def running(self) -> bool:
        return self.scheduler.running

    # Job registration

    def schedule_repeating(self, descriptor: JobDescriptor, payload: JobPayload) -> bool:
        """Register a repeatable job unless its key already exists.

        :returns: True if the job was added
        """
        alias = descriptor.job_class.value
        if self.scheduler.get_job(descriptor.key, jobstore=alias) is not None:
            return False

        self.scheduler.add_job(
            self._dispatch,
            trigger="interval",
            seconds=descriptor.interval_seconds,
            args=[payload],
            id=descriptor.key,
            name=descriptor.key,
            jobstore=alias,
            replace_existing=True,
        )
        logger.debug(
            "Scheduled repeating job",
            job_key=descriptor.key,
            interval_seconds=descriptor.interval_seconds,
        )
        return True

    def schedule_delayed(self, payload: JobPayload, delay_ms: int, tag: str) -> str:
        """Schedule a one-off run ``delay_ms`` from now.

        :returns: Id of the delayed job
        """
        job_id = delayed_job_id(payload.job_class, payload.entity_id, tag)
        run_date = self.clock() + timedelta(milliseconds=delay_ms)
        self.scheduler.add_job(
            self._dispatch,
            trigger="date",
            run_date=run_date,
            args=[payload],
            id=job_id,
            name=job_id,
            jobstore=payload.job_class.value,
            replace_existing=True,
        )
        logger.info("Scheduled delayed job", job_id=job_id, delay_ms=delay_ms)
        return job_id

    def queue_initial_rank_check(self, player_id: str, account_id: str, region: str) -> None:
        """Baseline current and peak ranks for a newly added player."""
        self.schedule_delayed(
            CurrentRankPollJob(player_id=player_id, puuid=account_id, region=region),
            INITIAL_RANK_CHECK_DELAY_MS,
            "initial",
        )
        self.schedule_delayed(
            PeakRankPollJob(player_id=player_id, puuid=account_id, region=region),
            INITIAL_RANK_CHECK_DELAY_MS,
            "initial",
        )

    def registered_keys(self, job_class: JobClass) -> set[str]:
        """Keys of the repeatable jobs of one class; delayed runs are excluded."""
        return {
            job.id
            for job in self.scheduler.get_jobs(jobstore=job_class.value)
            if isinstance(job.trigger, IntervalTrigger)
        }

    def remove(self, job_class: JobClass, key: str) -> bool:
        try:
            self.scheduler.remove_job(key, jobstore=job_class.value)
        except JobLookupError:
            return False
        return True

    def obliterate(self, job_class: JobClass) -> None:
        """Remove every job of one class, repeatable and delayed."""
        self.scheduler.remove_all_jobs(jobstore=job_class.value)
        logger.debug("Obliterated job class", job_class=job_class.value)

    # Execution

    async def _dispatch(self, payload: JobPayload) -> None:
        """Fired by APScheduler; hands the payload to its queue's pool."""
        key = job_key(payload.job_class, payload.entity_id)
        self.pools[payload.job_class.queue].submit(key, payload)

    async def _execute(self, payload: JobPayload) -> None:
        if self._handlers is None:
            raise RuntimeError("SchedulerService has no job handlers configured")
        await self._handlers.dispatch(payload)

    # Maintenance

    async def reconcile_roster(self) -> None:
        try:
            await self._roster.reconcile_roster()
        except Exception as e:
            logger.error(
                "Roster reconciliation failed",
                error=str(e),
                error_type=type(e).__name__,
            )

    async def reconcile_stale_state(self) -> Optional[ReconciliationResult]:
        try:
            return await self._handlers.reconcile_stale_state()
        except Exception as e:
            logger.error(
                "Stale state reconciliation failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def log_status(self) -> None:
        """Log queue stats, registered job counts and roster size."""
        try:
            roster_size = len(await self._roster.load_roster())
        except Exception as e:
            logger.warning("Could not load roster for status", error=str(e))
            roster_size = None

        logger.info(
            "Scheduler status",
            queues={queue.value: pool.get_stats() for queue, pool in self.pools.items()},
            registered_jobs={
                job_class.value: len(self.scheduler.get_jobs(jobstore=job_class.value))
                for job_class in JobClass
            },
            roster_size=roster_size,
        )

    def _schedule_playrate_refresh(self) -> None:
        payload = PlayrateRefreshJob()
        self.schedule_delayed(payload, PLAYRATE_STARTUP_DELAY_SECONDS * 1000, "startup")
        self.scheduler.add_job(
            self._dispatch,
            trigger="cron",
            hour=0,
            minute=0,
            args=[payload],
            id=job_key(JobClass.PLAYRATE, payload.entity_id),
            jobstore=JobClass.PLAYRATE.value,
            replace_existing=True,
        )

    def _schedule_maintenance(self) -> None:
        self.scheduler.add_job(
            self.reconcile_roster,
            trigger="interval",
            seconds=ROSTER_RECONCILE_INTERVAL_SECONDS,
            next_run_time=self.clock() + timedelta(seconds=ROSTER_FIRST_RUN_SECONDS),
            id="roster-reconcile",
            jobstore=MAINTENANCE_JOBSTORE,
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.reconcile_stale_state,
            trigger="interval",
            seconds=STALE_RECONCILE_INTERVAL_SECONDS,
            id="stale-reconcile",
            jobstore=MAINTENANCE_JOBSTORE,
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.log_status,
            trigger="interval",
            seconds=STATUS_LOG_INTERVAL_SECONDS,
            id="status-logger",
            jobstore=MAINTENANCE_JOBSTORE,
            replace_existing=True,
        )

    # Lifecycle

    async def start(self) -> None:
        """Clear old jobs, reconcile stale state, reschedule the roster and start."""
        if self._handlers is None or self._roster is None:
            raise RuntimeError("SchedulerService.configure() must be called before start()")
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting job scheduler")

        for job_class in JobClass:
            self.obliterate(job_class)

        result = await self.reconcile_stale_state()
        if result is not None:
            logger.info("Startup stale state check done", cleaned=result.cleaned)

        # Roster jobs are registered before the first tick
        await self.reconcile_roster()

        self._schedule_playrate_refresh()
        self._schedule_maintenance()

        self.scheduler.start()
        for pool in self.pools.values():
            await pool.start()

        logger.info("Job scheduler started", queues=len(self.pools))

    async def shutdown(self) -> None:
        """Stop firing jobs and stop the worker pools."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        for pool in self.pools.values():
            await pool.stop()
        logger.info("Job scheduler stopped")
