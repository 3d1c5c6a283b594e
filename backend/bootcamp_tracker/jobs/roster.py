"""Roster synchronization.

Keeps the set of repeatable jobs equal to the eligible roster crossed with
the roster job classes: missing jobs are added, jobs for players who left the
roster are removed.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Awaitable, Callable, Iterable, Protocol

import structlog

from bootcamp_tracker.features.players.orm_models import TrackedPlayerORM
from bootcamp_tracker.features.players.repository import SQLAlchemyPlayerRepository
from .definitions import ROSTER_JOB_CLASSES, JobClass, JobDescriptor, parse_job_key
from .handlers import SessionScope
from .payloads import (
    CurrentRankPollJob,
    DisplayNamePollJob,
    GameStatePollJob,
    JobPayload,
    PeakRankPollJob,
    StreamPollJob,
)

logger = structlog.get_logger(__name__)

RosterLoader = Callable[[], Awaitable[list[TrackedPlayerORM]]]


class RepeatingScheduler(Protocol):
    def schedule_repeating(self, descriptor: JobDescriptor, payload: JobPayload) -> bool: ...

    def registered_keys(self, job_class: JobClass) -> set[str]: ...

    def remove(self, job_class: JobClass, key: str) -> bool: ...


@dataclass
class RosterSyncResult:
    players: int = 0
    added: int = 0
    removed: int = 0


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def roster_loader(
    session_scope: SessionScope, today: Callable[[], date] = utc_today
) -> RosterLoader:
    """Loader reading the eligible roster for the current UTC date."""

    async def load() -> list[TrackedPlayerORM]:
        async with session_scope() as db:
            return await SQLAlchemyPlayerRepository(db).get_eligible_roster(today())

    return load


def desired_jobs(player: TrackedPlayerORM) -> list[tuple[JobDescriptor, JobPayload]]:
    """Repeatable jobs one roster member should have."""
    jobs: list[tuple[JobDescriptor, JobPayload]] = [
        (
            JobDescriptor.for_entity(JobClass.GAME_STATE, player.id),
            GameStatePollJob(player_id=player.id, puuid=player.puuid, region=player.region),
        ),
        (
            JobDescriptor.for_entity(JobClass.CURRENT_RANK, player.id),
            CurrentRankPollJob(player_id=player.id, puuid=player.puuid, region=player.region),
        ),
        (
            JobDescriptor.for_entity(JobClass.PEAK_RANK, player.id),
            PeakRankPollJob(player_id=player.id, puuid=player.puuid, region=player.region),
        ),
        (
            JobDescriptor.for_entity(JobClass.DISPLAY_NAME, player.id),
            DisplayNamePollJob(player_id=player.id, puuid=player.puuid, region=player.region),
        ),
    ]

    if player.has_twitch:
        jobs.append(
            (
                JobDescriptor.for_entity(JobClass.STREAM, player.id),
                StreamPollJob(
                    player_id=player.id,
                    twitch_user_id=player.twitch_user_id,
                    twitch_login=player.twitch_login,
                ),
            )
        )
    return jobs


class RosterSynchronizer:
    """Reconciles registered repeatable jobs against the roster."""

    def __init__(self, scheduler: RepeatingScheduler, load_roster: RosterLoader):
        self.scheduler = scheduler
        self.load_roster = load_roster

    async def reconcile_roster(self) -> RosterSyncResult:
        """Add missing jobs and remove orphaned ones.

        Safe to run repeatedly: a second run with an unchanged roster adds and
        removes nothing.
        """
        roster = await self.load_roster()
        return self.apply(roster)

    def apply(self, roster: Iterable[TrackedPlayerORM]) -> RosterSyncResult:
        result = RosterSyncResult()
        wanted: dict[JobClass, set[str]] = {job_class: set() for job_class in ROSTER_JOB_CLASSES}

        for player in roster:
            result.players += 1
            for descriptor, payload in desired_jobs(player):
                wanted[descriptor.job_class].add(descriptor.key)
                if self.scheduler.schedule_repeating(descriptor, payload):
                    result.added += 1

        for job_class in ROSTER_JOB_CLASSES:
            for key in self.scheduler.registered_keys(job_class) - wanted[job_class]:
                if self.scheduler.remove(job_class, key):
                    result.removed += 1
                    _, entity_id = parse_job_key(key)
                    logger.info(
                        "Removed job for player no longer on roster",
                        job_class=job_class.value,
                        entity_id=entity_id,
                    )

        if result.added or result.removed:
            logger.info(
                "Roster reconciled",
                players=result.players,
                added=result.added,
                removed=result.removed,
            )
        else:
            logger.debug("Roster unchanged", players=result.players)
        return result
