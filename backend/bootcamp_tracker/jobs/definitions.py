"""Job classes, worker queues and job keys.

A job key identifies one repeatable job for one entity. It is the only thing
that keeps the scheduler from registering the same poller twice.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class WorkerQueue(str, Enum):
    """Worker pools; each has its own queue and concurrency cap."""

    GAME_STATE = "game-state"
    MATCH_DETAIL = "match-detail"
    RANK = "rank"
    STREAM = "stream"
    DISPLAY_NAME = "display-name"
    PLAYRATE = "playrate"


QUEUE_CONCURRENCY = {
    WorkerQueue.GAME_STATE: 5,
    WorkerQueue.MATCH_DETAIL: 2,
    WorkerQueue.RANK: 3,
    WorkerQueue.STREAM: 3,
    WorkerQueue.DISPLAY_NAME: 2,
    WorkerQueue.PLAYRATE: 1,
}


class JobClass(str, Enum):
    """Every kind of job the worker runs."""

    GAME_STATE = "game-state"
    MATCH_DETAIL = "match-detail"
    CURRENT_RANK = "rank-current"
    PEAK_RANK = "rank-peak"
    STREAM = "stream"
    DISPLAY_NAME = "display-name"
    PLAYRATE = "playrate"

    @property
    def queue(self) -> WorkerQueue:
        return JOB_CLASS_QUEUES[self]

    @property
    def interval_seconds(self) -> Optional[int]:
        """Repeat interval, or None for classes that are never interval-scheduled."""
        return JOB_CLASS_INTERVALS.get(self)


JOB_CLASS_QUEUES = {
    JobClass.GAME_STATE: WorkerQueue.GAME_STATE,
    JobClass.MATCH_DETAIL: WorkerQueue.MATCH_DETAIL,
    JobClass.CURRENT_RANK: WorkerQueue.RANK,
    JobClass.PEAK_RANK: WorkerQueue.RANK,
    JobClass.STREAM: WorkerQueue.STREAM,
    JobClass.DISPLAY_NAME: WorkerQueue.DISPLAY_NAME,
    JobClass.PLAYRATE: WorkerQueue.PLAYRATE,
}

JOB_CLASS_INTERVALS = {
    JobClass.GAME_STATE: 60,
    JobClass.CURRENT_RANK: 300,
    JobClass.PEAK_RANK: 300,
    JobClass.STREAM: 60,
    JobClass.DISPLAY_NAME: 3600,
}

# Classes with one repeatable job per roster member
ROSTER_JOB_CLASSES = (
    JobClass.GAME_STATE,
    JobClass.CURRENT_RANK,
    JobClass.PEAK_RANK,
    JobClass.STREAM,
    JobClass.DISPLAY_NAME,
)

KEY_SEPARATOR = ":"
DELAYED_TAG_SEPARATOR = "#"


def job_key(job_class: JobClass, entity_id: str) -> str:
    """Deterministic key for a (job class, entity) pair.

    Class values never contain the separator, so the class is always
    recoverable from the key and two classes can never produce the same key.
    """
    return f"{JobClass(job_class).value}{KEY_SEPARATOR}{entity_id}"


def parse_job_key(key: str) -> tuple[JobClass, str]:
    """Inverse of ``job_key``; a delayed-job tag is dropped."""
    base = key.split(DELAYED_TAG_SEPARATOR, 1)[0]
    class_value, _, entity_id = base.partition(KEY_SEPARATOR)
    if not entity_id:
        raise ValueError(f"Not a job key: {key!r}")
    return JobClass(class_value), entity_id


def delayed_job_id(job_class: JobClass, entity_id: str, tag: str) -> str:
    """Id of a one-off run; never equal to the entity's repeatable key."""
    return f"{job_key(job_class, entity_id)}{DELAYED_TAG_SEPARATOR}{tag}"


@dataclass(frozen=True)
class JobDescriptor:
    """A repeatable job for one entity."""

    job_class: JobClass
    entity_id: str
    interval_seconds: int

    @property
    def key(self) -> str:
        return job_key(self.job_class, self.entity_id)

    @classmethod
    def for_entity(cls, job_class: JobClass, entity_id: str) -> "JobDescriptor":
        interval = job_class.interval_seconds
        if interval is None:
            raise ValueError(f"{job_class.value} jobs are not interval-scheduled")
        return cls(job_class=job_class, entity_id=entity_id, interval_seconds=interval)
