"""Background job orchestration.

The scheduler service and worker pools live in ``jobs.scheduler`` and
``jobs.worker_pool``; only the leaf definitions are re-exported here so
feature services can build follow-up payloads without import cycles.
"""

from .definitions import (
    JobClass,
    JobDescriptor,
    WorkerQueue,
    job_key,
    parse_job_key,
)
from .payloads import (
    JobPayload,
    GameStatePollJob,
    MatchDetailJob,
    CurrentRankPollJob,
    PeakRankPollJob,
    StreamPollJob,
    DisplayNamePollJob,
    PlayrateRefreshJob,
)

__all__ = [
    "JobClass",
    "JobDescriptor",
    "WorkerQueue",
    "job_key",
    "parse_job_key",
    "JobPayload",
    "GameStatePollJob",
    "MatchDetailJob",
    "CurrentRankPollJob",
    "PeakRankPollJob",
    "StreamPollJob",
    "DisplayNamePollJob",
    "PlayrateRefreshJob",
]
