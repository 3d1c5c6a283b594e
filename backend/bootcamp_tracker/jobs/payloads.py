"""Typed job payloads.

Each job class has exactly one payload type. Workers dispatch on the payload
type, so adding a class means adding a payload and a handler.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from .definitions import JobClass


@dataclass(frozen=True)
class PlayerJob:
    """Payload for a job about one tracked player."""

    job_class: ClassVar[JobClass]

    player_id: str

    @property
    def entity_id(self) -> str:
        return self.player_id


@dataclass(frozen=True)
class GameStatePollJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.GAME_STATE

    puuid: str
    region: str


@dataclass(frozen=True)
class MatchDetailJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.MATCH_DETAIL

    game_id: str
    region: str


@dataclass(frozen=True)
class CurrentRankPollJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.CURRENT_RANK

    puuid: str
    region: str


@dataclass(frozen=True)
class PeakRankPollJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.PEAK_RANK

    puuid: str
    region: str


@dataclass(frozen=True)
class StreamPollJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.STREAM

    twitch_user_id: str
    twitch_login: str


@dataclass(frozen=True)
class DisplayNamePollJob(PlayerJob):
    job_class: ClassVar[JobClass] = JobClass.DISPLAY_NAME

    puuid: str
    region: str


@dataclass(frozen=True)
class PlayrateRefreshJob:
    job_class: ClassVar[JobClass] = JobClass.PLAYRATE

    @property
    def entity_id(self) -> str:
        return "champions"


JobPayload = Union[
    GameStatePollJob,
    MatchDetailJob,
    CurrentRankPollJob,
    PeakRankPollJob,
    StreamPollJob,
    DisplayNamePollJob,
    PlayrateRefreshJob,
]

PAYLOAD_TYPES = (
    GameStatePollJob,
    MatchDetailJob,
    CurrentRankPollJob,
    PeakRankPollJob,
    StreamPollJob,
    DisplayNamePollJob,
    PlayrateRefreshJob,
)
