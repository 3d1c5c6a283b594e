"""Stream liveness tracking for players with a linked Twitch channel."""

from datetime import datetime, timezone
from typing import Callable

import structlog

from bootcamp_tracker.core.twitch.client import TwitchAPIClient, TwitchStreamDTO
from .orm_models import TWITCH_CHANNEL_URL, StreamSessionORM
from .repository import StreamRepositoryInterface

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_twitch_timestamp(value: str) -> datetime:
    """Twitch reports RFC 3339 UTC timestamps like ``2024-05-01T18:02:11Z``."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class StreamTracker:
    """Keeps one stream session per broadcast up to date."""

    def __init__(
        self,
        streams: StreamRepositoryInterface,
        twitch: TwitchAPIClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.streams = streams
        self.twitch = twitch
        self.clock = clock

    async def check(self, player_id: str, twitch_user_id: str, twitch_login: str) -> bool:
        """Poll Twitch once.

        :returns: True if the player is live
        """
        live_streams = await self.twitch.get_streams([twitch_user_id])
        now = self.clock()

        if live_streams:
            await self._record_live(
                player_id, twitch_user_id, twitch_login, live_streams[0], now
            )
            return True

        open_sessions = await self.streams.get_live(player_id)
        if open_sessions:
            for session in open_sessions:
                session.mark_offline(now)
            await self.streams.save_all(open_sessions)
            logger.info("Stream went offline", player_id=player_id, login=twitch_login)
        return False

    async def _record_live(
        self,
        player_id: str,
        twitch_user_id: str,
        twitch_login: str,
        stream: TwitchStreamDTO,
        now: datetime,
    ) -> None:
        started_at = parse_twitch_timestamp(stream.started_at)
        latest = await self.streams.get_latest(player_id)

        if latest is not None and (latest.live or latest.started_at == started_at):
            session = latest
        else:
            session = StreamSessionORM(
                tracked_player_id=player_id,
                twitch_user_id=twitch_user_id,
                stream_url=TWITCH_CHANNEL_URL.format(login=twitch_login),
            )
            logger.info(
                "Stream went live",
                player_id=player_id,
                login=twitch_login,
                title=stream.title,
            )

        session.mark_live(stream.title, started_at, now)
        await self.streams.save_all([session])
