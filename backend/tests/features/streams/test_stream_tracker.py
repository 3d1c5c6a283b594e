"""
Tests for stream liveness tracking.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from bootcamp_tracker.core.twitch.client import TwitchStreamDTO
from bootcamp_tracker.features.streams.service import StreamTracker, parse_twitch_timestamp

from conftest import FIXED_NOW


def live_stream(started_at="2024-06-01T17:30:00Z", title="Road to Master"):
    return TwitchStreamDTO(
        id="s1",
        user_id="t-1",
        user_login="bootcamper",
        title=title,
        viewer_count=120,
        started_at=started_at,
    )


@pytest.fixture
def twitch():
    client = MagicMock()
    client.get_streams = AsyncMock(return_value=[])
    return client


@pytest.fixture
def tracker(streams, twitch):
    return StreamTracker(streams, twitch, clock=lambda: FIXED_NOW)


def test_parse_twitch_timestamp():
    assert parse_twitch_timestamp("2024-06-01T17:30:00Z") == datetime(
        2024, 6, 1, 17, 30, tzinfo=timezone.utc
    )


async def test_going_live_opens_session(tracker, streams, twitch):
    twitch.get_streams.return_value = [live_stream()]

    assert await tracker.check("p1", "t-1", "bootcamper") is True

    assert len(streams.sessions) == 1
    session = streams.sessions[0]
    assert session.live is True
    assert session.title == "Road to Master"
    assert session.stream_url == "https://www.twitch.tv/bootcamper"
    assert session.last_checked == FIXED_NOW
    twitch.get_streams.assert_awaited_once_with(["t-1"])


async def test_still_live_updates_same_session(tracker, streams, twitch):
    twitch.get_streams.return_value = [live_stream()]
    await tracker.check("p1", "t-1", "bootcamper")

    twitch.get_streams.return_value = [live_stream(title="Climbing")]
    await tracker.check("p1", "t-1", "bootcamper")

    assert len(streams.sessions) == 1
    assert streams.sessions[0].title == "Climbing"


async def test_going_offline_closes_session(tracker, streams, twitch):
    twitch.get_streams.return_value = [live_stream()]
    await tracker.check("p1", "t-1", "bootcamper")

    twitch.get_streams.return_value = []
    assert await tracker.check("p1", "t-1", "bootcamper") is False

    session = streams.sessions[0]
    assert session.live is False
    assert session.ended_at == FIXED_NOW


async def test_new_broadcast_opens_new_session(tracker, streams, twitch):
    twitch.get_streams.return_value = [live_stream()]
    await tracker.check("p1", "t-1", "bootcamper")
    twitch.get_streams.return_value = []
    await tracker.check("p1", "t-1", "bootcamper")

    later = (FIXED_NOW + timedelta(hours=3)).strftime("%Y-%m-%dT%H:%M:%SZ")
    twitch.get_streams.return_value = [live_stream(started_at=later)]
    await tracker.check("p1", "t-1", "bootcamper")

    assert len(streams.sessions) == 2
    assert streams.sessions[0].live is False
    assert streams.sessions[1].live is True


async def test_offline_without_session_writes_nothing(tracker, streams):
    assert await tracker.check("p1", "t-1", "bootcamper") is False
    assert streams.sessions == []
