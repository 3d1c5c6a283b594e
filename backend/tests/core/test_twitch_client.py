"""
Tests for the Twitch Helix client.
"""

import httpx
import pytest

from bootcamp_tracker.core.twitch.client import TwitchAPIClient, TwitchAPIError


class FakeTwitch:
    def __init__(self):
        self.token_requests = 0
        self.stream_requests = []
        self.stream_status = 200

    def __call__(self, request):
        if request.url.host == "id.twitch.tv":
            self.token_requests += 1
            return httpx.Response(
                200,
                json={"access_token": f"token-{self.token_requests}", "expires_in": 3600},
            )

        self.stream_requests.append(request)
        if self.stream_status != 200:
            return httpx.Response(self.stream_status, json={"message": "nope"})
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "id": "s1",
                        "user_id": "101",
                        "user_login": "alice_tv",
                        "title": "Road to Master",
                        "viewer_count": 120,
                        "started_at": "2024-06-01T17:30:00Z",
                    }
                ]
            },
        )


@pytest.fixture
def twitch():
    return FakeTwitch()


@pytest.fixture
def client(twitch):
    return TwitchAPIClient(
        client_id="client-id",
        client_secret="secret",
        timeout=5.0,
        transport=httpx.MockTransport(twitch),
    )


async def test_get_streams(client, twitch):
    streams = await client.get_streams(["101"])
    await client.close()

    assert streams[0].user_login == "alice_tv"
    request = twitch.stream_requests[0]
    assert request.headers["Authorization"] == "Bearer token-1"
    assert request.headers["Client-Id"] == "client-id"
    assert request.url.params["user_id"] == "101"


async def test_token_is_reused(client, twitch):
    await client.get_streams(["101"])
    await client.get_streams(["101"])
    await client.close()

    assert twitch.token_requests == 1


async def test_unauthorized_drops_token(client, twitch):
    await client.get_streams(["101"])
    twitch.stream_status = 401

    with pytest.raises(TwitchAPIError) as exc_info:
        await client.get_streams(["101"])
    assert not exc_info.value.is_transient

    twitch.stream_status = 200
    await client.get_streams(["101"])
    await client.close()

    assert twitch.token_requests == 2


async def test_server_error_is_transient(client, twitch):
    twitch.stream_status = 503

    with pytest.raises(TwitchAPIError) as exc_info:
        await client.get_streams(["101"])
    await client.close()

    assert exc_info.value.is_transient


async def test_no_user_ids_makes_no_request(client, twitch):
    assert await client.get_streams([]) == []
    assert twitch.token_requests == 0


def test_is_configured(client):
    assert client.is_configured

    client.client_secret = ""
    assert not client.is_configured


async def test_missing_session_raises_twitch_error(client, twitch):
    await client.get_streams(["101"])
    await client.close()
    client.session = None

    with pytest.raises(TwitchAPIError, match="Session not initialized"):
        await client.get_streams(["101"])
    assert len(twitch.stream_requests) == 1
