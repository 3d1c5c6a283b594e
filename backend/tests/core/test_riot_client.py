"""
Tests for the Riot API client.
"""

import httpx
import pytest

from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.core.riot_api.errors import (
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
)
from bootcamp_tracker.core.riot_api.rate_limiter import ReservoirLimiter, RiotRateLimiter


def make_client(handler):
    limiter = RiotRateLimiter(
        ReservoirLimiter("app", reservoir=100, refresh_interval=1.0, max_concurrent=10),
        ReservoirLimiter("method", reservoir=100, refresh_interval=1.0, max_concurrent=10),
    )
    return RiotAPIClient(
        api_key="RGAPI-test",
        rate_limiter=limiter,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture
def requests():
    return []


def respond(requests, status_code, json=None, headers=None):
    def handler(request):
        requests.append(request)
        return httpx.Response(status_code, json=json, headers=headers)

    return handler


class TestRiotAPIClient:
    async def test_active_game_is_parsed(self, requests):
        body = {
            "gameId": 1001,
            "gameQueueConfigId": 420,
            "gameStartTime": 1717264800000,
            "participants": [
                {"puuid": "puuid-1", "championId": 157, "teamId": 100, "spell1Id": 4, "spell2Id": 14}
            ],
        }
        async with make_client(respond(requests, 200, body)) as client:
            game = await client.get_active_match("euw1", "puuid-1")

        assert game.game_id == 1001
        assert game.participants[0].spells == (4, 14)
        request = requests[0]
        assert request.url.host == "euw1.api.riotgames.com"
        assert request.url.path == "/lol/spectator/v5/active-games/by-summoner/puuid-1"
        assert request.headers["X-Riot-Token"] == "RGAPI-test"

    async def test_not_in_game_returns_none(self, requests):
        async with make_client(respond(requests, 404, {"status": {"status_code": 404}})) as client:
            assert await client.get_active_match("euw1", "puuid-1") is None

    async def test_unranked_returns_empty_list(self, requests):
        async with make_client(respond(requests, 404)) as client:
            assert await client.get_league_entries("euw1", "puuid-1") == []

    async def test_league_entries(self, requests):
        body = [{"queueType": "RANKED_SOLO_5x5", "tier": "GOLD", "rank": "II", "leaguePoints": 40}]
        async with make_client(respond(requests, 200, body)) as client:
            entries = await client.get_league_entries("euw1", "puuid-1")

        assert entries[0].tier == "GOLD"
        assert entries[0].league_points == 40

    async def test_account_uses_regional_host(self, requests):
        body = {"puuid": "puuid-1", "gameName": "NewName", "tagLine": "EUW"}
        async with make_client(respond(requests, 200, body)) as client:
            account = await client.get_account_by_puuid("euw1", "puuid-1")

        assert account.riot_id == "NewName#EUW"
        assert requests[0].url.host == "europe.api.riotgames.com"

    async def test_missing_account_raises_not_found(self, requests):
        async with make_client(respond(requests, 404)) as client:
            with pytest.raises(NotFoundError):
                await client.get_account_by_puuid("euw1", "puuid-1")

    async def test_rate_limit_carries_retry_after(self, requests):
        handler = respond(requests, 429, headers={"Retry-After": "7"})
        async with make_client(handler) as client:
            with pytest.raises(RateLimitError) as exc_info:
                await client.get_league_entries("euw1", "puuid-1")

        assert exc_info.value.retry_after == 7.0
        assert exc_info.value.is_transient
        assert len(requests) == 1

    @pytest.mark.parametrize(
        "status_code, error_type",
        [(401, AuthenticationError), (403, ForbiddenError), (503, ServiceUnavailableError)],
    )
    async def test_error_status_codes(self, requests, status_code, error_type):
        async with make_client(respond(requests, status_code)) as client:
            with pytest.raises(error_type):
                await client.get_match_by_id("euw1", "EUW1_1001")

    async def test_transport_error_is_service_unavailable(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        async with make_client(handler) as client:
            with pytest.raises(ServiceUnavailableError):
                await client.get_active_match("euw1", "puuid-1")
