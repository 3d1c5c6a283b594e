"""
Tests for the Community Dragon client and playrate refresh.
"""

import httpx
import pytest

from bootcamp_tracker.core.enums import Role
from bootcamp_tracker.features.roles.gateway import (
    CHAMPION_STATISTICS_URL,
    CHAMPION_SUMMARY_URL,
    CONTENT_METADATA_URL,
    CommunityDragonClient,
    build_snapshot,
    parse_patch,
    parse_role_rates,
)
from bootcamp_tracker.features.roles.service import PlayrateService

from conftest import FakePlayrateRepository

STATISTICS_SCRIPT = (
    '(window.webpackJsonp=[]).push([[0],{12:function(e,a){e.exports='
    '{"TOP":{"1":0.12,"2":0.3},"JUNGLE":{"1":0.01},"MIDDLE":{"2":0.5},'
    '"BOTTOM":{},"SUPPORT":{"1":0.05}}}}]);'
)

CHAMPIONS = [
    {"id": -1, "name": "None"},
    {"id": 1, "name": "Annie"},
    {"id": 2, "name": "Olaf"},
]


def cdragon_transport(statistics=STATISTICS_SCRIPT, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        if url == CHAMPION_SUMMARY_URL:
            return httpx.Response(200, json=CHAMPIONS)
        if url == CHAMPION_STATISTICS_URL:
            return httpx.Response(status_code, text=statistics)
        if url == CONTENT_METADATA_URL:
            return httpx.Response(200, json={"version": "14.19.621.7821"})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestParsing:
    def test_parse_role_rates_scales_to_percent(self):
        assert parse_role_rates(STATISTICS_SCRIPT, "TOP") == {1: 12.0, 2: 30.0}
        assert parse_role_rates(STATISTICS_SCRIPT, "SUPPORT") == {1: 5.0}

    def test_parse_role_rates_empty_role(self):
        assert parse_role_rates(STATISTICS_SCRIPT, "BOTTOM") == {}

    def test_parse_role_rates_missing_role(self):
        assert parse_role_rates("e.exports={}", "TOP") == {}

    def test_parse_patch(self):
        assert parse_patch({"version": "14.19.621.7821"}) == "14.19"
        assert parse_patch({}) == ""

    def test_build_snapshot_zero_fills_and_skips_placeholder(self):
        snapshot = build_snapshot(CHAMPIONS, STATISTICS_SCRIPT, "14.19")

        assert set(snapshot.rates) == {1, 2}
        assert snapshot.rates[1] == {
            Role.TOP: 12.0,
            Role.JUNGLE: 1.0,
            Role.MIDDLE: 0.0,
            Role.BOTTOM: 0.0,
            Role.UTILITY: 5.0,
        }
        assert snapshot.rates[2][Role.MIDDLE] == 50.0


class TestCommunityDragonClient:
    async def test_fetch_snapshot(self):
        client = CommunityDragonClient(timeout=5, transport=cdragon_transport())
        try:
            snapshot = await client.fetch_snapshot()
        finally:
            await client.close()

        assert snapshot.patch == "14.19"
        assert snapshot.rates[2][Role.TOP] == 30.0

    async def test_http_error_propagates(self):
        client = CommunityDragonClient(timeout=5, transport=cdragon_transport(status_code=502))
        with pytest.raises(httpx.HTTPStatusError):
            await client.fetch_snapshot()
        await client.close()


async def test_playrate_service_upserts_snapshot():
    repository = FakePlayrateRepository()
    client = CommunityDragonClient(timeout=5, transport=cdragon_transport())
    service = PlayrateService(repository, client)

    assert await service.refresh() == 2
    assert repository.snapshots[0].patch == "14.19"
    await client.close()
