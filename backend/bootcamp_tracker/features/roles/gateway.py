"""Community Dragon champion data.

Fetches the static Community Dragon files and turns them into
per-champion role play rates.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx
import structlog

from bootcamp_tracker.core.config import get_global_settings
from bootcamp_tracker.core.enums import Role

logger = structlog.get_logger(__name__)

CDRAGON_BASE = "https://raw.communitydragon.org/latest"
CHAMPION_SUMMARY_URL = (
    f"{CDRAGON_BASE}/plugins/rcp-be-lol-game-data/global/default/v1/champion-summary.json"
)
CHAMPION_STATISTICS_URL = (
    f"{CDRAGON_BASE}/plugins/rcp-fe-lol-champion-statistics/global/default/"
    "rcp-fe-lol-champion-statistics.js"
)
CONTENT_METADATA_URL = f"{CDRAGON_BASE}/content-metadata.json"

# Key used in the statistics script for each role
STATISTICS_ROLE_KEYS = {
    Role.TOP: "TOP",
    Role.JUNGLE: "JUNGLE",
    Role.MIDDLE: "MIDDLE",
    Role.BOTTOM: "BOTTOM",
    Role.UTILITY: "SUPPORT",
}

PLACEHOLDER_CHAMPION_ID = -1


@dataclass
class PlayrateSnapshot:
    """Role play rates for every champion on one patch."""

    patch: str
    rates: Dict[int, Dict[Role, float]] = field(default_factory=dict)


def parse_role_rates(script_text: str, role_key: str) -> Dict[int, float]:
    """Pull ``{championId: rate}`` for one role out of the statistics script."""
    match = re.search(rf'{role_key}":(.*?}})', script_text)
    if not match:
        logger.warning("Role missing from champion statistics", role=role_key)
        return {}

    body = re.sub(r"\s", "", match.group(1)).strip("{}")
    rates: Dict[int, float] = {}
    for pair in body.split(","):
        if ":" not in pair:
            continue
        champion_id, raw_rate = pair.split(":", 1)
        try:
            rates[int(champion_id.strip('"'))] = round(float(raw_rate) * 100, 5)
        except ValueError:
            logger.debug("Skipping unparsable playrate pair", pair=pair)
    return rates


def parse_patch(metadata: Dict[str, Any]) -> str:
    """``"14.19.621.7821"`` -> ``"14.19"``."""
    parts = str(metadata.get("version", "")).split(".")
    return ".".join(parts[:2])


def build_snapshot(
    champions: List[Dict[str, Any]], script_text: str, patch: str
) -> PlayrateSnapshot:
    """Zero-filled rates for every known champion, overlaid with parsed rates."""
    snapshot = PlayrateSnapshot(patch=patch)
    for champion in champions:
        champion_id = champion.get("id")
        if champion_id is None or champion_id == PLACEHOLDER_CHAMPION_ID:
            continue
        snapshot.rates[int(champion_id)] = {role: 0.0 for role in STATISTICS_ROLE_KEYS}

    for role, role_key in STATISTICS_ROLE_KEYS.items():
        for champion_id, rate in parse_role_rates(script_text, role_key).items():
            if champion_id in snapshot.rates:
                snapshot.rates[champion_id][role] = rate

    return snapshot


class CommunityDragonClient:
    """HTTP client for the three Community Dragon files the refresh needs."""

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout or get_global_settings().http_timeout_seconds
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout), transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str) -> httpx.Response:
        response = await self._get_client().get(url)
        response.raise_for_status()
        return response

    async def get_champion_summary(self) -> List[Dict[str, Any]]:
        return (await self._get(CHAMPION_SUMMARY_URL)).json()

    async def get_champion_statistics_script(self) -> str:
        return (await self._get(CHAMPION_STATISTICS_URL)).text

    async def get_content_metadata(self) -> Dict[str, Any]:
        return (await self._get(CONTENT_METADATA_URL)).json()

    async def fetch_snapshot(self) -> PlayrateSnapshot:
        """Download champion list, statistics and patch, and combine them."""
        champions = await self.get_champion_summary()
        script_text = await self.get_champion_statistics_script()
        patch = parse_patch(await self.get_content_metadata())

        snapshot = build_snapshot(champions, script_text, patch)
        logger.info(
            "Fetched champion playrates",
            champions=len(snapshot.rates),
            patch=snapshot.patch,
        )
        return snapshot
