"""Participant enrichment for newly detected live games."""

import asyncio
from typing import Any, Optional, Protocol

import structlog

from bootcamp_tracker.core.enums import QueueType
from bootcamp_tracker.core.riot_api.models import (
    ActiveGameDTO,
    ActiveGameParticipantDTO,
    LeagueEntryDTO,
)
from bootcamp_tracker.features.ranks.scoring import find_queue_entry
from bootcamp_tracker.features.roles.classifier import PlayrateTable, identify_roles

logger = structlog.get_logger(__name__)

UNRANKED = "Unranked"


class LeagueLookup(Protocol):
    async def get_league_entries(self, region: str, puuid: str) -> list[LeagueEntryDTO]: ...


def unranked_fields() -> dict[str, Any]:
    return {"rank": UNRANKED, "tier": None, "division": None, "leaguePoints": 0}


def rank_fields(entries: list[LeagueEntryDTO]) -> dict[str, Any]:
    """Solo queue standing at game time, in the roster's camelCase shape."""
    solo = find_queue_entry(entries, QueueType.RANKED_SOLO_5x5)
    if solo is None or not solo.tier:
        return unranked_fields()
    return {
        "rank": f"{solo.tier} {solo.rank}" if solo.rank else solo.tier,
        "tier": solo.tier,
        "division": solo.rank,
        "leaguePoints": solo.league_points or 0,
    }


async def _participant_rank(
    riot: LeagueLookup, region: str, participant: ActiveGameParticipantDTO
) -> dict[str, Any]:
    if not participant.puuid:
        return unranked_fields()
    try:
        entries = await riot.get_league_entries(region, participant.puuid)
    except Exception as e:
        # One failed lookup never blocks recording the game
        logger.warning(
            "Participant rank lookup failed, recording as unranked",
            puuid=participant.puuid,
            region=region,
            error=str(e),
            error_type=type(e).__name__,
        )
        return unranked_fields()
    return rank_fields(entries)


async def enrich_game(
    riot: LeagueLookup,
    region: str,
    game: ActiveGameDTO,
    playrates: Optional[PlayrateTable] = None,
) -> dict[str, Any]:
    """Build the enriched roster stored on a new game session.

    Rank lookups for all participants run concurrently and are joined before
    roles are inferred over the full roster.
    """
    ranks = await asyncio.gather(
        *(_participant_rank(riot, region, p) for p in game.participants)
    )
    roles = identify_roles(game.participants, playrates)

    participants = []
    for participant, rank, role in zip(game.participants, ranks, roles):
        record = participant.model_dump(by_alias=True, exclude_none=True)
        record.update(rank)
        record["inferredRole"] = role.value
        record["roleLabel"] = role.display_name
        participants.append(record)

    return {
        "gameId": game.game_id,
        "gameMode": game.game_mode,
        "gameQueueConfigId": game.game_queue_config_id,
        "gameStartTime": game.game_start_time,
        "platformId": game.platform_id,
        "participants": participants,
    }
