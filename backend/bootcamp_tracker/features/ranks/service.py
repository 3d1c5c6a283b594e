"""Rank tracker: applies current and peak rank rules to stored players."""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.features.players.orm_models import TrackedPlayerORM
from bootcamp_tracker.features.players.repository import PlayerRepositoryInterface
from .scoring import (
    TRACKED_QUEUES,
    RankSnapshot,
    decide_current,
    find_queue_entry,
    next_peak,
)

logger = structlog.get_logger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RankTracker:
    """Current and peak ranked standings for tracked players.

    Upstream errors propagate to the caller untouched; nothing is written
    unless the league lookup succeeded.
    """

    def __init__(
        self,
        players: PlayerRepositoryInterface,
        riot: RiotAPIClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.players = players
        self.riot = riot
        self.clock = clock

    async def _load(self, player_id: str) -> Optional[TrackedPlayerORM]:
        player = await self.players.get_by_id(player_id)
        if player is None:
            logger.info("Skipping rank check for unknown player", player_id=player_id)
        return player

    async def update_current(self, player_id: str) -> bool:
        """Refresh current ranks for every tracked queue.

        :returns: True if the player row was written
        """
        player = await self._load(player_id)
        if player is None:
            return False

        entries = await self.riot.get_league_entries(player.region, player.puuid)
        previously_checked = player.rank_updated_at is not None

        for queue in TRACKED_QUEUES:
            entry = find_queue_entry(entries, queue)
            observed = RankSnapshot.from_entry(entry) if entry and entry.tier else None
            decision = decide_current(
                player.get_current(queue), observed, previously_checked
            )
            if decision.write:
                player.set_current(queue, decision.snapshot)
            else:
                logger.info(
                    "Keeping established rank despite missing league entry",
                    player_id=player.id,
                    queue=queue.value,
                )

        player.rank_updated_at = self.clock()
        await self.players.save(player)

        solo = player.get_current(TRACKED_QUEUES[0])
        logger.info(
            "Current rank updated",
            player_id=player.id,
            summoner_name=player.summoner_name,
            solo=str(solo) if solo else None,
        )
        return True

    async def check_peak(self, player_id: str) -> bool:
        """Raise stored peaks where the fresh standing beats them.

        :returns: True if any peak moved
        """
        player = await self._load(player_id)
        if player is None:
            return False

        entries = await self.riot.get_league_entries(player.region, player.puuid)
        first_check = player.peak_updated_at is None

        improved = False
        for queue in TRACKED_QUEUES:
            entry = find_queue_entry(entries, queue)
            observed = RankSnapshot.from_entry(entry) if entry else None
            previous = player.get_peak(queue)
            new_peak = next_peak(previous, observed)
            if new_peak is None:
                continue

            player.set_peak(queue, new_peak)
            improved = True
            logger.info(
                "New peak rank",
                player_id=player.id,
                queue=queue.value,
                previous=str(previous) if previous else None,
                peak=str(new_peak),
            )

        if improved or first_check:
            player.peak_updated_at = self.clock()
            await self.players.save(player)
        return improved
