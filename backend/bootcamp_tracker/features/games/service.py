"""Game state machine: turns a live-game poll into persisted transitions."""

from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol

import structlog

from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.core.riot_api.endpoints import match_id_for_game
from bootcamp_tracker.core.riot_api.models import ActiveGameDTO
from bootcamp_tracker.features.players.orm_models import TrackedPlayerORM
from bootcamp_tracker.features.players.repository import PlayerRepositoryInterface
from bootcamp_tracker.features.roles.classifier import playrate_table
from bootcamp_tracker.features.roles.repository import PlayrateRepositoryInterface
from bootcamp_tracker.jobs.payloads import (
    CurrentRankPollJob,
    JobPayload,
    MatchDetailJob,
    PeakRankPollJob,
)
from .enrichment import enrich_game
from .repository import GameRepositoryInterface

logger = structlog.get_logger(__name__)

# Ranked ladder records settle some time after a game ends; the current-rank
# refresh is ordered after the peak check by delay alone
MATCH_DETAIL_DELAY_MS = 60_000
PEAK_RANK_DELAY_MS = 90_000
CURRENT_RANK_DELAY_MS = 95_000


class GameTransition(str, Enum):
    """What a single poll did to a player."""

    NO_GAME = "no_game"
    STARTED = "started"
    ONGOING = "ongoing"
    RESUMED = "resumed"
    ENDED = "ended"
    UNKNOWN_PLAYER = "unknown_player"


class FollowUpScheduler(Protocol):
    def schedule_delayed(self, payload: JobPayload, delay_ms: int, tag: str) -> str: ...


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def game_started_at(game: ActiveGameDTO, fallback: datetime) -> datetime:
    """Spectator start time (epoch ms); zero while the game is still loading."""
    if game.game_start_time and game.game_start_time > 0:
        return datetime.fromtimestamp(game.game_start_time / 1000, tz=timezone.utc)
    return fallback


class GameStateMachine:
    """Per-player live game tracking.

    Idle players entering a game get a fully enriched session; players seen
    again in the same game are left alone; players who left get their
    session completed and post-game follow-ups scheduled.
    """

    def __init__(
        self,
        players: PlayerRepositoryInterface,
        games: GameRepositoryInterface,
        playrates: PlayrateRepositoryInterface,
        riot: RiotAPIClient,
        follow_ups: Optional[FollowUpScheduler] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.players = players
        self.games = games
        self.playrates = playrates
        self.riot = riot
        self.follow_ups = follow_ups
        self.clock = clock

    async def poll(self, player_id: str) -> GameTransition:
        """Poll the spectator API for one player and apply the transition."""
        player = await self.players.get_by_id(player_id)
        if player is None:
            logger.info("Skipping game poll for unknown player", player_id=player_id)
            return GameTransition.UNKNOWN_PLAYER

        game = await self.riot.get_active_match(player.region, player.puuid)

        if game is None:
            if player.is_in_game and player.last_game_id:
                await self.end_game(player, schedule_follow_ups=True)
                return GameTransition.ENDED
            return GameTransition.NO_GAME

        game_id = str(game.game_id)
        if player.is_in_game and player.last_game_id == game_id:
            logger.debug("Game already recorded", player_id=player.id, game_id=game_id)
            return GameTransition.ONGOING

        if player.last_game_id == game_id:
            existing = await self.games.get_session(game_id, player.id)
            if existing is not None:
                await self.games.resume_game(player, game_id)
                return GameTransition.RESUMED

        if player.is_in_game and player.last_game_id:
            # Straight from one game into the next between two polls
            await self.end_game(player, schedule_follow_ups=True)

        await self.start_game(player, game)
        return GameTransition.STARTED

    async def start_game(self, player: TrackedPlayerORM, game: ActiveGameDTO) -> None:
        """Enrich the lobby and record the new game."""
        game_id = str(game.game_id)
        logger.info(
            "New game detected",
            player_id=player.id,
            summoner_name=player.summoner_name,
            game_id=game_id,
            participants=len(game.participants),
        )

        table = playrate_table(await self.playrates.get_all())
        if not table:
            logger.info("No champion playrates stored, using spell signals only")

        roster = await enrich_game(self.riot, player.region, game, table)
        await self.games.record_game_start(
            player,
            game_id,
            started_at=game_started_at(game, self.clock()),
            enriched_roster=roster,
        )

    async def end_game(
        self, player: TrackedPlayerORM, schedule_follow_ups: bool = True
    ) -> int:
        """Complete the player's current game.

        :param player: Player persisted as in game
        :param schedule_follow_ups: False for reconciliation sweeps
        :returns: Number of sessions completed
        """
        game_id = player.last_game_id
        completed = await self.games.record_game_end(player, self.clock())
        logger.info(
            "Game ended",
            player_id=player.id,
            summoner_name=player.summoner_name,
            game_id=game_id,
            follow_ups=schedule_follow_ups,
        )

        if schedule_follow_ups and game_id:
            self._schedule_post_game(player, game_id)
        return completed

    def _schedule_post_game(self, player: TrackedPlayerORM, game_id: str) -> None:
        if self.follow_ups is None:
            return

        tag = f"after-{game_id}"
        self.follow_ups.schedule_delayed(
            MatchDetailJob(player_id=player.id, game_id=game_id, region=player.region),
            MATCH_DETAIL_DELAY_MS,
            tag,
        )
        self.follow_ups.schedule_delayed(
            PeakRankPollJob(player_id=player.id, puuid=player.puuid, region=player.region),
            PEAK_RANK_DELAY_MS,
            tag,
        )
        self.follow_ups.schedule_delayed(
            CurrentRankPollJob(
                player_id=player.id, puuid=player.puuid, region=player.region
            ),
            CURRENT_RANK_DELAY_MS,
            tag,
        )


class MatchDetailService:
    """Stores the full match record once the platform has processed it."""

    def __init__(self, games: GameRepositoryInterface, riot: RiotAPIClient):
        self.games = games
        self.riot = riot

    async def fetch_and_store(self, player_id: str, game_id: str, region: str) -> bool:
        match_id = match_id_for_game(region, game_id)
        match = await self.riot.get_match_by_id(region, match_id)
        stored = await self.games.save_match_detail(player_id, game_id, match)
        logger.info(
            "Match detail stored" if stored else "No session for match detail",
            player_id=player_id,
            match_id=match_id,
        )
        return stored
