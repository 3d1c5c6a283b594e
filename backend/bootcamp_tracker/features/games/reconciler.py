"""Stale in-game state cleanup.

Players can be left marked in game when the worker was down while their game
ended. The sweep ends those games without scheduling post-game follow-ups,
since the game may have ended long ago.
"""

from dataclasses import dataclass

import structlog

from bootcamp_tracker.core.riot_api.errors import UpstreamAPIError
from bootcamp_tracker.features.players.repository import PlayerRepositoryInterface
from .service import GameStateMachine

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationResult:
    checked: int = 0
    cleaned: int = 0
    failed: int = 0


class StaleStateReconciler:
    """Ends recorded games that the spectator API no longer reports."""

    def __init__(self, players: PlayerRepositoryInterface, machine: GameStateMachine):
        self.players = players
        self.machine = machine

    async def run(self) -> ReconciliationResult:
        result = ReconciliationResult()
        in_game = await self.players.get_in_game_players()

        for player in in_game:
            if not player.last_game_id:
                continue
            result.checked += 1
            try:
                cleaned = await self._reconcile_player(player)
            except UpstreamAPIError as e:
                result.failed += 1
                logger.warning(
                    "Stale state check failed",
                    player_id=player.id,
                    region=player.region,
                    error=str(e),
                )
                continue
            except Exception as e:
                # One player never stops the sweep
                result.failed += 1
                logger.error(
                    "Stale state cleanup failed",
                    player_id=player.id,
                    region=player.region,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                continue

            if cleaned:
                result.cleaned += 1

        logger.info(
            "Stale game state reconciled",
            checked=result.checked,
            cleaned=result.cleaned,
            failed=result.failed,
        )
        return result

    async def _reconcile_player(self, player) -> bool:
        game = await self.machine.riot.get_active_match(player.region, player.puuid)
        if game is not None and str(game.game_id) == player.last_game_id:
            return False

        await self.machine.end_game(player, schedule_follow_ups=False)
        return True
