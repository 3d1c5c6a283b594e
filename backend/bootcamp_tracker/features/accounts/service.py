"""Display name refresh from the Riot Account API."""

import structlog

from bootcamp_tracker.core.riot_api.client import RiotAPIClient
from bootcamp_tracker.features.players.repository import PlayerRepositoryInterface

logger = structlog.get_logger(__name__)


class DisplayNameService:
    """Follows Riot ID renames so the roster shows current names."""

    def __init__(self, players: PlayerRepositoryInterface, riot: RiotAPIClient):
        self.players = players
        self.riot = riot

    async def refresh(self, player_id: str) -> bool:
        """Check one player's Riot ID.

        :returns: True if the name changed and was saved
        """
        player = await self.players.get_by_id(player_id)
        if player is None:
            return False

        account = await self.riot.get_account_by_puuid(player.region, player.puuid)
        if not account.game_name or account.game_name == player.summoner_name:
            return False

        old_name = player.summoner_name
        player.summoner_name = account.game_name
        player.riot_id = account.riot_id
        await self.players.save(player)

        logger.info(
            "Display name changed",
            player_id=player.id,
            old_name=old_name,
            new_name=account.game_name,
            riot_id=account.riot_id,
        )
        return True
