"""Riot API endpoint definitions and routing information."""

from typing import Union

from .constants import Platform, Region, routing_region


class RiotAPIEndpoints:
    """URL builders for the endpoints the tracker polls.

    Spectator and league live on the platform host (``euw1``); account and
    match live on the regional routing host (``europe``).
    """

    base_template = "https://{host}.api.riotgames.com"

    def get_platform_url(self, platform: Union[Platform, str]) -> str:
        """Get base URL for platform endpoints."""
        platform_str = platform.value if isinstance(platform, Platform) else platform
        return self.base_template.format(host=platform_str.lower())

    def get_regional_url(self, platform: Union[Platform, str]) -> str:
        """Get base URL for the regional host that serves ``platform``."""
        platform_str = platform.value if isinstance(platform, Platform) else platform
        region: Region = routing_region(platform_str)
        return self.base_template.format(host=region.value)

    # Spectator endpoints (Platform)
    def active_game_by_puuid(self, puuid: str, platform: Union[Platform, str]) -> str:
        platform_url = self.get_platform_url(platform)
        return f"{platform_url}/lol/spectator/v5/active-games/by-summoner/{puuid}"

    # League endpoints (Platform)
    def league_entries_by_puuid(
        self, puuid: str, platform: Union[Platform, str]
    ) -> str:
        platform_url = self.get_platform_url(platform)
        return f"{platform_url}/lol/league/v4/entries/by-puuid/{puuid}"

    # Match endpoints (Regional)
    def match_by_id(self, match_id: str, platform: Union[Platform, str]) -> str:
        base_url = self.get_regional_url(platform)
        return f"{base_url}/lol/match/v5/matches/{match_id}"

    # Account endpoints (Regional)
    def account_by_puuid(self, puuid: str, platform: Union[Platform, str]) -> str:
        base_url = self.get_regional_url(platform)
        return f"{base_url}/riot/account/v1/accounts/by-puuid/{puuid}"


def match_id_for_game(platform: str, game_id: Union[int, str]) -> str:
    """Match-v5 id for a spectator game id, e.g. ``EUW1_7012345678``."""
    return f"{platform.upper()}_{game_id}"
