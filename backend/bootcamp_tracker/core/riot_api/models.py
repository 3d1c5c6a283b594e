"""Pydantic models for Riot API response data."""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class AccountDTO(BaseModel):
    """Riot Account information."""

    puuid: str
    game_name: Optional[str] = Field(None, alias="gameName")
    tag_line: Optional[str] = Field(None, alias="tagLine")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def riot_id(self) -> str:
        return f"{self.game_name}#{self.tag_line}"


class LeagueEntryDTO(BaseModel):
    """One ranked queue standing for a player."""

    queue_type: str = Field(..., alias="queueType")
    tier: Optional[str] = None
    rank: Optional[str] = None
    league_points: int = Field(0, alias="leaguePoints")
    wins: int = 0
    losses: int = 0
    puuid: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ActiveGameParticipantDTO(BaseModel):
    """Participant of a live game (spectator v5)."""

    puuid: Optional[str] = None
    summoner_id: Optional[str] = Field(None, alias="summonerId")
    summoner_name: Optional[str] = Field(None, alias="summonerName")
    riot_id: Optional[str] = Field(None, alias="riotId")
    champion_id: int = Field(..., alias="championId")
    spell1_id: int = Field(0, alias="spell1Id")
    spell2_id: int = Field(0, alias="spell2Id")
    team_id: int = Field(..., alias="teamId")
    bot: bool = False

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @property
    def spells(self) -> tuple[int, int]:
        return (self.spell1_id, self.spell2_id)


class ActiveGameDTO(BaseModel):
    """Live game a player is currently in."""

    game_id: int = Field(..., alias="gameId")
    game_mode: Optional[str] = Field(None, alias="gameMode")
    game_type: Optional[str] = Field(None, alias="gameType")
    game_queue_config_id: Optional[int] = Field(None, alias="gameQueueConfigId")
    game_start_time: int = Field(0, alias="gameStartTime")
    game_length: int = Field(0, alias="gameLength")
    platform_id: Optional[str] = Field(None, alias="platformId")
    participants: List[ActiveGameParticipantDTO] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True, extra="allow")
