"""Riot API constants and routing tables."""

from enum import Enum


class Region(str, Enum):
    """Riot API regions for regional routing."""

    AMERICAS = "americas"
    ASIA = "asia"
    EUROPE = "europe"
    SEA = "sea"


class Platform(str, Enum):
    """Riot API platforms a tracked player can live on."""

    BR1 = "br1"
    EUN1 = "eun1"
    EUW1 = "euw1"
    JP1 = "jp1"
    KR = "kr"
    LA1 = "la1"
    LA2 = "la2"
    NA1 = "na1"
    OC1 = "oc1"
    RU = "ru"
    TR1 = "tr1"


PLATFORM_TO_REGION = {
    Platform.KR: Region.ASIA,
    Platform.JP1: Region.ASIA,
    Platform.NA1: Region.AMERICAS,
    Platform.BR1: Region.AMERICAS,
    Platform.LA1: Region.AMERICAS,
    Platform.LA2: Region.AMERICAS,
    Platform.EUW1: Region.EUROPE,
    Platform.EUN1: Region.EUROPE,
    Platform.TR1: Region.EUROPE,
    Platform.RU: Region.EUROPE,
    Platform.OC1: Region.SEA,
}


def routing_region(platform: str) -> Region:
    """Map a platform id (``euw1``) to its regional routing value (``europe``).

    Unknown platforms route to Europe, which is where most tracked players live.
    """
    try:
        return PLATFORM_TO_REGION[Platform(platform.lower())]
    except ValueError:
        return Region.EUROPE


class SummonerSpell(int, Enum):
    """Summoner spell ids used by the role classifier."""

    EXHAUST = 3
    HEAL = 7
    SMITE = 11
    TELEPORT = 12
    IGNITE = 14
