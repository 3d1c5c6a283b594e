"""Riot API integration for the tracker worker."""

from .client import RiotAPIClient
from .constants import Platform, Region, SummonerSpell, routing_region
from .endpoints import match_id_for_game
from .errors import (
    UpstreamAPIError,
    RiotAPIError,
    RateLimitError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    ServiceUnavailableError,
    BadRequestError,
)
from .models import AccountDTO, ActiveGameDTO, ActiveGameParticipantDTO, LeagueEntryDTO
from .rate_limiter import ReservoirLimiter, RiotRateLimiter

__all__ = [
    "RiotAPIClient",
    "Platform",
    "Region",
    "SummonerSpell",
    "routing_region",
    "match_id_for_game",
    "UpstreamAPIError",
    "RiotAPIError",
    "RateLimitError",
    "AuthenticationError",
    "ForbiddenError",
    "NotFoundError",
    "ServiceUnavailableError",
    "BadRequestError",
    "AccountDTO",
    "ActiveGameDTO",
    "ActiveGameParticipantDTO",
    "LeagueEntryDTO",
    "ReservoirLimiter",
    "RiotRateLimiter",
]
