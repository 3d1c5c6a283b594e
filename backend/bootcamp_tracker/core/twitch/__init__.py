"""Twitch integration (stream liveness)."""

from .client import TwitchAPIClient, TwitchAPIError, TwitchStreamDTO

__all__ = ["TwitchAPIClient", "TwitchAPIError", "TwitchStreamDTO"]
