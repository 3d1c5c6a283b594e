"""Shared enums used across features.

This module provides a single source of truth for enums used in both models and jobs.
"""

from enum import Enum


class Tier(str, Enum):
    """League of Legends rank tiers."""

    IRON = "IRON"
    BRONZE = "BRONZE"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"
    EMERALD = "EMERALD"
    DIAMOND = "DIAMOND"
    MASTER = "MASTER"
    GRANDMASTER = "GRANDMASTER"
    CHALLENGER = "CHALLENGER"


class QueueType(str, Enum):
    """Ranked queues tracked per player."""

    RANKED_SOLO_5x5 = "RANKED_SOLO_5x5"
    RANKED_FLEX_SR = "RANKED_FLEX_SR"


class PlayerStatus(str, Enum):
    """Live status of a tracked player."""

    IDLE = "idle"
    IN_GAME = "in_game"


class GameSessionStatus(str, Enum):
    """Lifecycle of a recorded live game."""

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Role(str, Enum):
    """Lane roles assigned by the role classifier."""

    TOP = "TOP"
    JUNGLE = "JUNGLE"
    MIDDLE = "MIDDLE"
    BOTTOM = "BOTTOM"
    UTILITY = "UTILITY"

    @property
    def display_name(self) -> str:
        """Short label shown next to a participant."""
        return ROLE_DISPLAY_NAMES[self]


ROLE_DISPLAY_NAMES = {
    Role.TOP: "TOP",
    Role.JUNGLE: "JG",
    Role.MIDDLE: "MID",
    Role.BOTTOM: "ADC",
    Role.UTILITY: "SUP",
}
