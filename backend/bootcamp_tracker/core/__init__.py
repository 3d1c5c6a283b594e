"""Core infrastructure module.

This module exports core utilities used across features.
Never imports from features - only from external libraries.
"""

from .config import Settings, get_settings, get_global_settings
from .database import DatabaseManager
from .enums import Tier, QueueType, PlayerStatus, GameSessionStatus, Role
from .models import Base

__all__ = [
    "Settings",
    "get_settings",
    "get_global_settings",
    "DatabaseManager",
    "Tier",
    "QueueType",
    "PlayerStatus",
    "GameSessionStatus",
    "Role",
    "Base",
]
