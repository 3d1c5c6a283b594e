"""Tracked player roster."""

from .orm_models import TrackedPlayerORM
from .repository import PlayerRepositoryInterface, SQLAlchemyPlayerRepository

__all__ = [
    "TrackedPlayerORM",
    "PlayerRepositoryInterface",
    "SQLAlchemyPlayerRepository",
]
