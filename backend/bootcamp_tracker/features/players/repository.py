"""Repository pattern implementation for the roster.

Provides collection-like access to tracked players. Status and last game id
are not written here; those transitions live in the games repository.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

import structlog
from sqlalchemy import select, and_, func
from sqlalchemy.ext.asyncio import AsyncSession

from bootcamp_tracker.core.enums import PlayerStatus
from .orm_models import TrackedPlayerORM

logger = structlog.get_logger(__name__)


class PlayerRepositoryInterface(ABC):
    """Interface for the tracked player repository."""

    @abstractmethod
    async def get_by_id(self, player_id: str) -> Optional[TrackedPlayerORM]:
        """Get a tracked player by roster id.

        :param player_id: Roster id
        :returns: TrackedPlayerORM if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_eligible_roster(self, today: date) -> list[TrackedPlayerORM]:
        """Players whose bootcamp window covers ``today``.

        :param today: Reference date
        :returns: Eligible players ordered by summoner name
        """
        pass

    @abstractmethod
    async def get_in_game_players(self) -> list[TrackedPlayerORM]:
        """Players persisted as in game, regardless of window."""
        pass

    @abstractmethod
    async def save(self, player: TrackedPlayerORM) -> TrackedPlayerORM:
        """Persist rank, peak or identity changes on a player.

        :param player: Player domain object with changes
        :returns: The same player
        """
        pass


class SQLAlchemyPlayerRepository(PlayerRepositoryInterface):
    """SQLAlchemy implementation of the tracked player repository."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        :param db: Async database session
        """
        self.db = db

    async def get_by_id(self, player_id: str) -> Optional[TrackedPlayerORM]:
        stmt = select(TrackedPlayerORM).where(TrackedPlayerORM.id == player_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_eligible_roster(self, today: date) -> list[TrackedPlayerORM]:
        end_date = func.coalesce(
            TrackedPlayerORM.actual_end_date, TrackedPlayerORM.planned_end_date
        )
        stmt = (
            select(TrackedPlayerORM)
            .where(and_(TrackedPlayerORM.start_date <= today, end_date >= today))
            .order_by(TrackedPlayerORM.summoner_name)
        )
        result = await self.db.execute(stmt)
        players = list(result.scalars().all())

        logger.debug("eligible_roster_retrieved", count=len(players), today=str(today))
        return players

    async def get_in_game_players(self) -> list[TrackedPlayerORM]:
        stmt = select(TrackedPlayerORM).where(
            TrackedPlayerORM.status == PlayerStatus.IN_GAME.value
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def save(self, player: TrackedPlayerORM) -> TrackedPlayerORM:
        self.db.add(player)
        await self.db.commit()
        logger.debug("player_saved", player_id=player.id)
        return player
