"""Repository for stream sessions."""

from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .orm_models import StreamSessionORM


class StreamRepositoryInterface(ABC):
    """Interface for stream session storage."""

    @abstractmethod
    async def get_latest(self, player_id: str) -> Optional[StreamSessionORM]:
        """Most recent stream session for a player, live or not."""
        pass

    @abstractmethod
    async def get_live(self, player_id: str) -> list[StreamSessionORM]:
        """Stream sessions still flagged live."""
        pass

    @abstractmethod
    async def save_all(self, sessions: list[StreamSessionORM]) -> None:
        pass


class SQLAlchemyStreamRepository(StreamRepositoryInterface):
    """SQLAlchemy implementation of the stream repository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_latest(self, player_id: str) -> Optional[StreamSessionORM]:
        stmt = (
            select(StreamSessionORM)
            .where(StreamSessionORM.tracked_player_id == player_id)
            .order_by(StreamSessionORM.last_checked.desc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_live(self, player_id: str) -> list[StreamSessionORM]:
        stmt = select(StreamSessionORM).where(
            StreamSessionORM.tracked_player_id == player_id,
            StreamSessionORM.live == True,  # noqa: E712
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def save_all(self, sessions: list[StreamSessionORM]) -> None:
        self.db.add_all(sessions)
        await self.db.commit()
