"""Repository for champion play rates."""

from abc import ABC, abstractmethod

import structlog
from sqlalchemy import select, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from bootcamp_tracker.core.enums import Role
from .gateway import PlayrateSnapshot
from .orm_models import ChampionPlayrateORM

logger = structlog.get_logger(__name__)


class PlayrateRepositoryInterface(ABC):
    """Interface for champion playrate storage."""

    @abstractmethod
    async def get_all(self) -> list[ChampionPlayrateORM]:
        """All stored champion play rates."""
        pass

    @abstractmethod
    async def upsert_snapshot(self, snapshot: PlayrateSnapshot) -> int:
        """Insert or overwrite one row per champion.

        :param snapshot: Parsed play rates for one patch
        :returns: Number of champions written
        """
        pass


class SQLAlchemyPlayrateRepository(PlayrateRepositoryInterface):
    """SQLAlchemy implementation of the playrate repository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all(self) -> list[ChampionPlayrateORM]:
        result = await self.db.execute(select(ChampionPlayrateORM))
        return list(result.scalars().all())

    async def upsert_snapshot(self, snapshot: PlayrateSnapshot) -> int:
        if not snapshot.rates:
            return 0

        rows = [
            {
                "champion_id": champion_id,
                "top_rate": rates[Role.TOP],
                "jungle_rate": rates[Role.JUNGLE],
                "mid_rate": rates[Role.MIDDLE],
                "adc_rate": rates[Role.BOTTOM],
                "support_rate": rates[Role.UTILITY],
                "patch": snapshot.patch,
            }
            for champion_id, rates in snapshot.rates.items()
        ]

        stmt = insert(ChampionPlayrateORM).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[ChampionPlayrateORM.champion_id],
            set_={
                "top_rate": stmt.excluded.top_rate,
                "jungle_rate": stmt.excluded.jungle_rate,
                "mid_rate": stmt.excluded.mid_rate,
                "adc_rate": stmt.excluded.adc_rate,
                "support_rate": stmt.excluded.support_rate,
                "patch": stmt.excluded.patch,
                "updated_at": func.now(),
            },
        )
        await self.db.execute(stmt)
        await self.db.commit()

        logger.info("champion_playrates_upserted", count=len(rows), patch=snapshot.patch)
        return len(rows)
