"""Repository for game sessions and the game start/end transitions.

A transition writes the player's live state and the game session in one
transaction; neither write is ever visible without the other.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

import structlog
from sqlalchemy import select, update, func
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from bootcamp_tracker.core.enums import GameSessionStatus, PlayerStatus
from bootcamp_tracker.features.players.orm_models import TrackedPlayerORM
from .orm_models import GAME_PLAYER_CONSTRAINT, GameSessionORM

logger = structlog.get_logger(__name__)


class GameRepositoryInterface(ABC):
    """Interface for game session storage and atomic transitions."""

    @abstractmethod
    async def get_session(
        self, external_game_id: str, player_id: str
    ) -> Optional[GameSessionORM]:
        """Game session by its natural key."""
        pass

    @abstractmethod
    async def record_game_start(
        self,
        player: TrackedPlayerORM,
        external_game_id: str,
        started_at: datetime,
        enriched_roster: dict[str, Any],
    ) -> None:
        """Mark the player in game and upsert the session, atomically.

        :param player: Player entering the game
        :param external_game_id: Spectator game id
        :param started_at: Game start time reported by the spectator API
        :param enriched_roster: Participants with rank and inferred role
        """
        pass

    @abstractmethod
    async def resume_game(self, player: TrackedPlayerORM, external_game_id: str) -> None:
        """Put a drifted player back in an already recorded game, atomically."""
        pass

    @abstractmethod
    async def record_game_end(self, player: TrackedPlayerORM, ended_at: datetime) -> int:
        """Mark the player idle and complete the session, atomically.

        :param player: Player whose ``last_game_id`` game ended
        :param ended_at: When the end was observed
        :returns: Number of sessions completed
        """
        pass

    @abstractmethod
    async def save_match_detail(
        self, player_id: str, external_game_id: str, match_detail: dict[str, Any]
    ) -> bool:
        """Attach the post-game match record; False when no session exists."""
        pass


class SQLAlchemyGameRepository(GameRepositoryInterface):
    """SQLAlchemy implementation of the game repository."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session.

        :param db: Async database session
        """
        self.db = db

    async def get_session(
        self, external_game_id: str, player_id: str
    ) -> Optional[GameSessionORM]:
        stmt = select(GameSessionORM).where(
            GameSessionORM.external_game_id == external_game_id,
            GameSessionORM.tracked_player_id == player_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def record_game_start(
        self,
        player: TrackedPlayerORM,
        external_game_id: str,
        started_at: datetime,
        enriched_roster: dict[str, Any],
    ) -> None:
        stmt = insert(GameSessionORM).values(
            external_game_id=external_game_id,
            tracked_player_id=player.id,
            started_at=started_at,
            status=GameSessionStatus.IN_PROGRESS.value,
            enriched_roster=enriched_roster,
        )
        stmt = stmt.on_conflict_do_update(
            constraint=GAME_PLAYER_CONSTRAINT,
            set_={
                "status": GameSessionStatus.IN_PROGRESS.value,
                "ended_at": None,
                # A roster already written for this game is kept
                "enriched_roster": func.coalesce(
                    GameSessionORM.enriched_roster, stmt.excluded.enriched_roster
                ),
            },
        )

        try:
            player.status = PlayerStatus.IN_GAME.value
            player.last_game_id = external_game_id
            self.db.add(player)
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "game_start_recorded",
            player_id=player.id,
            game_id=external_game_id,
            participants=len(enriched_roster.get("participants", [])),
        )

    async def resume_game(self, player: TrackedPlayerORM, external_game_id: str) -> None:
        stmt = (
            update(GameSessionORM)
            .where(
                GameSessionORM.external_game_id == external_game_id,
                GameSessionORM.tracked_player_id == player.id,
            )
            .values(status=GameSessionStatus.IN_PROGRESS.value, ended_at=None)
        )

        try:
            player.status = PlayerStatus.IN_GAME.value
            player.last_game_id = external_game_id
            self.db.add(player)
            await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("game_resumed", player_id=player.id, game_id=external_game_id)

    async def record_game_end(self, player: TrackedPlayerORM, ended_at: datetime) -> int:
        stmt = (
            update(GameSessionORM)
            .where(
                GameSessionORM.external_game_id == player.last_game_id,
                GameSessionORM.tracked_player_id == player.id,
                GameSessionORM.status == GameSessionStatus.IN_PROGRESS.value,
            )
            .values(status=GameSessionStatus.COMPLETED.value, ended_at=ended_at)
        )

        try:
            player.status = PlayerStatus.IDLE.value
            self.db.add(player)
            result = await self.db.execute(stmt)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        completed = result.rowcount or 0
        logger.info(
            "game_end_recorded",
            player_id=player.id,
            game_id=player.last_game_id,
            sessions_completed=completed,
        )
        return completed

    async def save_match_detail(
        self, player_id: str, external_game_id: str, match_detail: dict[str, Any]
    ) -> bool:
        stmt = (
            update(GameSessionORM)
            .where(
                GameSessionORM.external_game_id == external_game_id,
                GameSessionORM.tracked_player_id == player_id,
            )
            .values(match_detail=match_detail)
        )
        result = await self.db.execute(stmt)
        await self.db.commit()
        return bool(result.rowcount)
