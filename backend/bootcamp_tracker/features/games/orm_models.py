"""SQLAlchemy model for live games detected for tracked players."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime as SQLDateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from bootcamp_tracker.core.enums import GameSessionStatus
from bootcamp_tracker.core.models import SCHEMA, Base

GAME_PLAYER_CONSTRAINT = "uq_game_sessions_game_player"


class GameSessionORM(Base):
    """One tracked player's participation in one live game."""

    __tablename__ = "game_sessions"
    __table_args__ = (
        UniqueConstraint(
            "external_game_id", "tracked_player_id", name=GAME_PLAYER_CONSTRAINT
        ),
        Index("idx_game_sessions_status", "status"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)

    external_game_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Spectator game id",
    )

    tracked_player_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey(f"{SCHEMA}.tracked_players.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    started_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True), nullable=False
    )

    ended_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True), nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=GameSessionStatus.IN_PROGRESS.value,
    )

    enriched_roster: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Live game with participants, rank at game time and inferred roles",
    )

    match_detail: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON,
        nullable=True,
        comment="Match-v5 record fetched after the game ended",
    )

    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    @property
    def is_in_progress(self) -> bool:
        return self.status == GameSessionStatus.IN_PROGRESS.value

    def __repr__(self) -> str:
        return (
            f"<GameSessionORM(external_game_id='{self.external_game_id}', "
            f"tracked_player_id='{self.tracked_player_id}', status='{self.status}')>"
        )
