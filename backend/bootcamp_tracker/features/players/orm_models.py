"""SQLAlchemy 2.0 ORM model for tracked players with Rich Domain Model pattern.

Rank snapshots are embedded as per-queue column groups; the ORM maps them
to and from ``RankSnapshot`` values so the rank rules never touch columns.
"""

import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime as SQLDateTime,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from bootcamp_tracker.core.enums import PlayerStatus, QueueType
from bootcamp_tracker.core.models import Base
from bootcamp_tracker.features.ranks.scoring import RankSnapshot

QUEUE_COLUMN_PREFIX = {
    QueueType.RANKED_SOLO_5x5: "solo",
    QueueType.RANKED_FLEX_SR: "flex",
}


class TrackedPlayerORM(Base):
    """A roster member whose games, ranks and stream are being tracked."""

    __tablename__ = "tracked_players"
    __table_args__ = (
        Index("idx_tracked_players_window", "start_date", "planned_end_date"),
        Index("idx_tracked_players_status", "status"),
    )

    # ========================================================================
    # IDENTITY
    # ========================================================================

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Roster id",
    )

    puuid: Mapped[str] = mapped_column(
        String(78),
        nullable=False,
        unique=True,
        comment="Player's universally unique identifier from Riot API",
    )

    riot_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Riot ID as gameName#tagLine",
    )

    summoner_name: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="Display name (Riot ID game name)",
    )

    region: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment="Platform the account plays on (e.g. euw1, kr)",
    )

    twitch_login: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    twitch_user_id: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # ========================================================================
    # LIFECYCLE WINDOW
    # ========================================================================

    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    planned_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    actual_end_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        comment="Set when the bootcamp ended early or was extended",
    )

    # ========================================================================
    # LIVE STATE (written only by game state transitions)
    # ========================================================================

    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=PlayerStatus.IDLE.value,
        server_default=PlayerStatus.IDLE.value,
    )

    last_game_id: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        comment="Spectator game id of the most recently detected game",
    )

    # ========================================================================
    # CURRENT RANK
    # ========================================================================

    solo_tier: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    solo_division: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    solo_league_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    solo_wins: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    solo_losses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    flex_tier: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    flex_division: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    flex_league_points: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    flex_wins: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    flex_losses: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    rank_updated_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=True,
        comment="Last successful current-rank lookup",
    )

    # ========================================================================
    # PEAK RANK
    # ========================================================================

    peak_solo_tier: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    peak_solo_division: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    peak_solo_league_points: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )

    peak_flex_tier: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    peak_flex_division: Mapped[Optional[str]] = mapped_column(String(4), nullable=True)
    peak_flex_league_points: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True
    )

    peak_updated_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True), nullable=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    # ========================================================================
    # RICH DOMAIN MODEL - Business Logic Methods
    # ========================================================================

    def is_tracking_active(self, today: date) -> bool:
        """Whether the bootcamp window covers ``today``.

        An actual end date, when set, replaces the planned one.
        """
        end_date = self.actual_end_date or self.planned_end_date
        return self.start_date <= today <= end_date

    @property
    def has_twitch(self) -> bool:
        return bool(self.twitch_user_id and self.twitch_login)

    @property
    def is_in_game(self) -> bool:
        return self.status == PlayerStatus.IN_GAME.value

    def get_current(self, queue: QueueType) -> Optional[RankSnapshot]:
        prefix = QUEUE_COLUMN_PREFIX[queue]
        tier = getattr(self, f"{prefix}_tier")
        if not tier:
            return None
        return RankSnapshot(
            tier=tier,
            division=getattr(self, f"{prefix}_division"),
            league_points=getattr(self, f"{prefix}_league_points") or 0,
            wins=getattr(self, f"{prefix}_wins"),
            losses=getattr(self, f"{prefix}_losses"),
        )

    def set_current(self, queue: QueueType, snapshot: Optional[RankSnapshot]) -> None:
        """Overwrite (or clear, with ``None``) the current rank for a queue."""
        prefix = QUEUE_COLUMN_PREFIX[queue]
        setattr(self, f"{prefix}_tier", snapshot.tier if snapshot else None)
        setattr(self, f"{prefix}_division", snapshot.division if snapshot else None)
        setattr(
            self, f"{prefix}_league_points", snapshot.league_points if snapshot else None
        )
        setattr(self, f"{prefix}_wins", snapshot.wins if snapshot else None)
        setattr(self, f"{prefix}_losses", snapshot.losses if snapshot else None)

    def get_peak(self, queue: QueueType) -> Optional[RankSnapshot]:
        prefix = QUEUE_COLUMN_PREFIX[queue]
        tier = getattr(self, f"peak_{prefix}_tier")
        if not tier:
            return None
        return RankSnapshot(
            tier=tier,
            division=getattr(self, f"peak_{prefix}_division"),
            league_points=getattr(self, f"peak_{prefix}_league_points") or 0,
        )

    def set_peak(self, queue: QueueType, snapshot: RankSnapshot) -> None:
        prefix = QUEUE_COLUMN_PREFIX[queue]
        setattr(self, f"peak_{prefix}_tier", snapshot.tier)
        setattr(self, f"peak_{prefix}_division", snapshot.division)
        setattr(self, f"peak_{prefix}_league_points", snapshot.league_points)

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<TrackedPlayerORM(id='{self.id}', "
            f"summoner_name='{self.summoner_name}', "
            f"region='{self.region}', status='{self.status}')>"
        )
