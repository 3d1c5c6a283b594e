"""SQLAlchemy model for Twitch streams of tracked players."""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    DateTime as SQLDateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from bootcamp_tracker.core.models import SCHEMA, Base

TWITCH_CHANNEL_URL = "https://www.twitch.tv/{login}"


class StreamSessionORM(Base):
    """One stream broadcast by a tracked player."""

    __tablename__ = "stream_sessions"
    __table_args__ = (
        Index("idx_stream_sessions_player_live", "tracked_player_id", "live"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)

    tracked_player_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey(f"{SCHEMA}.tracked_players.id", ondelete="CASCADE"),
        nullable=False,
    )

    twitch_user_id: Mapped[str] = mapped_column(String(32), nullable=False)
    stream_url: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    live: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    started_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True), nullable=True
    )
    ended_at: Mapped[Optional[datetime]] = mapped_column(
        SQLDateTime(timezone=True), nullable=True
    )
    last_checked: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        comment="Last time Twitch was asked about this stream",
    )

    def mark_live(
        self, title: Optional[str], started_at: datetime, checked_at: datetime
    ) -> None:
        self.live = True
        self.title = title
        self.started_at = started_at
        self.ended_at = None
        self.last_checked = checked_at

    def mark_offline(self, checked_at: datetime) -> None:
        self.live = False
        self.ended_at = checked_at
        self.last_checked = checked_at
