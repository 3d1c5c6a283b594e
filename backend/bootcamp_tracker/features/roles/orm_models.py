"""SQLAlchemy model for per-champion role play rates."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime as SQLDateTime, Float, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from bootcamp_tracker.core.enums import Role
from bootcamp_tracker.core.models import Base

DEFAULT_ROLE_RATE = 25.0


class ChampionPlayrateORM(Base):
    """How often a champion is played in each role, in percent."""

    __tablename__ = "champion_playrates"

    champion_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
        comment="Champion id from Community Dragon",
    )

    top_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    jungle_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    mid_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    adc_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    support_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    patch: Mapped[Optional[str]] = mapped_column(
        String(16),
        nullable=True,
        comment="Game patch (major.minor) the rates were sampled on",
    )

    updated_at: Mapped[datetime] = mapped_column(
        SQLDateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def rate_for(self, role: Role) -> float:
        """Play rate for a lane role; jungle is decided by Smite, not rates."""
        return {
            Role.TOP: self.top_rate,
            Role.JUNGLE: self.jungle_rate,
            Role.MIDDLE: self.mid_rate,
            Role.BOTTOM: self.adc_rate,
            Role.UTILITY: self.support_rate,
        }[role]

    def __repr__(self) -> str:
        return f"<ChampionPlayrateORM(champion_id={self.champion_id}, patch='{self.patch}')>"
