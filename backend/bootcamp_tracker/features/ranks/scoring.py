"""Rank scoring and the current/peak update rules.

Everything here is pure: callers pass the stored snapshot and the fresh
observation, and get back what should be persisted.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from bootcamp_tracker.core.enums import QueueType, Tier
from bootcamp_tracker.core.riot_api.models import LeagueEntryDTO

# Tier members compare and hash like their string values, so raw API tiers look up directly
TIER_ORDER = {
    Tier.CHALLENGER: 8,
    Tier.GRANDMASTER: 7,
    Tier.MASTER: 6,
    Tier.DIAMOND: 5,
    Tier.EMERALD: 4,
    Tier.PLATINUM: 3,
    Tier.GOLD: 2,
    Tier.SILVER: 1,
    Tier.BRONZE: 0,
    Tier.IRON: -1,
}

DIVISION_ORDER = {"I": 4, "II": 3, "III": 2, "IV": 1}

# Master and above have no divisions
APEX_TIER_MIN = TIER_ORDER[Tier.MASTER]

NO_PEAK_SCORE = -1

TRACKED_QUEUES = (QueueType.RANKED_SOLO_5x5, QueueType.RANKED_FLEX_SR)


@dataclass(frozen=True)
class RankSnapshot:
    """Ranked standing in one queue at one point in time."""

    tier: str
    division: Optional[str] = None
    league_points: int = 0
    wins: Optional[int] = None
    losses: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: LeagueEntryDTO) -> "RankSnapshot":
        return cls(
            tier=entry.tier or "",
            division=entry.rank,
            league_points=entry.league_points or 0,
            wins=entry.wins,
            losses=entry.losses,
        )

    @property
    def score(self) -> int:
        return rank_score(self.tier, self.division, self.league_points)

    def __str__(self) -> str:
        if TIER_ORDER.get(self.tier.upper(), 0) >= APEX_TIER_MIN:
            return f"{self.tier} {self.league_points}LP"
        return f"{self.tier} {self.division} {self.league_points}LP"


def rank_score(tier: Optional[str], division: Optional[str], league_points: Optional[int]) -> int:
    """Comparable score for a ranked standing.

    ``tier*1000 + division*100 + lp``; apex tiers drop the division term.
    Unknown tiers and divisions count as 0.
    """
    tier_value = TIER_ORDER.get((tier or "").upper(), 0)
    lp = league_points or 0
    if tier_value >= APEX_TIER_MIN:
        return tier_value * 1000 + lp
    division_value = DIVISION_ORDER.get((division or "").upper(), 0)
    return tier_value * 1000 + division_value * 100 + lp


def find_queue_entry(
    entries: Iterable[LeagueEntryDTO], queue: QueueType
) -> Optional[LeagueEntryDTO]:
    for entry in entries:
        if entry.queue_type == queue.value:
            return entry
    return None


def next_peak(
    stored_peak: Optional[RankSnapshot], observed: Optional[RankSnapshot]
) -> Optional[RankSnapshot]:
    """New peak to persist, or None when the stored peak stands.

    The peak only moves when the observed score is strictly greater, so it
    never decreases.
    """
    if observed is None or not observed.tier:
        return None
    stored_score = stored_peak.score if stored_peak else NO_PEAK_SCORE
    if observed.score > stored_score:
        return RankSnapshot(
            tier=observed.tier,
            division=observed.division,
            league_points=observed.league_points,
        )
    return None


@dataclass(frozen=True)
class CurrentRankDecision:
    """Outcome of the current-rank rule for one queue."""

    write: bool
    snapshot: Optional[RankSnapshot] = None

    @classmethod
    def keep(cls) -> "CurrentRankDecision":
        return cls(write=False)


def decide_current(
    stored: Optional[RankSnapshot],
    observed: Optional[RankSnapshot],
    previously_checked: bool,
) -> CurrentRankDecision:
    """Apply the current-rank rule to one queue.

    A present entry always overwrites. A missing entry only clears the
    snapshot on a first-ever observation, so an established rank survives
    an ambiguous "not ranked" answer.
    """
    if observed is not None:
        return CurrentRankDecision(write=True, snapshot=observed)
    if stored is None or not previously_checked:
        return CurrentRankDecision(write=True, snapshot=None)
    return CurrentRankDecision.keep()
