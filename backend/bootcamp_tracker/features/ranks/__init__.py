"""Current and peak rank tracking."""

from .scoring import (
    RankSnapshot,
    TRACKED_QUEUES,
    rank_score,
    next_peak,
    decide_current,
)

__all__ = [
    "RankSnapshot",
    "TRACKED_QUEUES",
    "rank_score",
    "next_peak",
    "decide_current",
]
