"""
Tests for rank scoring and the current/peak rules.
"""

from bootcamp_tracker.core.enums import Tier
from bootcamp_tracker.features.ranks.scoring import (
    NO_PEAK_SCORE,
    TIER_ORDER,
    RankSnapshot,
    decide_current,
    next_peak,
    rank_score,
)


class TestRankScore:
    def test_divisioned_tier(self):
        # GOLD=2, II=3
        assert rank_score("GOLD", "II", 40) == 2340

    def test_apex_tiers_ignore_division(self):
        assert rank_score("MASTER", "I", 120) == 6120
        assert rank_score("MASTER", None, 120) == 6120
        assert rank_score("CHALLENGER", "I", 900) == 8900

    def test_ordering(self):
        assert rank_score("GOLD", "I", 0) > rank_score("GOLD", "II", 99)
        assert rank_score("PLATINUM", "IV", 0) > rank_score("GOLD", "I", 99)
        assert rank_score("GRANDMASTER", "I", 0) > rank_score("MASTER", "I", 999)

    def test_case_insensitive(self):
        assert rank_score("gold", "ii", 40) == rank_score("GOLD", "II", 40)

    def test_snapshot_str(self):
        assert str(RankSnapshot("GOLD", "II", 40)) == "GOLD II 40LP"
        assert str(RankSnapshot("MASTER", "I", 12)) == "MASTER 12LP"


class TestNextPeak:
    def test_first_observation_becomes_peak(self):
        observed = RankSnapshot("SILVER", "I", 10, wins=3, losses=2)
        peak = next_peak(None, observed)
        assert peak == RankSnapshot("SILVER", "I", 10)

    def test_lower_observation_keeps_peak(self):
        stored = RankSnapshot("GOLD", "II", 40)
        assert next_peak(stored, RankSnapshot("GOLD", "III", 90)) is None

    def test_equal_score_keeps_peak(self):
        stored = RankSnapshot("GOLD", "II", 40)
        assert next_peak(stored, RankSnapshot("GOLD", "II", 40)) is None

    def test_missing_observation_keeps_peak(self):
        assert next_peak(RankSnapshot("GOLD", "II", 40), None) is None

    def test_peak_is_monotonic_over_a_sequence_of_polls(self):
        """Peak score never decreases, whatever the ladder does."""
        observations = [
            RankSnapshot("SILVER", "II", 50),
            RankSnapshot("GOLD", "IV", 0),
            None,
            RankSnapshot("SILVER", "I", 99),
            RankSnapshot("GOLD", "III", 20),
            RankSnapshot("GOLD", "III", 10),
            RankSnapshot("PLATINUM", "IV", 0),
            RankSnapshot("GOLD", "I", 75),
        ]
        peak = None
        scores = []
        for observed in observations:
            moved = next_peak(peak, observed)
            if moved is not None:
                peak = moved
            scores.append(peak.score if peak else NO_PEAK_SCORE)

        assert scores == sorted(scores)
        assert peak == RankSnapshot("PLATINUM", "IV", 0)


class TestDecideCurrent:
    def test_present_entry_overwrites(self):
        observed = RankSnapshot("GOLD", "I", 5)
        decision = decide_current(RankSnapshot("GOLD", "II", 40), observed, True)
        assert decision.write
        assert decision.snapshot == observed

    def test_first_check_not_found_writes_null(self):
        decision = decide_current(None, None, previously_checked=False)
        assert decision.write
        assert decision.snapshot is None

    def test_established_rank_survives_missing_entry(self):
        decision = decide_current(RankSnapshot("GOLD", "II", 40), None, True)
        assert not decision.write


def test_every_tier_has_an_ordinal():
    assert set(TIER_ORDER) == set(Tier)
    assert TIER_ORDER["GOLD"] == TIER_ORDER[Tier.GOLD] == 2
