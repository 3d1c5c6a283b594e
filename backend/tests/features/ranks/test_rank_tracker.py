"""
Tests for the rank tracker service.
"""

import pytest

from bootcamp_tracker.core.enums import QueueType
from bootcamp_tracker.core.riot_api.errors import ServiceUnavailableError
from bootcamp_tracker.features.ranks.scoring import RankSnapshot
from bootcamp_tracker.features.ranks.service import RankTracker
from bootcamp_tracker.jobs.error_handling import handle_upstream_errors

from conftest import FIXED_NOW, league_entry

SOLO = QueueType.RANKED_SOLO_5x5
FLEX = QueueType.RANKED_FLEX_SR


@pytest.fixture
def tracker(players, riot):
    return RankTracker(players, riot, clock=lambda: FIXED_NOW)


def establish_gold_two(player):
    player.set_current(SOLO, RankSnapshot("GOLD", "II", 40, wins=20, losses=18))
    player.rank_updated_at = FIXED_NOW


class TestUpdateCurrent:
    async def test_first_not_found_writes_null(self, tracker, players, riot, player):
        """A brand-new player with no league entries gets an explicit null rank."""
        riot.league_entries[player.puuid] = []

        assert await tracker.update_current(player.id) is True

        assert player.get_current(SOLO) is None
        assert player.get_current(FLEX) is None
        assert player.rank_updated_at == FIXED_NOW
        assert players.saved == [player.id]

    async def test_present_entry_overwrites(self, tracker, riot, player):
        establish_gold_two(player)
        riot.league_entries[player.puuid] = [
            league_entry("GOLD", "I", 12),
            league_entry("SILVER", "I", 50, queue=FLEX.value),
        ]

        await tracker.update_current(player.id)

        assert player.get_current(SOLO) == RankSnapshot("GOLD", "I", 12, wins=10, losses=8)
        assert player.get_current(FLEX).tier == "SILVER"

    async def test_missing_entry_keeps_established_rank(self, tracker, riot, player):
        establish_gold_two(player)
        riot.league_entries[player.puuid] = []

        await tracker.update_current(player.id)

        assert str(player.get_current(SOLO)) == "GOLD II 40LP"

    async def test_server_error_preserves_rank(self, tracker, players, riot, player):
        """A 5xx leaves Gold II 40LP untouched and writes nothing."""
        establish_gold_two(player)
        riot.league_entries[player.puuid] = ServiceUnavailableError("Server error 503", 503)

        @handle_upstream_errors(operation="update current rank")
        async def run_job():
            return await tracker.update_current(player.id)

        assert await run_job() is None

        assert str(player.get_current(SOLO)) == "GOLD II 40LP"
        assert players.saved == []

    async def test_unknown_player(self, tracker, riot):
        assert await tracker.update_current("missing") is False
        assert riot.league_calls == []


class TestCheckPeak:
    async def test_first_check_sets_baseline(self, tracker, players, riot, player):
        riot.league_entries[player.puuid] = [league_entry("GOLD", "II", 40)]

        assert await tracker.check_peak(player.id) is True

        assert player.get_peak(SOLO) == RankSnapshot("GOLD", "II", 40)
        assert player.peak_updated_at == FIXED_NOW
        assert players.saved == [player.id]

    async def test_first_check_unranked_still_marks_checked(self, tracker, players, riot, player):
        riot.league_entries[player.puuid] = []

        assert await tracker.check_peak(player.id) is False

        assert player.get_peak(SOLO) is None
        assert player.peak_updated_at == FIXED_NOW
        assert players.saved == [player.id]

    async def test_lower_rank_does_not_move_peak(self, tracker, players, riot, player):
        player.set_peak(SOLO, RankSnapshot("PLATINUM", "IV", 10))
        player.peak_updated_at = FIXED_NOW
        riot.league_entries[player.puuid] = [league_entry("GOLD", "I", 90)]

        assert await tracker.check_peak(player.id) is False

        assert player.get_peak(SOLO) == RankSnapshot("PLATINUM", "IV", 10)
        assert players.saved == []

    async def test_higher_rank_moves_peak(self, tracker, riot, player):
        player.set_peak(SOLO, RankSnapshot("GOLD", "II", 40))
        player.peak_updated_at = FIXED_NOW
        riot.league_entries[player.puuid] = [league_entry("GOLD", "II", 41)]

        assert await tracker.check_peak(player.id) is True
        assert player.get_peak(SOLO).league_points == 41
