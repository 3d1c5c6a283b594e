"""
Tests for the stale in-game state reconciler.
"""

import pytest

from bootcamp_tracker.core.enums import GameSessionStatus, PlayerStatus
from bootcamp_tracker.core.riot_api.errors import ServiceUnavailableError
from bootcamp_tracker.features.games.reconciler import StaleStateReconciler
from bootcamp_tracker.features.games.service import GameStateMachine

from conftest import (
    FIXED_NOW,
    FakePlayerRepository,
    active_game,
    make_player,
)


@pytest.fixture
def in_game_players():
    return [
        make_player("ended", status=PlayerStatus.IN_GAME.value, last_game_id="1"),
        make_player("still-playing", status=PlayerStatus.IN_GAME.value, last_game_id="2"),
        make_player("new-game", status=PlayerStatus.IN_GAME.value, last_game_id="3"),
        make_player("flaky", status=PlayerStatus.IN_GAME.value, last_game_id="4"),
        make_player("idle"),
    ]


@pytest.fixture
def reconciler(in_game_players, games, playrates, riot, follow_ups):
    players = FakePlayerRepository(in_game_players)
    machine = GameStateMachine(
        players, games, playrates, riot, follow_ups=follow_ups, clock=lambda: FIXED_NOW
    )
    return StaleStateReconciler(players, machine)


async def seed_sessions(games, in_game_players):
    for player in in_game_players[:4]:
        await games.record_game_start(player, player.last_game_id, FIXED_NOW, {"participants": []})


async def test_reconciler_ends_only_stale_games(reconciler, games, riot, follow_ups, in_game_players):
    await seed_sessions(games, in_game_players)
    ended, still_playing, new_game, flaky, idle = in_game_players
    riot.active_games[still_playing.puuid] = active_game(game_id=2)
    riot.active_games[new_game.puuid] = active_game(game_id=99)
    riot.active_games[flaky.puuid] = ServiceUnavailableError("Server error 503", 503)

    result = await reconciler.run()

    assert (result.checked, result.cleaned, result.failed) == (4, 2, 1)
    assert ended.status == PlayerStatus.IDLE.value
    assert new_game.status == PlayerStatus.IDLE.value
    assert still_playing.status == PlayerStatus.IN_GAME.value
    assert flaky.status == PlayerStatus.IN_GAME.value
    assert games.sessions[("1", "ended")].status == GameSessionStatus.COMPLETED.value
    assert games.sessions[("2", "still-playing")].status == GameSessionStatus.IN_PROGRESS.value
    assert idle.puuid not in riot.active_game_calls


async def test_reconciler_schedules_no_follow_ups(reconciler, games, follow_ups, in_game_players):
    await seed_sessions(games, in_game_players)

    await reconciler.run()

    assert follow_ups.scheduled == []


async def test_unexpected_error_does_not_stop_sweep(reconciler, games, riot, in_game_players):
    await seed_sessions(games, in_game_players)
    ended, still_playing, new_game, flaky, idle = in_game_players
    riot.active_games[ended.puuid] = ValueError("malformed spectator payload")
    riot.active_games[still_playing.puuid] = active_game(game_id=2)
    riot.active_games[flaky.puuid] = active_game(game_id=4)

    result = await reconciler.run()

    assert (result.checked, result.cleaned, result.failed) == (4, 1, 1)
    assert ended.status == PlayerStatus.IN_GAME.value
    assert new_game.status == PlayerStatus.IDLE.value
    assert games.sessions[("3", "new-game")].status == GameSessionStatus.COMPLETED.value
