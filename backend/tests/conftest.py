"""Shared fixtures: in-memory repositories and a scripted Riot API."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

import pytest

from bootcamp_tracker.core.enums import GameSessionStatus, PlayerStatus
from bootcamp_tracker.core.riot_api.errors import NotFoundError
from bootcamp_tracker.core.riot_api.models import (
    AccountDTO,
    ActiveGameDTO,
    LeagueEntryDTO,
)
from bootcamp_tracker.features.games.orm_models import GameSessionORM
from bootcamp_tracker.features.games.repository import GameRepositoryInterface
from bootcamp_tracker.features.players.orm_models import TrackedPlayerORM
from bootcamp_tracker.features.players.repository import PlayerRepositoryInterface
from bootcamp_tracker.features.roles.repository import PlayrateRepositoryInterface
from bootcamp_tracker.features.streams.orm_models import StreamSessionORM
from bootcamp_tracker.features.streams.repository import StreamRepositoryInterface

FIXED_NOW = datetime(2024, 6, 1, 18, 0, tzinfo=timezone.utc)


class FakePlayerRepository(PlayerRepositoryInterface):
    def __init__(self, players: Optional[list[TrackedPlayerORM]] = None):
        self.players = {p.id: p for p in players or []}
        self.saved: list[str] = []

    async def get_by_id(self, player_id):
        return self.players.get(player_id)

    async def get_eligible_roster(self, today):
        return [p for p in self.players.values() if p.is_tracking_active(today)]

    async def get_in_game_players(self):
        return [p for p in self.players.values() if p.is_in_game]

    async def save(self, player):
        self.players[player.id] = player
        self.saved.append(player.id)
        return player


class FakeGameRepository(GameRepositoryInterface):
    """Mirrors the upsert and transition semantics of the SQL repository."""

    def __init__(self):
        self.sessions: dict[tuple[str, str], GameSessionORM] = {}
        self.starts = 0
        self.ends = 0

    async def get_session(self, external_game_id, player_id):
        return self.sessions.get((external_game_id, player_id))

    async def record_game_start(self, player, external_game_id, started_at, enriched_roster):
        self.starts += 1
        key = (external_game_id, player.id)
        existing = self.sessions.get(key)
        if existing is None:
            self.sessions[key] = GameSessionORM(
                external_game_id=external_game_id,
                tracked_player_id=player.id,
                started_at=started_at,
                status=GameSessionStatus.IN_PROGRESS.value,
                enriched_roster=enriched_roster,
            )
        else:
            existing.status = GameSessionStatus.IN_PROGRESS.value
            existing.ended_at = None
            existing.enriched_roster = existing.enriched_roster or enriched_roster
        player.status = PlayerStatus.IN_GAME.value
        player.last_game_id = external_game_id

    async def resume_game(self, player, external_game_id):
        session = self.sessions[(external_game_id, player.id)]
        session.status = GameSessionStatus.IN_PROGRESS.value
        session.ended_at = None
        player.status = PlayerStatus.IN_GAME.value
        player.last_game_id = external_game_id

    async def record_game_end(self, player, ended_at):
        self.ends += 1
        player.status = PlayerStatus.IDLE.value
        session = self.sessions.get((player.last_game_id, player.id))
        if session is None or not session.is_in_progress:
            return 0
        session.status = GameSessionStatus.COMPLETED.value
        session.ended_at = ended_at
        return 1

    async def save_match_detail(self, player_id, external_game_id, match_detail):
        session = self.sessions.get((external_game_id, player_id))
        if session is None:
            return False
        session.match_detail = match_detail
        return True


class FakePlayrateRepository(PlayrateRepositoryInterface):
    def __init__(self, rows=None):
        self.rows = list(rows or [])
        self.snapshots = []

    async def get_all(self):
        return list(self.rows)

    async def upsert_snapshot(self, snapshot):
        self.snapshots.append(snapshot)
        return len(snapshot.rates)


class FakeStreamRepository(StreamRepositoryInterface):
    def __init__(self):
        self.sessions: list[StreamSessionORM] = []

    async def get_latest(self, player_id):
        mine = [s for s in self.sessions if s.tracked_player_id == player_id]
        return mine[-1] if mine else None

    async def get_live(self, player_id):
        return [s for s in self.sessions if s.tracked_player_id == player_id and s.live]

    async def save_all(self, sessions):
        for session in sessions:
            if session not in self.sessions:
                self.sessions.append(session)


class FakeRiotClient:
    """Scripted Riot API: per-puuid live games, league entries and accounts.

    A value that is an exception instance is raised instead of returned.
    """

    def __init__(self):
        self.active_games: dict[str, Any] = {}
        self.league_entries: dict[str, Any] = {}
        self.accounts: dict[str, Any] = {}
        self.matches: dict[str, Any] = {}
        self.league_calls: list[str] = []
        self.active_game_calls: list[str] = []

    @staticmethod
    def _resolve(value):
        if isinstance(value, Exception):
            raise value
        return value

    async def get_active_match(self, region, puuid):
        self.active_game_calls.append(puuid)
        return self._resolve(self.active_games.get(puuid))

    async def get_league_entries(self, region, puuid):
        self.league_calls.append(puuid)
        return self._resolve(self.league_entries.get(puuid, []))

    async def get_account_by_puuid(self, region, puuid):
        value = self.accounts.get(puuid)
        if value is None:
            raise NotFoundError("Resource not found", 404)
        return self._resolve(value)

    async def get_match_by_id(self, region, match_id):
        value = self.matches.get(match_id)
        if value is None:
            raise NotFoundError("Resource not found", 404)
        return self._resolve(value)


class RecordingFollowUps:
    def __init__(self):
        self.scheduled: list[tuple[Any, int, str]] = []

    def schedule_delayed(self, payload, delay_ms, tag):
        self.scheduled.append((payload, delay_ms, tag))
        return f"{payload.job_class.value}:{payload.entity_id}#{tag}"


def make_player(
    player_id: str = "player-1",
    puuid: Optional[str] = None,
    region: str = "euw1",
    status: str = PlayerStatus.IDLE.value,
    last_game_id: Optional[str] = None,
    start_date: Optional[date] = None,
    planned_end_date: Optional[date] = None,
    **extra,
) -> TrackedPlayerORM:
    today = datetime.now(timezone.utc).date()
    return TrackedPlayerORM(
        id=player_id,
        puuid=puuid or f"puuid-{player_id}",
        summoner_name=extra.pop("summoner_name", f"Name {player_id}"),
        region=region,
        status=status,
        last_game_id=last_game_id,
        start_date=start_date or today - timedelta(days=3),
        planned_end_date=planned_end_date or today + timedelta(days=10),
        **extra,
    )


def league_entry(tier, rank, lp, queue="RANKED_SOLO_5x5", wins=10, losses=8):
    return LeagueEntryDTO(
        queueType=queue, tier=tier, rank=rank, leaguePoints=lp, wins=wins, losses=losses
    )


def active_game(game_id=1001, participants=None, start_time=1717264800000):
    return ActiveGameDTO.model_validate(
        {
            "gameId": game_id,
            "gameMode": "CLASSIC",
            "gameType": "MATCHED",
            "gameQueueConfigId": 420,
            "gameStartTime": start_time,
            "platformId": "EUW1",
            "participants": participants if participants is not None else lobby(),
        }
    )


def participant(puuid, champion_id, spell1, spell2, team_id):
    return {
        "puuid": puuid,
        "championId": champion_id,
        "spell1Id": spell1,
        "spell2Id": spell2,
        "teamId": team_id,
        "riotId": f"{puuid}#EUW",
    }


def lobby(tracked_puuid="puuid-player-1"):
    """Ten-player lobby: one Smite per team, classic spells elsewhere."""
    flash, ignite, exhaust, heal, smite, teleport = 4, 14, 3, 7, 11, 12
    blue = [
        participant(tracked_puuid, 86, flash, teleport, 100),
        participant("blue-jg", 64, flash, smite, 100),
        participant("blue-mid", 103, flash, ignite, 100),
        participant("blue-adc", 222, flash, heal, 100),
        participant("blue-sup", 412, flash, exhaust, 100),
    ]
    red = [
        participant("red-top", 122, flash, teleport, 200),
        participant("red-jg", 121, smite, flash, 200),
        participant("red-mid", 61, ignite, flash, 200),
        participant("red-adc", 51, heal, flash, 200),
        participant("red-sup", 117, exhaust, flash, 200),
    ]
    return blue + red


@pytest.fixture
def player():
    return make_player()


@pytest.fixture
def players(player):
    return FakePlayerRepository([player])


@pytest.fixture
def games():
    return FakeGameRepository()


@pytest.fixture
def playrates():
    return FakePlayrateRepository()


@pytest.fixture
def streams():
    return FakeStreamRepository()


@pytest.fixture
def riot():
    return FakeRiotClient()


@pytest.fixture
def follow_ups():
    return RecordingFollowUps()


@pytest.fixture
def account():
    return AccountDTO(puuid="puuid-player-1", gameName="NewName", tagLine="EUW")
