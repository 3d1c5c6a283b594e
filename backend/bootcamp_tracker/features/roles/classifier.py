"""Lane role classification for live game participants.

Smite decides the jungler outright. The other four players on each team get
a probability per lane built from champion play rates and their summoner
spells, then lanes are handed out greedily from the single highest
(player, lane) probability downwards.

The greedy pass is not an optimal matching: ties resolve in scan order
(players in team order, lanes in ``LANE_ROLES`` order), so the same lobby
always classifies the same way.
"""

from typing import Iterable, Mapping, Optional, Protocol, Sequence

import structlog

from bootcamp_tracker.core.enums import Role
from bootcamp_tracker.core.riot_api.constants import SummonerSpell

logger = structlog.get_logger(__name__)

ALL_ROLES = (Role.TOP, Role.JUNGLE, Role.MIDDLE, Role.BOTTOM, Role.UTILITY)

# Candidate lanes once the jungler is known; order is the tie-break order
LANE_ROLES = (Role.TOP, Role.MIDDLE, Role.BOTTOM, Role.UTILITY)

DEFAULT_LANE_RATE = 25.0
FALLBACK_ROLE = Role.MIDDLE

JUNGLE_SPELLS = frozenset({SummonerSpell.SMITE.value})

# (spells, {lane: multiplier}); Ignite also counts towards top like Teleport
SPELL_BONUSES = (
    (frozenset({SummonerSpell.HEAL.value}), {Role.BOTTOM: 3.0}),
    (frozenset({SummonerSpell.EXHAUST.value}), {Role.UTILITY: 2.5}),
    (
        frozenset({SummonerSpell.TELEPORT.value, SummonerSpell.IGNITE.value}),
        {Role.TOP: 2.0},
    ),
    (frozenset({SummonerSpell.IGNITE.value}), {Role.MIDDLE: 1.5, Role.UTILITY: 1.3}),
)

# champion id -> {lane: play rate in percent}
PlayrateTable = Mapping[int, Mapping[Role, float]]


class ClassifiableParticipant(Protocol):
    team_id: int
    champion_id: int
    spells: tuple[int, int]


def _spells(participant: ClassifiableParticipant) -> set[int]:
    return set(participant.spells)


def has_jungle_signal(participant: ClassifiableParticipant) -> bool:
    return bool(_spells(participant) & JUNGLE_SPELLS)


def lane_probabilities(
    participant: ClassifiableParticipant, playrates: PlayrateTable
) -> dict[Role, float]:
    """Per-lane score for one player: champion play rate times spell bonuses."""
    champion_rates = playrates.get(participant.champion_id)
    probabilities = {
        role: (
            champion_rates.get(role, DEFAULT_LANE_RATE)
            if champion_rates is not None
            else DEFAULT_LANE_RATE
        )
        for role in LANE_ROLES
    }

    held = _spells(participant)
    for spells, multipliers in SPELL_BONUSES:
        if held & spells:
            for role, multiplier in multipliers.items():
                probabilities[role] *= multiplier

    return probabilities


def _greedy_assign(
    players: list[int], matrix: dict[int, dict[Role, float]]
) -> dict[int, Role]:
    remaining = list(players)
    open_roles = list(LANE_ROLES)
    assigned: dict[int, Role] = {}

    while remaining and open_roles:
        best_player: Optional[int] = None
        best_role: Optional[Role] = None
        best_probability = -1.0

        for index in remaining:
            for role in open_roles:
                if matrix[index][role] > best_probability:
                    best_probability = matrix[index][role]
                    best_player = index
                    best_role = role

        if best_player is None or best_role is None:
            break

        assigned[best_player] = best_role
        remaining.remove(best_player)
        open_roles.remove(best_role)

    return assigned


def _team_ids(participants: Sequence[ClassifiableParticipant]) -> list[int]:
    seen: list[int] = []
    for participant in participants:
        if participant.team_id not in seen:
            seen.append(participant.team_id)
    return sorted(seen)


def identify_roles(
    participants: Sequence[ClassifiableParticipant],
    playrates: Optional[PlayrateTable] = None,
) -> list[Role]:
    """Assign a lane role to every participant.

    :param participants: Live game participants, both teams
    :param playrates: Champion play rates; empty or None falls back to spell signals only
    :returns: Roles aligned with ``participants`` by index
    """
    playrates = playrates or {}
    roles: list[Optional[Role]] = [None] * len(participants)

    for team_id in _team_ids(participants):
        members = [i for i, p in enumerate(participants) if p.team_id == team_id]

        for index in members:
            if has_jungle_signal(participants[index]):
                roles[index] = Role.JUNGLE

        laners = [index for index in members if roles[index] is None]
        matrix = {
            index: lane_probabilities(participants[index], playrates)
            for index in laners
        }
        for index, role in _greedy_assign(laners, matrix).items():
            roles[index] = role

        # Players left over on a team without a Smite take what the team still lacks
        taken = {roles[index] for index in members}
        missing = [role for role in ALL_ROLES if role not in taken]
        for index in members:
            if roles[index] is None:
                roles[index] = missing.pop(0) if missing else FALLBACK_ROLE

        _validate_team(team_id, [roles[index] for index in members])

    return [role or FALLBACK_ROLE for role in roles]


def _validate_team(team_id: int, team_roles: Iterable[Optional[Role]]) -> bool:
    team_roles = list(team_roles)
    if len(team_roles) == len(ALL_ROLES) and set(team_roles) == set(ALL_ROLES):
        return True

    logger.warning(
        "Team role assignment is not a full set of lanes",
        team_id=team_id,
        roles=[role.value if role else None for role in team_roles],
    )
    return False


def playrate_table(rows: Iterable) -> dict[int, dict[Role, float]]:
    """Build the classifier's lookup table from ChampionPlayrate rows."""
    return {
        row.champion_id: {role: row.rate_for(role) for role in LANE_ROLES}
        for row in rows
    }
