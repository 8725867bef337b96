"""Double round-robin fixture generation (circle method)."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, TypeVar

from .exceptions import ValidationError


class Bye(Enum):
    """Rotation filler for odd rosters. Never leaves this module."""

    BYE = "bye"


BYE = Bye.BYE


@dataclass(frozen=True)
class Entrant:
    user_id: str
    team_id: str | None = None


Slot = Entrant | Bye


@dataclass(frozen=True)
class Fixture:
    matchday: int
    home: Entrant
    away: Entrant

    def mirrored(self, matchday: int) -> "Fixture":
        return Fixture(matchday=matchday, home=self.away, away=self.home)


def _rotation(entrants: Sequence[Entrant]) -> list[Slot]:
    rotation: list[Slot] = list(entrants)
    if len(rotation) % 2:
        rotation.append(BYE)
    return rotation


def single_round_robin(entrants: Sequence[Entrant]) -> list[list[tuple[Entrant, Entrant]]]:
    """Return one list of (home, away) pairs per round.

    The first slot stays fixed; after every round the last slot is moved to
    index 1. Pairs touching the bye are dropped, so with an odd roster one
    entrant sits out each round.
    """
    rotation = _rotation(entrants)
    size = len(rotation)
    rounds: list[list[tuple[Entrant, Entrant]]] = []

    for round_index in range(size - 1):
        pairs: list[tuple[Entrant, Entrant]] = []
        for pair_index in range(size // 2):
            first = rotation[pair_index]
            second = rotation[size - 1 - pair_index]
            if first is BYE or second is BYE:
                continue
            # Alternate sides so the fixed slot is not at home every round.
            if (round_index + pair_index) % 2 == 0:
                first, second = second, first
            pairs.append((first, second))
        rounds.append(pairs)
        rotation.insert(1, rotation.pop())

    return rounds


def build_entrants(
    user_ids: Sequence[str],
    team_by_user: Mapping[str, str] | None = None,
) -> list[Entrant]:
    if len(user_ids) < 2:
        raise ValidationError(f"At least 2 participants are required, got {len(user_ids)}.")
    if len(set(user_ids)) != len(user_ids):
        raise ValidationError("Participant list contains duplicates.")

    team_by_user = team_by_user or {}
    return [Entrant(user_id=user_id, team_id=team_by_user.get(user_id)) for user_id in user_ids]


def generate_fixtures(
    user_ids: Sequence[str],
    team_by_user: Mapping[str, str] | None = None,
) -> list[Fixture]:
    """Build the full double round-robin for ``user_ids``.

    Matchdays run 1..2*(size-1) where size is the roster rounded up to even.
    The second leg repeats the first with sides (and teams) swapped, offset by
    the number of first-leg rounds.
    """
    entrants = build_entrants(user_ids, team_by_user)
    rounds = single_round_robin(entrants)
    first_leg_rounds = len(rounds)

    first_leg = [
        Fixture(matchday=round_no, home=home, away=away)
        for round_no, pairs in enumerate(rounds, start=1)
        for home, away in pairs
    ]
    second_leg = [fixture.mirrored(fixture.matchday + first_leg_rounds) for fixture in first_leg]

    return first_leg + second_leg


class _HasMatchday(Protocol):
    matchday: int


M = TypeVar("M", bound=_HasMatchday)


def group_by_matchday(matches: Iterable[M]) -> dict[int, list[M]]:
    grouped: dict[int, list[M]] = {}
    for match in sorted(matches, key=lambda item: item.matchday):
        grouped.setdefault(match.matchday, []).append(match)
    return grouped
