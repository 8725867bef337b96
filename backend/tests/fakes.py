import copy
import itertools
from collections.abc import Collection, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from league.scheduling import Fixture

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


@dataclass
class FakeTournament:
    id: str
    name: str
    format: str
    status: str = "Upcoming"
    description: str | None = None
    start_date: date | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    participant_ids: list[str] = field(default_factory=list)
    pool_team_ids: list[str] = field(default_factory=list)


@dataclass
class FakeMatch:
    id: str
    tournament_id: str
    matchday: int
    player_a_id: str
    player_b_id: str
    team_a_id: str | None = None
    team_b_id: str | None = None
    score_a: int | None = None
    score_b: int | None = None
    is_completed: bool = False


@dataclass
class FakeAssignment:
    id: str
    tournament_id: str
    user_id: str
    team_id: str


@dataclass
class FakeChat:
    id: str
    tournament_id: str | None
    text: str


class FakeRepository:
    """In-memory stand-in for ``SqlTournamentRepository``.

    ``atomic()`` snapshots all state and restores it when the block raises,
    which mirrors a session rollback.
    """

    def __init__(self, usernames: dict[str, str] | None = None, teams: dict[str, bool] | None = None) -> None:
        self.tournaments: dict[str, FakeTournament] = {}
        self.matches: dict[str, FakeMatch] = {}
        self.assignments: list[FakeAssignment] = []
        self.chat: list[FakeChat] = []
        self.users = dict(usernames or {})
        # team id -> is_active
        self.teams = dict(teams or {})
        self.commits = 0
        self._depth = 0

    _STATE = ("tournaments", "matches", "assignments", "chat")

    @contextmanager
    def atomic(self) -> Iterator[None]:
        snapshot = None
        if self._depth == 0:
            snapshot = {name: copy.deepcopy(getattr(self, name)) for name in self._STATE}
        self._depth += 1
        try:
            yield
        except Exception:
            if snapshot is not None:
                for name, value in snapshot.items():
                    setattr(self, name, value)
            raise
        else:
            if snapshot is not None:
                self.commits += 1
        finally:
            self._depth -= 1

    # Tournaments

    def list_tournaments(self) -> list[FakeTournament]:
        return list(self.tournaments.values())

    def get_tournament(self, tournament_id: str) -> FakeTournament | None:
        return self.tournaments.get(tournament_id)

    def add_tournament(self, name, format, description=None, start_date=None) -> FakeTournament:
        tournament = FakeTournament(
            id=_next_id("t"),
            name=name,
            format=format,
            description=description,
            start_date=start_date,
        )
        self.tournaments[tournament.id] = tournament
        return tournament

    def set_tournament_status(self, tournament_id: str, status: str) -> None:
        self.tournaments[tournament_id].status = status

    def set_roster(self, tournament_id: str, user_ids: Sequence[str]) -> None:
        self.tournaments[tournament_id].participant_ids = list(user_ids)

    def set_draw_pool(self, tournament_id: str, team_ids: Sequence[str]) -> None:
        self.tournaments[tournament_id].pool_team_ids = list(team_ids)

    def delete_tournament(self, tournament_id: str) -> int:
        self.tournaments.pop(tournament_id, None)
        return self.delete_tournament_records([tournament_id], include_chat=True)

    def tournament_ids(self) -> set[str]:
        return set(self.tournaments)

    # Matches

    def list_matches(self, tournament_id: str) -> list[FakeMatch]:
        found = [match for match in self.matches.values() if match.tournament_id == tournament_id]
        return sorted(found, key=lambda match: match.matchday)

    def get_match(self, match_id: str) -> FakeMatch | None:
        return self.matches.get(match_id)

    def insert_matches(self, tournament_id: str, fixtures: Sequence[Fixture]) -> list[FakeMatch]:
        batch = [
            FakeMatch(
                id=_next_id("m"),
                tournament_id=tournament_id,
                matchday=fixture.matchday,
                player_a_id=fixture.home.user_id,
                player_b_id=fixture.away.user_id,
                team_a_id=fixture.home.team_id,
                team_b_id=fixture.away.team_id,
            )
            for fixture in fixtures
        ]
        for match in batch:
            self.matches[match.id] = match
        return batch

    def set_match_result(self, match_id: str, score_a: int, score_b: int) -> FakeMatch:
        match = self.matches[match_id]
        match.score_a = score_a
        match.score_b = score_b
        match.is_completed = True
        return match

    def clear_match_result(self, match_id: str) -> FakeMatch:
        match = self.matches[match_id]
        match.is_completed = False
        return match

    def list_all_matches(self) -> list[FakeMatch]:
        return list(self.matches.values())

    # Assignments

    def list_assignments(self, tournament_id: str) -> list[FakeAssignment]:
        return [item for item in self.assignments if item.tournament_id == tournament_id]

    def replace_assignments(self, tournament_id: str, pairs: Sequence[tuple[str, str]]) -> list[FakeAssignment]:
        self.assignments = [item for item in self.assignments if item.tournament_id != tournament_id]
        batch = [
            FakeAssignment(id=_next_id("a"), tournament_id=tournament_id, user_id=user_id, team_id=team_id)
            for user_id, team_id in pairs
        ]
        self.assignments.extend(batch)
        return batch

    def list_all_assignments(self) -> list[FakeAssignment]:
        return list(self.assignments)

    def delete_tournament_records(self, tournament_ids: Collection[str], *, include_chat: bool) -> int:
        ids = set(tournament_ids)
        before = len(self.matches) + len(self.assignments)
        self.matches = {key: match for key, match in self.matches.items() if match.tournament_id not in ids}
        self.assignments = [item for item in self.assignments if item.tournament_id not in ids]
        if include_chat:
            self.chat = [message for message in self.chat if message.tournament_id not in ids]
        return before - len(self.matches) - len(self.assignments)

    # Directory

    def usernames(self) -> dict[str, str]:
        return dict(self.users)

    def eligible_team_ids(self, team_ids: Sequence[str]) -> list[str]:
        return [team_id for team_id in team_ids if self.teams.get(team_id)]

    # Helpers for arranging orphaned rows

    def add_orphan_match(self, tournament_id: str) -> FakeMatch:
        match = FakeMatch(id=_next_id("m"), tournament_id=tournament_id, matchday=1, player_a_id="x", player_b_id="y")
        self.matches[match.id] = match
        return match

    def add_orphan_assignment(self, tournament_id: str) -> FakeAssignment:
        assignment = FakeAssignment(id=_next_id("a"), tournament_id=tournament_id, user_id="x", team_id="team-x")
        self.assignments.append(assignment)
        return assignment
