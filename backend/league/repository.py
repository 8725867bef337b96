"""Persistence collaborator for the league engine.

The engine only talks to storage through ``TournamentRepository``. The service
wires in ``SqlTournamentRepository``; tests use an in-memory fake with the same
methods.
"""

from collections.abc import Collection, Iterator, Sequence
from contextlib import AbstractContextManager, contextmanager
from datetime import date, datetime
from typing import Protocol

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from . import models
from .database import new_id
from .exceptions import ValidationError
from .scheduling import Fixture


class TournamentRecord(Protocol):
    id: str
    name: str
    format: str
    status: str
    description: str | None
    start_date: date | None
    created_at: datetime

    @property
    def participant_ids(self) -> list[str]: ...

    @property
    def pool_team_ids(self) -> list[str]: ...


class MatchRecord(Protocol):
    id: str
    tournament_id: str
    matchday: int
    player_a_id: str
    player_b_id: str
    team_a_id: str | None
    team_b_id: str | None
    score_a: int | None
    score_b: int | None
    is_completed: bool


class AssignmentRecord(Protocol):
    id: str
    tournament_id: str
    user_id: str
    team_id: str


class TournamentRepository(Protocol):
    def atomic(self) -> AbstractContextManager[None]: ...

    def list_tournaments(self) -> Sequence[TournamentRecord]: ...
    def get_tournament(self, tournament_id: str) -> TournamentRecord | None: ...
    def add_tournament(
        self,
        name: str,
        format: str,
        description: str | None = None,
        start_date: date | None = None,
    ) -> TournamentRecord: ...
    def set_tournament_status(self, tournament_id: str, status: str) -> None: ...
    def set_roster(self, tournament_id: str, user_ids: Sequence[str]) -> None: ...
    def set_draw_pool(self, tournament_id: str, team_ids: Sequence[str]) -> None: ...
    def delete_tournament(self, tournament_id: str) -> int: ...
    def tournament_ids(self) -> set[str]: ...

    def list_matches(self, tournament_id: str) -> Sequence[MatchRecord]: ...
    def get_match(self, match_id: str) -> MatchRecord | None: ...
    def insert_matches(self, tournament_id: str, fixtures: Sequence[Fixture]) -> list[MatchRecord]: ...
    def set_match_result(self, match_id: str, score_a: int, score_b: int) -> MatchRecord: ...
    def clear_match_result(self, match_id: str) -> MatchRecord: ...
    def list_all_matches(self) -> Sequence[MatchRecord]: ...

    def list_assignments(self, tournament_id: str) -> Sequence[AssignmentRecord]: ...
    def replace_assignments(
        self, tournament_id: str, pairs: Sequence[tuple[str, str]]
    ) -> list[AssignmentRecord]: ...
    def list_all_assignments(self) -> Sequence[AssignmentRecord]: ...

    def delete_tournament_records(self, tournament_ids: Collection[str], *, include_chat: bool) -> int: ...

    def usernames(self) -> dict[str, str]: ...
    def eligible_team_ids(self, team_ids: Sequence[str]) -> list[str]: ...


def _normalize_text(value: str) -> str:
    return " ".join(value.split())


class SqlTournamentRepository:
    """SQLAlchemy-backed repository.

    Writes are flushed, never committed, except by ``atomic()``: an engine
    operation either commits all of its writes together or rolls every one of
    them back.
    """

    def __init__(self, db: Session) -> None:
        self.db = db
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        self._depth += 1
        try:
            yield
        except Exception:
            if self._depth == 1:
                self.db.rollback()
            raise
        else:
            if self._depth == 1:
                self.db.commit()
        finally:
            self._depth -= 1

    # ------------------------------------------------------------------
    # Tournaments
    # ------------------------------------------------------------------

    def _tournament_query(self):
        return self.db.query(models.Tournament).options(
            selectinload(models.Tournament.participants),
            selectinload(models.Tournament.pool),
        )

    def list_tournaments(self) -> list[models.Tournament]:
        return self._tournament_query().order_by(models.Tournament.created_at.desc()).all()

    def get_tournament(self, tournament_id: str) -> models.Tournament | None:
        return self._tournament_query().filter(models.Tournament.id == tournament_id).first()

    def add_tournament(
        self,
        name: str,
        format: str,
        description: str | None = None,
        start_date: date | None = None,
    ) -> models.Tournament:
        tournament = models.Tournament(
            id=new_id(),
            name=_normalize_text(name),
            format=format,
            status=models.TournamentStatus.UPCOMING.value,
            description=description,
            start_date=start_date,
        )
        self.db.add(tournament)
        self.db.flush()
        return tournament

    def set_tournament_status(self, tournament_id: str, status: str) -> None:
        tournament = self.db.get(models.Tournament, tournament_id)
        if tournament is not None:
            tournament.status = status
            self.db.flush()

    def set_roster(self, tournament_id: str, user_ids: Sequence[str]) -> None:
        tournament = self.db.get(models.Tournament, tournament_id)
        # Clear and flush first: re-added users reuse the same primary key.
        tournament.participants.clear()
        self.db.flush()
        tournament.participants.extend(
            models.TournamentParticipant(user_id=user_id, position=position)
            for position, user_id in enumerate(user_ids)
        )
        self.db.flush()

    def set_draw_pool(self, tournament_id: str, team_ids: Sequence[str]) -> None:
        tournament = self.db.get(models.Tournament, tournament_id)
        tournament.pool.clear()
        self.db.flush()
        tournament.pool.extend(models.TournamentPoolTeam(team_id=team_id) for team_id in team_ids)
        self.db.flush()

    def delete_tournament(self, tournament_id: str) -> int:
        tournament = self.db.get(models.Tournament, tournament_id)
        if tournament is not None:
            self.db.delete(tournament)
        deleted = self.delete_tournament_records([tournament_id], include_chat=True)
        self.db.flush()
        return deleted

    def tournament_ids(self) -> set[str]:
        return {row[0] for row in self.db.query(models.Tournament.id).all()}

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------

    def list_matches(self, tournament_id: str) -> list[models.Match]:
        return (
            self.db.query(models.Match)
            .filter(models.Match.tournament_id == tournament_id)
            .order_by(models.Match.matchday.asc())
            .all()
        )

    def get_match(self, match_id: str) -> models.Match | None:
        return self.db.get(models.Match, match_id)

    def insert_matches(self, tournament_id: str, fixtures: Sequence[Fixture]) -> list[models.Match]:
        batch = [
            models.Match(
                id=new_id(),
                tournament_id=tournament_id,
                matchday=fixture.matchday,
                player_a_id=fixture.home.user_id,
                player_b_id=fixture.away.user_id,
                team_a_id=fixture.home.team_id,
                team_b_id=fixture.away.team_id,
                score_a=None,
                score_b=None,
                is_completed=False,
            )
            for fixture in fixtures
        ]
        self.db.add_all(batch)
        self.db.flush()
        return batch

    def set_match_result(self, match_id: str, score_a: int, score_b: int) -> models.Match:
        match = self.db.get(models.Match, match_id)
        match.score_a = score_a
        match.score_b = score_b
        match.is_completed = True
        self.db.flush()
        return match

    def clear_match_result(self, match_id: str) -> models.Match:
        match = self.db.get(models.Match, match_id)
        # Scores stay in place so the last result can be edited after reopening.
        match.is_completed = False
        self.db.flush()
        return match

    def list_all_matches(self) -> list[models.Match]:
        return self.db.query(models.Match).all()

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def list_assignments(self, tournament_id: str) -> list[models.Assignment]:
        return (
            self.db.query(models.Assignment)
            .filter(models.Assignment.tournament_id == tournament_id)
            .all()
        )

    def replace_assignments(
        self, tournament_id: str, pairs: Sequence[tuple[str, str]]
    ) -> list[models.Assignment]:
        self.db.query(models.Assignment).filter(
            models.Assignment.tournament_id == tournament_id
        ).delete()
        self.db.flush()

        batch = [
            models.Assignment(id=new_id(), tournament_id=tournament_id, user_id=user_id, team_id=team_id)
            for user_id, team_id in pairs
        ]
        self.db.add_all(batch)
        self.db.flush()
        return batch

    def list_all_assignments(self) -> list[models.Assignment]:
        return self.db.query(models.Assignment).all()

    # ------------------------------------------------------------------
    # Shared deletion path (cascade and orphan purge)
    # ------------------------------------------------------------------

    def delete_tournament_records(self, tournament_ids: Collection[str], *, include_chat: bool) -> int:
        ids = list(tournament_ids)
        if not ids:
            return 0

        deleted = 0
        for model in (models.Match, models.Assignment):
            deleted += (
                self.db.query(model)
                .filter(model.tournament_id.in_(ids))
                .delete()
            )
        if include_chat:
            self.db.query(models.ChatMessage).filter(
                models.ChatMessage.tournament_id.in_(ids)
            ).delete()
        self.db.flush()
        return deleted

    # ------------------------------------------------------------------
    # Directory and team catalogue
    # ------------------------------------------------------------------

    def usernames(self) -> dict[str, str]:
        return {user_id: username for user_id, username in self.db.query(models.User.id, models.User.username)}

    def eligible_team_ids(self, team_ids: Sequence[str]) -> list[str]:
        if not team_ids:
            return []
        active = {
            row[0]
            for row in self.db.query(models.Team.id)
            .filter(models.Team.id.in_(list(team_ids)), models.Team.is_active.is_(True))
            .all()
        }
        return [team_id for team_id in team_ids if team_id in active]

    def list_users(self) -> list[models.User]:
        return self.db.query(models.User).order_by(models.User.username.asc()).all()

    def get_user(self, user_id: str) -> models.User | None:
        return self.db.get(models.User, user_id)

    def create_user(self, username: str, role: str = "Member") -> models.User:
        name = _normalize_text(username)
        if not name:
            raise ValidationError("Username cannot be empty.")

        existing = (
            self.db.query(models.User)
            .filter(func.lower(models.User.username) == name.lower())
            .first()
        )
        if existing:
            raise ValidationError("Username already taken.")

        user = models.User(id=new_id(), username=name, role=role)
        self.db.add(user)
        self.db.flush()
        return user

    def list_teams(self) -> list[models.Team]:
        return self.db.query(models.Team).order_by(models.Team.type.asc(), models.Team.name.asc()).all()

    def get_team(self, team_id: str) -> models.Team | None:
        return self.db.get(models.Team, team_id)

    def create_team(self, name: str, type: str = models.TeamType.CLUB.value) -> models.Team:
        clean_name = _normalize_text(name)
        if not clean_name:
            raise ValidationError("Team name cannot be empty.")

        existing = (
            self.db.query(models.Team)
            .filter(func.lower(models.Team.name) == clean_name.lower())
            .first()
        )
        if existing:
            raise ValidationError("A team with this name already exists.")

        team = models.Team(id=new_id(), name=clean_name, type=type, is_active=True)
        self.db.add(team)
        self.db.flush()
        return team
