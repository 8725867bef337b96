"""Tournament lifecycle: Upcoming -> Active -> Finished.

Roster, draw pool and team draw can only change while a tournament is
Upcoming. Generating fixtures moves it to Active; it can be finished once every
match has a result. Reset takes an Active (or Upcoming) tournament back to
Upcoming and discards its matches and draw. Nothing leaves Finished.
"""

import logging
import random
from collections.abc import Sequence
from datetime import date

from . import schemas, scheduling, standings
from .exceptions import (
    DrawRequiredError,
    LockedTournamentError,
    NotFoundError,
    PreconditionError,
    ValidationError,
)
from .lottery import draw_teams
from .models import TournamentFormat, TournamentStatus
from .repository import AssignmentRecord, MatchRecord, TournamentRecord, TournamentRepository

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


def _dedupe(values: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(value for value in values if value))


class TournamentLifecycle:
    def __init__(self, repo: TournamentRepository, rng: random.Random | None = None) -> None:
        self.repo = repo
        self.rng = rng

    # ------------------------------------------------------------------
    # Lookups and guards
    # ------------------------------------------------------------------

    def get(self, tournament_id: str) -> TournamentRecord:
        tournament = self.repo.get_tournament(tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament", tournament_id)
        return tournament

    def _require_upcoming(self, tournament: TournamentRecord, action: str) -> None:
        if tournament.status == TournamentStatus.FINISHED:
            raise LockedTournamentError(tournament.id)
        if tournament.status != TournamentStatus.UPCOMING:
            raise PreconditionError(
                f"Cannot {action} while the tournament is {tournament.status}; reset it first.",
                tournament_id=tournament.id,
            )

    # ------------------------------------------------------------------
    # Setup while Upcoming
    # ------------------------------------------------------------------

    def create_tournament(
        self,
        name: str,
        format: str = TournamentFormat.USERS_ONLY.value,
        *,
        description: str | None = None,
        start_date: date | None = None,
        participant_ids: Sequence[str] = (),
        pool_team_ids: Sequence[str] = (),
    ) -> TournamentRecord:
        if not name or not name.strip():
            raise ValidationError("Tournament name cannot be empty.")
        if format not in {item.value for item in TournamentFormat}:
            raise ValidationError(f"Unknown tournament format: {format!r}.")

        with self.repo.atomic():
            tournament = self.repo.add_tournament(name, format, description=description, start_date=start_date)
            self.repo.set_roster(tournament.id, _dedupe(participant_ids))
            self.repo.set_draw_pool(tournament.id, _dedupe(pool_team_ids))

        logger.info("action=TOURNAMENT_CREATE tournament=%s format=%s", tournament.id, format)
        return self.get(tournament.id)

    def set_roster(self, tournament_id: str, user_ids: Sequence[str]) -> TournamentRecord:
        tournament = self.get(tournament_id)
        self._require_upcoming(tournament, "change the roster")
        roster = _dedupe(user_ids)

        with self.repo.atomic():
            self.repo.set_roster(tournament_id, roster)
            # Draws held by managers who left the roster go with them.
            kept = [
                (assignment.user_id, assignment.team_id)
                for assignment in self.repo.list_assignments(tournament_id)
                if assignment.user_id in roster
            ]
            self.repo.replace_assignments(tournament_id, kept)

        return self.get(tournament_id)

    def set_draw_pool(self, tournament_id: str, team_ids: Sequence[str]) -> TournamentRecord:
        tournament = self.get(tournament_id)
        self._require_upcoming(tournament, "change the draw pool")

        pool = _dedupe(team_ids)

        with self.repo.atomic():
            self.repo.set_draw_pool(tournament_id, pool)
            # Teams taken out of the pool are taken away from their holders too.
            kept = [
                (assignment.user_id, assignment.team_id)
                for assignment in self.repo.list_assignments(tournament_id)
                if assignment.team_id in pool
            ]
            self.repo.replace_assignments(tournament_id, kept)

        return self.get(tournament_id)

    # ------------------------------------------------------------------
    # Team draw
    # ------------------------------------------------------------------

    def run_lottery(self, tournament_id: str) -> list[AssignmentRecord]:
        tournament = self.get(tournament_id)
        self._require_upcoming(tournament, "run the lottery")
        if tournament.format != TournamentFormat.LOTTERY:
            raise PreconditionError("This tournament does not use a team lottery.", tournament_id=tournament_id)

        roster = tournament.participant_ids
        if len(roster) < MIN_PARTICIPANTS:
            raise ValidationError(f"At least {MIN_PARTICIPANTS} participants are required, got {len(roster)}.")

        pool = self.repo.eligible_team_ids(tournament.pool_team_ids)
        pairs = draw_teams(roster, pool, rng=self.rng, tournament_id=tournament_id)

        with self.repo.atomic():
            assignments = self.repo.replace_assignments(tournament_id, pairs)

        logger.info("action=LOTTERY_COMMIT tournament=%s assignments=%d", tournament_id, len(assignments))
        return assignments

    def assign_team(self, tournament_id: str, user_id: str, team_id: str) -> list[AssignmentRecord]:
        """Hand one participant a specific team, replacing any earlier draw for them."""
        tournament = self.get(tournament_id)
        self._require_upcoming(tournament, "change team assignments")

        roster = tournament.participant_ids
        if user_id not in roster:
            raise NotFoundError("Participant", user_id)
        if team_id not in self.repo.eligible_team_ids(tournament.pool_team_ids):
            raise PreconditionError(f"Team {team_id} is not in the draw pool.", tournament_id=tournament_id)

        current = {assignment.user_id: assignment.team_id for assignment in self.repo.list_assignments(tournament_id)}
        holder = next((uid for uid, tid in current.items() if tid == team_id and uid != user_id), None)
        if holder is not None:
            raise PreconditionError(
                f"Team {team_id} is already assigned to {holder}.",
                tournament_id=tournament_id,
            )

        current[user_id] = team_id
        pairs = [(uid, current[uid]) for uid in roster if uid in current]

        with self.repo.atomic():
            return self.repo.replace_assignments(tournament_id, pairs)

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------

    def fixture_readiness(self, tournament_id: str) -> schemas.FixtureReadiness:
        tournament = self.get(tournament_id)
        reasons: list[str] = []

        roster = tournament.participant_ids
        if tournament.status != TournamentStatus.UPCOMING:
            reasons.append(f"Tournament is {tournament.status}.")
        if len(roster) < MIN_PARTICIPANTS:
            reasons.append(f"Need at least {MIN_PARTICIPANTS} participants.")
        if tournament.format == TournamentFormat.LOTTERY:
            assigned = {assignment.user_id for assignment in self.repo.list_assignments(tournament_id)}
            if any(user_id not in assigned for user_id in roster):
                reasons.append("Lottery draw required.")
        if self.repo.list_matches(tournament_id):
            reasons.append("Fixtures already generated.")

        return schemas.FixtureReadiness(ready=not reasons, reasons=reasons)

    def can_generate_fixtures(self, tournament_id: str) -> bool:
        return self.fixture_readiness(tournament_id).ready

    def generate_fixtures(self, tournament_id: str) -> list[MatchRecord]:
        tournament = self.get(tournament_id)
        if tournament.status == TournamentStatus.FINISHED:
            raise LockedTournamentError(tournament_id)
        if self.repo.list_matches(tournament_id):
            raise PreconditionError("Fixtures have already been generated.", tournament_id=tournament_id)
        self._require_upcoming(tournament, "generate fixtures")

        roster = tournament.participant_ids
        if len(roster) < MIN_PARTICIPANTS:
            raise ValidationError(f"At least {MIN_PARTICIPANTS} participants are required, got {len(roster)}.")

        team_by_user: dict[str, str] = {}
        if tournament.format == TournamentFormat.LOTTERY:
            team_by_user = {
                assignment.user_id: assignment.team_id
                for assignment in self.repo.list_assignments(tournament_id)
            }
            missing = [user_id for user_id in roster if user_id not in team_by_user]
            if missing:
                logger.warning("Fixture generation refused for %s: %d unassigned", tournament_id, len(missing))
                raise DrawRequiredError(tournament_id, missing)

        fixtures = scheduling.generate_fixtures(roster, team_by_user)

        with self.repo.atomic():
            matches = self.repo.insert_matches(tournament_id, fixtures)
            self.repo.set_tournament_status(tournament_id, TournamentStatus.ACTIVE.value)

        logger.info("action=FIXTURES_ACTIVE tournament=%s matches=%d", tournament_id, len(matches))
        return matches

    def schedule(self, tournament_id: str) -> dict[int, list[MatchRecord]]:
        self.get(tournament_id)
        return scheduling.group_by_matchday(self.repo.list_matches(tournament_id))

    # ------------------------------------------------------------------
    # Results, standings and completion
    # ------------------------------------------------------------------

    def progress(self, tournament_id: str) -> schemas.Progress:
        self.get(tournament_id)
        return standings.progress(self.repo.list_matches(tournament_id))

    def compute_standings(self, tournament_id: str) -> list[schemas.StandingRow]:
        tournament = self.get(tournament_id)
        return standings.compute_standings(
            tournament.participant_ids,
            self.repo.list_matches(tournament_id),
            self.repo.usernames(),
        )

    def can_finish(self, tournament_id: str) -> bool:
        tournament = self.get(tournament_id)
        done = standings.progress(self.repo.list_matches(tournament_id))
        return (
            tournament.status == TournamentStatus.ACTIVE
            and done.total > 0
            and done.completed == done.total
        )

    def finish(self, tournament_id: str) -> TournamentRecord:
        tournament = self.get(tournament_id)
        if tournament.status == TournamentStatus.FINISHED:
            raise LockedTournamentError(tournament_id)
        if tournament.status != TournamentStatus.ACTIVE:
            raise PreconditionError(
                f"Only an Active tournament can be finished (status: {tournament.status}).",
                tournament_id=tournament_id,
            )

        done = standings.progress(self.repo.list_matches(tournament_id))
        if done.total == 0 or done.completed < done.total:
            raise PreconditionError(
                f"All matches must be completed before finishing: {done.completed}/{done.total} recorded.",
                tournament_id=tournament_id,
            )

        with self.repo.atomic():
            self.repo.set_tournament_status(tournament_id, TournamentStatus.FINISHED.value)

        logger.info("action=TOURNAMENT_FINISHED tournament=%s", tournament_id)
        return self.get(tournament_id)

    def reset(self, tournament_id: str) -> TournamentRecord:
        """Wipe matches and draw and return to Upcoming.

        Refused on Finished tournaments: their results are final.
        """
        tournament = self.get(tournament_id)
        if tournament.status == TournamentStatus.FINISHED:
            logger.warning("Refused reset of finished tournament %s", tournament_id)
            raise LockedTournamentError(tournament_id)

        with self.repo.atomic():
            deleted = self.repo.delete_tournament_records([tournament_id], include_chat=False)
            self.repo.set_tournament_status(tournament_id, TournamentStatus.UPCOMING.value)

        logger.info("action=HARD_RESET tournament=%s deleted=%d", tournament_id, deleted)
        return self.get(tournament_id)
