import logging
import math
from numbers import Real

from .exceptions import LockedTournamentError, NotFoundError, PreconditionError, ValidationError
from .models import MAX_SCORE, TournamentStatus
from .repository import MatchRecord, TournamentRecord, TournamentRepository

logger = logging.getLogger(__name__)


def validate_score(value: object, side: str) -> int:
    """Return ``value`` as a non-negative int or raise ``ValidationError``."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"Score {side} must be a number, got {value!r}.")

    if isinstance(value, int):
        if value < 0:
            raise ValidationError(f"Score {side} cannot be negative, got {value!r}.")
        if value > MAX_SCORE:
            raise ValidationError(f"Score {side} cannot exceed {MAX_SCORE}, got {value!r}.")
        return value

    number = float(value)
    if math.isnan(number):
        raise ValidationError(f"Score {side} is not a number.")
    if not number.is_integer():
        raise ValidationError(f"Score {side} must be a whole number, got {value!r}.")
    if number < 0:
        raise ValidationError(f"Score {side} cannot be negative, got {value!r}.")
    if number > MAX_SCORE:
        raise ValidationError(f"Score {side} cannot exceed {MAX_SCORE}, got {value!r}.")

    return int(number)


class MatchLedger:
    """Records and reopens match results.

    A match is Scheduled until a result is set and Recorded afterwards.
    Results may be overwritten or reopened while the tournament is Active;
    once it is Finished every write is refused.
    """

    def __init__(self, repo: TournamentRepository) -> None:
        self.repo = repo

    def _writable_match(self, match_id: str) -> tuple[MatchRecord, TournamentRecord]:
        match = self.repo.get_match(match_id)
        if match is None:
            raise NotFoundError("Match", match_id)

        tournament = self.repo.get_tournament(match.tournament_id)
        if tournament is None:
            raise NotFoundError("Tournament", match.tournament_id)
        if tournament.status == TournamentStatus.FINISHED:
            logger.warning("Refused result change on finished tournament %s (match %s)", tournament.id, match_id)
            raise LockedTournamentError(tournament.id)
        if tournament.status != TournamentStatus.ACTIVE:
            raise PreconditionError(
                f"Results can only be entered while the tournament is Active (status: {tournament.status}).",
                tournament_id=tournament.id,
            )

        return match, tournament

    def set_result(self, match_id: str, score_a: object, score_b: object) -> MatchRecord:
        clean_a = validate_score(score_a, "A")
        clean_b = validate_score(score_b, "B")

        with self.repo.atomic():
            self._writable_match(match_id)
            match = self.repo.set_match_result(match_id, clean_a, clean_b)

        logger.info("action=RESULT_POSTED match=%s score=%d-%d", match_id, clean_a, clean_b)
        return match

    def undo_result(self, match_id: str) -> MatchRecord:
        with self.repo.atomic():
            self._writable_match(match_id)
            match = self.repo.clear_match_result(match_id)

        logger.info("action=RESULT_REVERTED match=%s", match_id)
        return match
