import random
from collections.abc import Sequence

from .exceptions import InsufficientPoolError, ValidationError


def draw_teams(
    user_ids: Sequence[str],
    pool: Sequence[str],
    *,
    rng: random.Random | None = None,
    tournament_id: str | None = None,
) -> list[tuple[str, str]]:
    """Pair each participant with a distinct team from ``pool``.

    Only the pool is shuffled; participants keep roster order.
    """
    if not user_ids:
        raise ValidationError("Roster is empty.")

    teams = list(dict.fromkeys(pool))
    if len(teams) < len(user_ids):
        raise InsufficientPoolError(tournament_id, required=len(user_ids), available=len(teams))

    (rng or random.Random()).shuffle(teams)
    return list(zip(user_ids, teams[: len(user_ids)]))
