"""League table, form guide and career statistics.

Everything here is a pure function of the match list handed in. Nothing is
cached or persisted: callers pass the current matches and get a fresh table,
so the result always reflects the latest recorded results.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol

from . import schemas

UNKNOWN_USER = "Unknown User"
FORM_LENGTH = 5


class ResultLike(Protocol):
    id: str
    tournament_id: str
    matchday: int
    player_a_id: str
    player_b_id: str
    score_a: int | None
    score_b: int | None
    is_completed: bool


@dataclass
class _Tally:
    user_id: str
    username: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    points: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    def record(self, scored: int, conceded: int) -> None:
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.won += 1
            self.points += 3
        elif scored < conceded:
            self.lost += 1
        else:
            self.drawn += 1
            self.points += 1


def _completed(matches: Iterable[ResultLike]) -> list[ResultLike]:
    return [match for match in matches if match.is_completed]


def _scores(match: ResultLike) -> tuple[int, int]:
    return match.score_a or 0, match.score_b or 0


def _tabulate(
    roster: Sequence[str],
    matches: Iterable[ResultLike],
    usernames: Mapping[str, str],
) -> list[_Tally]:
    table = {
        user_id: _Tally(user_id=user_id, username=usernames.get(user_id, UNKNOWN_USER))
        for user_id in roster
    }

    for match in _completed(matches):
        home = table.get(match.player_a_id)
        away = table.get(match.player_b_id)
        # Skips anything not between two roster members, bye filler included.
        if home is None or away is None:
            continue
        score_a, score_b = _scores(match)
        home.record(score_a, score_b)
        away.record(score_b, score_a)

    # sorted() is stable: exact ties keep roster order.
    return sorted(
        table.values(),
        key=lambda row: (-row.points, -row.goal_difference, -row.goals_for),
    )


def _positions(rows: Sequence[_Tally]) -> dict[str, int]:
    return {row.user_id: position for position, row in enumerate(rows, start=1)}


def previous_positions(
    roster: Sequence[str],
    matches: Sequence[ResultLike],
    usernames: Mapping[str, str],
) -> dict[str, int]:
    """Table positions before the latest completed matchday was played."""
    completed = _completed(matches)
    if not completed:
        return {}

    latest = max(match.matchday for match in completed)
    if latest <= 1:
        return {}

    earlier = [match for match in completed if match.matchday < latest]
    return _positions(_tabulate(roster, earlier, usernames))


def _result_for(user_id: str, match: ResultLike) -> schemas.FormResult:
    score_a, score_b = _scores(match)
    mine, theirs = (score_a, score_b) if match.player_a_id == user_id else (score_b, score_a)
    if mine > theirs:
        return "W"
    if mine < theirs:
        return "L"
    return "D"


def recent_form(user_id: str, matches: Iterable[ResultLike], limit: int = FORM_LENGTH) -> list[schemas.FormResult]:
    played = [
        match
        for match in _completed(matches)
        if user_id in (match.player_a_id, match.player_b_id)
    ]
    played.sort(key=lambda match: match.matchday, reverse=True)
    return [_result_for(user_id, match) for match in played[:limit]]


def compute_standings(
    roster: Sequence[str],
    matches: Sequence[ResultLike],
    usernames: Mapping[str, str],
) -> list[schemas.StandingRow]:
    rows = _tabulate(roster, matches, usernames)
    before = previous_positions(roster, matches, usernames)

    return [
        schemas.StandingRow(
            position=position,
            previous_position=before.get(row.user_id),
            user_id=row.user_id,
            username=row.username,
            played=row.played,
            won=row.won,
            drawn=row.drawn,
            lost=row.lost,
            goals_for=row.goals_for,
            goals_against=row.goals_against,
            goal_difference=row.goal_difference,
            points=row.points,
            form=recent_form(row.user_id, matches),
        )
        for position, row in enumerate(rows, start=1)
    ]


def progress(matches: Sequence[ResultLike]) -> schemas.Progress:
    total = len(matches)
    completed = len(_completed(matches))
    percent = math.floor(completed * 100 / total + 0.5) if total else 0
    return schemas.Progress(total=total, completed=completed, percent=percent)


def career_summary(
    user_id: str,
    matches: Iterable[ResultLike],
    usernames: Mapping[str, str],
) -> schemas.CareerSummary:
    """Lifetime record of one manager across every tournament."""
    tally = _Tally(user_id=user_id, username=usernames.get(user_id, UNKNOWN_USER))
    biggest_win: schemas.ResultHighlight | None = None
    biggest_loss: schemas.ResultHighlight | None = None

    for match in _completed(matches):
        if user_id not in (match.player_a_id, match.player_b_id):
            continue

        score_a, score_b = _scores(match)
        is_home = match.player_a_id == user_id
        mine, theirs = (score_a, score_b) if is_home else (score_b, score_a)
        opponent_id = match.player_b_id if is_home else match.player_a_id
        tally.record(mine, theirs)

        highlight = schemas.ResultHighlight(
            match_id=match.id,
            tournament_id=match.tournament_id,
            opponent=usernames.get(opponent_id, UNKNOWN_USER),
            score=f"{mine} - {theirs}",
            margin=abs(mine - theirs),
        )
        if mine > theirs and (biggest_win is None or highlight.margin > biggest_win.margin):
            biggest_win = highlight
        elif mine < theirs and (biggest_loss is None or highlight.margin > biggest_loss.margin):
            biggest_loss = highlight

    win_rate = math.floor(tally.won * 100 / tally.played + 0.5) if tally.played else 0

    return schemas.CareerSummary(
        user_id=user_id,
        username=tally.username,
        played=tally.played,
        won=tally.won,
        drawn=tally.drawn,
        lost=tally.lost,
        goals_for=tally.goals_for,
        goals_against=tally.goals_against,
        goal_difference=tally.goal_difference,
        win_rate=win_rate,
        biggest_win=biggest_win,
        biggest_loss=biggest_loss,
    )
