import random

from fakes import FakeMatch

from league import standings

USERNAMES = {"a": "Ana", "b": "Ben", "c": "Cleo"}


def played(match_id, matchday, home, away, score_a, score_b, tournament_id="t1"):
    return FakeMatch(
        id=match_id,
        tournament_id=tournament_id,
        matchday=matchday,
        player_a_id=home,
        player_b_id=away,
        score_a=score_a,
        score_b=score_b,
        is_completed=True,
    )


def pending(match_id, matchday, home, away):
    return FakeMatch(id=match_id, tournament_id="t1", matchday=matchday, player_a_id=home, player_b_id=away)


def season():
    return [
        played("m1", 1, "a", "b", 2, 0),
        played("m2", 2, "b", "c", 1, 1),
        played("m3", 3, "c", "a", 3, 1),
        played("m4", 4, "b", "a", 0, 0),
        pending("m5", 5, "c", "b"),
        pending("m6", 6, "a", "c"),
    ]


def as_table(rows):
    return [(row.user_id, row.played, row.won, row.drawn, row.lost, row.goals_for, row.goals_against, row.points) for row in rows]


def test_table_from_completed_matches():
    rows = standings.compute_standings(["a", "b", "c"], season(), USERNAMES)

    assert as_table(rows) == [
        ("c", 2, 1, 1, 0, 4, 2, 4),
        ("a", 3, 1, 1, 1, 3, 3, 4),
        ("b", 3, 0, 2, 1, 1, 3, 2),
    ]
    assert [row.position for row in rows] == [1, 2, 3]
    assert rows[0].goal_difference == 2
    assert rows[0].username == "Cleo"


def test_table_does_not_depend_on_match_order():
    matches = season()
    expected = standings.compute_standings(["a", "b", "c"], matches, USERNAMES)

    for seed in range(5):
        shuffled = list(matches)
        random.Random(seed).shuffle(shuffled)
        assert standings.compute_standings(["a", "b", "c"], shuffled, USERNAMES) == expected


def test_participants_without_results_get_zero_rows():
    rows = standings.compute_standings(["a", "b"], [pending("m1", 1, "a", "b")], USERNAMES)

    assert as_table(rows) == [
        ("a", 0, 0, 0, 0, 0, 0, 0),
        ("b", 0, 0, 0, 0, 0, 0, 0),
    ]
    assert all(row.form == [] and row.previous_position is None for row in rows)


def test_exact_ties_keep_roster_order():
    matches = [played("m1", 1, "b", "a", 1, 1)]

    rows = standings.compute_standings(["b", "a", "c"], matches, USERNAMES)

    assert [row.user_id for row in rows] == ["b", "a", "c"]


def test_goals_for_breaks_equal_points_and_difference():
    matches = [
        played("m1", 1, "a", "c", 3, 3),
        played("m2", 1, "b", "c", 0, 0),
    ]

    rows = standings.compute_standings(["b", "a", "c"], matches, USERNAMES)

    assert [row.user_id for row in rows] == ["c", "a", "b"]


def test_unknown_user_gets_placeholder_name():
    rows = standings.compute_standings(["a", "ghost"], [played("m1", 1, "a", "ghost", 0, 1)], USERNAMES)

    assert rows[0].user_id == "ghost"
    assert rows[0].username == standings.UNKNOWN_USER


def test_matches_against_non_roster_players_are_ignored():
    matches = [played("m1", 1, "a", "outsider", 5, 0)]

    rows = standings.compute_standings(["a", "b"], matches, USERNAMES)

    assert all(row.played == 0 for row in rows)


def test_form_lists_latest_results_first():
    form = standings.recent_form("a", season())

    assert form == ["D", "L", "W"]


def test_form_is_capped():
    matches = [played(f"m{day}", day, "a", "b", day % 3, 1) for day in range(1, 9)]

    assert len(standings.recent_form("a", matches)) == standings.FORM_LENGTH


def test_previous_position_uses_table_before_latest_matchday():
    rows = standings.compute_standings(["a", "b", "c"], season(), USERNAMES)
    by_user = {row.user_id: row for row in rows}

    # After matchday 3: c (4 pts, +2), a (3 pts, 0), b (1 pt, -2).
    assert by_user["c"].previous_position == 1
    assert by_user["a"].previous_position == 2
    assert by_user["b"].previous_position == 3


def test_progress_counts_completed_matches():
    matches = [played("m1", 1, "a", "b", 2, 1), pending("m2", 2, "b", "a")]

    assert standings.progress(matches).model_dump() == {"total": 2, "completed": 1, "percent": 50}
    assert standings.progress([]).percent == 0


def test_progress_rounds_half_up():
    matches = [played("m1", 1, "a", "b", 1, 0)] + [pending(f"p{i}", 2, "b", "a") for i in range(7)]

    # 1 of 8 is 12.5%.
    assert standings.progress(matches).percent == 13


def test_career_summary_spans_tournaments():
    matches = season() + [
        played("x1", 1, "a", "c", 4, 0, tournament_id="t2"),
        played("x2", 2, "c", "a", 5, 0, tournament_id="t2"),
    ]

    summary = standings.career_summary("a", matches, USERNAMES)

    assert (summary.played, summary.won, summary.drawn, summary.lost) == (5, 2, 1, 2)
    assert (summary.goals_for, summary.goals_against) == (7, 8)
    assert summary.win_rate == 40
    assert summary.biggest_win.match_id == "x1"
    assert summary.biggest_win.score == "4 - 0"
    assert summary.biggest_loss.match_id == "x2"
    assert summary.biggest_loss.opponent == "Cleo"


def test_career_summary_for_newcomer():
    summary = standings.career_summary("b", [], USERNAMES)

    assert summary.played == 0
    assert summary.win_rate == 0
    assert summary.biggest_win is None
