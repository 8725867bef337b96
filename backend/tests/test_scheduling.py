from collections import Counter

import pytest

from league.exceptions import ValidationError
from league.scheduling import BYE, Entrant, generate_fixtures, group_by_matchday, single_round_robin


def roster_of(size: int) -> list[str]:
    return [f"p{index}" for index in range(1, size + 1)]


@pytest.mark.parametrize("size", [2, 3, 4, 5, 6, 7, 8, 11])
def test_double_round_robin_shape(size):
    fixtures = generate_fixtures(roster_of(size))
    rotation_size = size + size % 2

    assert len(fixtures) == size * (size - 1)

    per_day = Counter(fixture.matchday for fixture in fixtures)
    assert sorted(per_day) == list(range(1, 2 * (rotation_size - 1) + 1))
    assert set(per_day.values()) == {size // 2}

    ordered = Counter((fixture.home.user_id, fixture.away.user_id) for fixture in fixtures)
    assert set(ordered.values()) == {1}
    for home, away in ordered:
        assert (away, home) in ordered


@pytest.mark.parametrize("size", [3, 5, 9])
def test_odd_roster_never_emits_bye(size):
    fixtures = generate_fixtures(roster_of(size))

    for fixture in fixtures:
        assert fixture.home is not BYE
        assert fixture.away is not BYE
        assert isinstance(fixture.home, Entrant)
        assert isinstance(fixture.away, Entrant)


def test_each_participant_plays_at_most_once_per_matchday():
    fixtures = generate_fixtures(roster_of(6))

    for matchday, day_fixtures in group_by_matchday(fixtures).items():
        players = [slot.user_id for fixture in day_fixtures for slot in (fixture.home, fixture.away)]
        assert len(players) == len(set(players)), matchday


def test_three_managers_meet_twice_with_one_sitting_out_each_round():
    fixtures = generate_fixtures(["A", "B", "C"])

    assert len(fixtures) == 6
    pairs = Counter(frozenset((fixture.home.user_id, fixture.away.user_id)) for fixture in fixtures)
    assert pairs == {
        frozenset({"A", "B"}): 2,
        frozenset({"A", "C"}): 2,
        frozenset({"B", "C"}): 2,
    }
    assert [fixture.matchday for fixture in fixtures] == [1, 2, 3, 4, 5, 6]


def test_second_leg_mirrors_first_leg_with_teams():
    teams = {"A": "team-a", "B": "team-b", "C": "team-c", "D": "team-d"}
    fixtures = generate_fixtures(["A", "B", "C", "D"], teams)
    first_leg_rounds = 3

    first_leg = [fixture for fixture in fixtures if fixture.matchday <= first_leg_rounds]
    second_leg = [fixture for fixture in fixtures if fixture.matchday > first_leg_rounds]
    assert len(first_leg) == len(second_leg) == 6

    for original, mirror in zip(first_leg, second_leg):
        assert mirror.matchday == original.matchday + first_leg_rounds
        assert mirror.home == original.away
        assert mirror.away == original.home
        assert mirror.home.team_id == teams[mirror.home.user_id]


def test_fixed_slot_alternates_home_and_away():
    rounds = single_round_robin([Entrant(user_id) for user_id in roster_of(6)])

    fixed_at_home = [
        any(home.user_id == "p1" for home, _ in pairs)
        for pairs in rounds
    ]
    assert fixed_at_home == [False, True, False, True, False]


def test_rotation_keeps_first_slot_fixed():
    rounds = single_round_robin([Entrant(user_id) for user_id in roster_of(4)])

    for pairs in rounds:
        assert any("p1" in (home.user_id, away.user_id) for home, away in pairs)


@pytest.mark.parametrize("roster", [[], ["solo"]])
def test_rejects_rosters_below_two(roster):
    with pytest.raises(ValidationError):
        generate_fixtures(roster)


def test_rejects_duplicate_participants():
    with pytest.raises(ValidationError):
        generate_fixtures(["A", "B", "A"])


def test_group_by_matchday_is_sorted_and_keeps_order_within_a_day():
    fixtures = generate_fixtures(roster_of(4))
    shuffled = list(reversed(fixtures))

    grouped = group_by_matchday(shuffled)

    assert list(grouped) == sorted(grouped)
    for matchday, day_fixtures in grouped.items():
        expected = [fixture for fixture in shuffled if fixture.matchday == matchday]
        assert day_fixtures == expected
