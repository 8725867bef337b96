import os

# league.main creates its schema at import time; keep that away from the
# on-disk database and skip the startup seed.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_SEED_ON_EMPTY"] = "false"

import random  # noqa: E402

import pytest  # noqa: E402

from league.ledger import MatchLedger  # noqa: E402
from league.lifecycle import TournamentLifecycle  # noqa: E402
from league.integrity import IntegrityMaintainer  # noqa: E402

from fakes import FakeRepository  # noqa: E402

USERS = {
    "u1": "Alice",
    "u2": "Bruno",
    "u3": "Chen",
    "u4": "Dara",
}

TEAMS = {
    "team-club-real-madrid": True,
    "team-club-arsenal": True,
    "team-nat-france": True,
    "team-nat-brazil": True,
    "team-nat-italy": True,
    "team-club-retired": False,
}


@pytest.fixture()
def repo():
    return FakeRepository(usernames=USERS, teams=TEAMS)


@pytest.fixture()
def lifecycle(repo):
    return TournamentLifecycle(repo, rng=random.Random(7))


@pytest.fixture()
def ledger(repo):
    return MatchLedger(repo)


@pytest.fixture()
def integrity(repo):
    return IntegrityMaintainer(repo)


@pytest.fixture()
def active_league(lifecycle):
    """UsersOnly league of u1..u4 with fixtures generated."""
    tournament = lifecycle.create_tournament("Friday League", "UsersOnly", participant_ids=["u1", "u2", "u3", "u4"])
    lifecycle.generate_fixtures(tournament.id)
    return tournament
