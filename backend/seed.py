from __future__ import annotations

import argparse
import logging
import re

from league import models
from league.database import Base, SessionLocal, engine
from league.ledger import MatchLedger
from league.lifecycle import TournamentLifecycle
from league.repository import SqlTournamentRepository

logger = logging.getLogger(__name__)

CLUB_TEAMS = [
    "Real Madrid",
    "Manchester City",
    "FC Barcelona",
    "Bayern Munich",
    "Paris Saint-Germain",
    "Liverpool",
    "Arsenal",
    "Inter Milan",
    "AC Milan",
    "Atletico Madrid",
]

NATIONAL_TEAMS = [
    "France",
    "Brazil",
    "England",
    "Argentina",
    "Spain",
    "Portugal",
    "Germany",
    "Netherlands",
    "Italy",
    "Belgium",
]

MANAGERS = [
    ("admin-1", "admin", "Admin"),
    ("test-1", "TestPlayer_One", "Member"),
    ("test-2", "TestPlayer_Two", "Member"),
    ("test-3", "TestPlayer_Three", "Member"),
    ("test-4", "TestPlayer_Four", "Member"),
    ("test-5", "TestPlayer_Five", "Member"),
    ("test-6", "TestPlayer_Six", "Member"),
]

# (home goals, away goals) for the opening matches of the demo league.
DEMO_RESULTS = [(2, 1), (0, 0), (3, 2), (1, 4), (2, 2)]


def team_slug(prefix: str, name: str) -> str:
    slug = re.sub(r"\s+", "-", name.lower())
    return f"team-{prefix}-{slug}"


def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_demo_tournament(repo: SqlTournamentRepository) -> None:
    lifecycle = TournamentLifecycle(repo)
    ledger = MatchLedger(repo)

    tournament = lifecycle.create_tournament(
        "Sunday League",
        models.TournamentFormat.USERS_ONLY.value,
        description="Demo double round-robin among the test managers.",
        participant_ids=[user_id for user_id, _, role in MANAGERS if role == "Member"],
    )
    matches = lifecycle.generate_fixtures(tournament.id)
    for match, (score_a, score_b) in zip(matches, DEMO_RESULTS):
        ledger.set_result(match.id, score_a, score_b)


def seed(*, demo_tournament: bool = False) -> None:
    reset_database()

    db = SessionLocal()
    try:
        for prefix, team_type, names in (
            ("club", models.TeamType.CLUB, CLUB_TEAMS),
            ("nat", models.TeamType.NATIONAL, NATIONAL_TEAMS),
        ):
            for name in names:
                db.add(models.Team(id=team_slug(prefix, name), name=name, type=team_type.value, is_active=True))

        for user_id, username, role in MANAGERS:
            db.add(models.User(id=user_id, username=username, role=role))

        db.commit()

        if demo_tournament:
            seed_demo_tournament(SqlTournamentRepository(db))
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed league data.")
    parser.add_argument(
        "--demo-tournament",
        action="store_true",
        help="Also create a running league with generated fixtures and a few results.",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    seed(demo_tournament=args.demo_tournament)
    mode = "demo" if args.demo_tournament else "fresh"
    logger.info("Seed completed (%s)", mode)
