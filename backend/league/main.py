import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import SessionLocal, init_schema
from .models import Team
from .routes import maintenance, matches, teams, tournaments, users

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Private League API",
    version="1.0.0",
    description=(
        "Double round-robin football leagues among a fixed group of managers: "
        "team lottery, fixtures, results and standings."
    ),
)

cors_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173",
)
allow_origins = [origin.strip() for origin in cors_origins.split(",") if origin.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_schema()


def should_auto_seed() -> bool:
    value = os.getenv("AUTO_SEED_ON_EMPTY", "true").strip().lower()
    return value in {"1", "true", "yes", "on"}


def seed_if_empty() -> None:
    if not should_auto_seed():
        return

    db = SessionLocal()
    try:
        has_teams = db.query(Team.id).first() is not None
    finally:
        db.close()

    if has_teams:
        return

    from seed import seed

    logger.info("Empty database, seeding team catalogue and demo managers")
    seed(demo_tournament=False)


seed_if_empty()


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(users.router, prefix="/users")
app.include_router(teams.router, prefix="/teams")
app.include_router(tournaments.router, prefix="/tournaments")
app.include_router(matches.router, prefix="/matches")
app.include_router(maintenance.router, prefix="/maintenance")
