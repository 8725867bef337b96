from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from .models import MAX_SCORE


class ORMBaseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


TournamentStatusName = Literal["Upcoming", "Active", "Finished"]
TournamentFormatName = Literal["Lottery", "UsersOnly"]
TeamTypeName = Literal["CLUB", "NATIONAL"]
FormResult = Literal["W", "D", "L"]


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=100)
    role: Literal["Admin", "Member"] = "Member"


class UserRead(ORMBaseModel):
    id: str
    username: str
    role: str


class TeamCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    type: TeamTypeName = "CLUB"


class TeamRead(ORMBaseModel):
    id: str
    name: str
    type: str
    is_active: bool


class TournamentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    format: TournamentFormatName = "UsersOnly"
    description: str | None = Field(default=None, max_length=2000)
    start_date: date | None = None
    participant_ids: list[str] = Field(default_factory=list)
    pool_team_ids: list[str] = Field(default_factory=list)


class RosterUpdate(BaseModel):
    participant_ids: list[str]


class PoolUpdate(BaseModel):
    team_ids: list[str]


class ManualAssignment(BaseModel):
    team_id: str = Field(min_length=1)


class ScoreUpdate(BaseModel):
    # Strict so that 1.5, "2" or true are rejected instead of coerced.
    score_a: StrictInt = Field(ge=0, le=MAX_SCORE)
    score_b: StrictInt = Field(ge=0, le=MAX_SCORE)


class AssignmentRead(ORMBaseModel):
    id: str
    tournament_id: str
    user_id: str
    team_id: str


class MatchRead(BaseModel):
    id: str
    tournament_id: str
    matchday: int

    player_a_id: str
    player_a: str
    team_a_id: str | None = None

    player_b_id: str
    player_b: str
    team_b_id: str | None = None

    score_a: int | None = None
    score_b: int | None = None
    is_completed: bool


class MatchdayRead(BaseModel):
    matchday: int
    matches: list[MatchRead] = Field(default_factory=list)


class Progress(BaseModel):
    total: int
    completed: int
    percent: int


class FixtureReadiness(BaseModel):
    ready: bool
    reasons: list[str] = Field(default_factory=list)


class TournamentRead(BaseModel):
    id: str
    name: str
    format: TournamentFormatName
    status: TournamentStatusName
    description: str | None = None
    start_date: date | None = None
    created_at: datetime

    participant_ids: list[str] = Field(default_factory=list)
    pool_team_ids: list[str] = Field(default_factory=list)


class TournamentDetail(TournamentRead):
    progress: Progress
    fixtures: FixtureReadiness
    can_finish: bool


class StandingRow(BaseModel):
    position: int
    previous_position: int | None = None
    user_id: str
    username: str

    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0
    goal_difference: int = 0
    points: int = 0

    form: list[FormResult] = Field(default_factory=list)


class ResultHighlight(BaseModel):
    match_id: str
    tournament_id: str
    opponent: str
    score: str
    margin: int


class CareerSummary(BaseModel):
    user_id: str
    username: str
    played: int
    won: int
    drawn: int
    lost: int
    goals_for: int
    goals_against: int
    goal_difference: int
    win_rate: int
    biggest_win: ResultHighlight | None = None
    biggest_loss: ResultHighlight | None = None


class OrphanReport(BaseModel):
    matches: int
    assignments: int


class PurgeResult(BaseModel):
    deleted: int
