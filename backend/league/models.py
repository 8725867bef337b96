from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base, new_id


class TournamentStatus(str, Enum):
    UPCOMING = "Upcoming"
    ACTIVE = "Active"
    FINISHED = "Finished"


class TournamentFormat(str, Enum):
    LOTTERY = "Lottery"
    USERS_ONLY = "UsersOnly"


class TeamType(str, Enum):
    CLUB = "CLUB"
    NATIONAL = "NATIONAL"


# Upper bound for a single side of a recorded score.
MAX_SCORE = 99


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=new_id)
    username = Column(String(100), unique=True, nullable=False, index=True)
    role = Column(String(16), default="Member", nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("role in ('Admin', 'Member')", name="ck_user_role_valid"),
    )


class Team(Base):
    __tablename__ = "teams"

    id = Column(String(64), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False, index=True)
    type = Column(String(16), default=TeamType.CLUB.value, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("type in ('CLUB', 'NATIONAL')", name="ck_team_type_valid"),
    )


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False)
    format = Column(String(16), default=TournamentFormat.USERS_ONLY.value, nullable=False)
    status = Column(String(16), default=TournamentStatus.UPCOMING.value, nullable=False, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    participants = relationship(
        "TournamentParticipant",
        order_by="TournamentParticipant.position",
        cascade="all, delete-orphan",
    )
    pool = relationship("TournamentPoolTeam", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("format in ('Lottery', 'UsersOnly')", name="ck_tournament_format_valid"),
        CheckConstraint(
            "status in ('Upcoming', 'Active', 'Finished')",
            name="ck_tournament_status_valid",
        ),
    )

    @property
    def participant_ids(self) -> list[str]:
        return [entry.user_id for entry in self.participants]

    @property
    def pool_team_ids(self) -> list[str]:
        return [entry.team_id for entry in self.pool]


class TournamentParticipant(Base):
    __tablename__ = "tournament_participants"

    tournament_id = Column(String(32), ForeignKey("tournaments.id"), primary_key=True)
    user_id = Column(String(32), primary_key=True)
    position = Column(Integer, nullable=False)


class TournamentPoolTeam(Base):
    __tablename__ = "tournament_pool_teams"

    tournament_id = Column(String(32), ForeignKey("tournaments.id"), primary_key=True)
    team_id = Column(String(64), primary_key=True)


# Matches, assignments and chat rows reference their tournament by plain id so
# rows left behind by a deleted tournament stay visible to the orphan scan.


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(String(32), primary_key=True, default=new_id)
    tournament_id = Column(String(32), nullable=False, index=True)
    user_id = Column(String(32), nullable=False)
    team_id = Column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("tournament_id", "user_id", name="uq_assignment_user"),
        UniqueConstraint("tournament_id", "team_id", name="uq_assignment_team"),
    )


class Match(Base):
    __tablename__ = "matches"

    id = Column(String(32), primary_key=True, default=new_id)
    tournament_id = Column(String(32), nullable=False, index=True)
    matchday = Column(Integer, nullable=False, index=True)

    player_a_id = Column(String(32), nullable=False)
    player_b_id = Column(String(32), nullable=False)
    team_a_id = Column(String(64), nullable=True)
    team_b_id = Column(String(64), nullable=True)

    score_a = Column(Integer, nullable=True)
    score_b = Column(Integer, nullable=True)
    is_completed = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        CheckConstraint("matchday >= 1", name="ck_match_matchday_positive"),
        CheckConstraint("player_a_id <> player_b_id", name="ck_match_distinct_players"),
        CheckConstraint(
            "(score_a is null and score_b is null) or (score_a is not null and score_b is not null)",
            name="ck_match_scores_paired",
        ),
        CheckConstraint("score_a is null or score_a >= 0", name="ck_match_score_a_nonnegative"),
        CheckConstraint("score_b is null or score_b >= 0", name="ck_match_score_b_nonnegative"),
        CheckConstraint(
            "not is_completed or score_a is not null",
            name="ck_match_completed_has_scores",
        ),
    )


class ChatMessage(Base):
    __tablename__ = "chat_messages"

    id = Column(String(32), primary_key=True, default=new_id)
    tournament_id = Column(String(32), nullable=True, index=True)
    user_id = Column(String(32), nullable=False)
    text = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
