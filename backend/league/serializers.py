from collections.abc import Mapping

from . import schemas
from .lifecycle import TournamentLifecycle
from .repository import MatchRecord, TournamentRecord
from .standings import UNKNOWN_USER


def match_to_read(match: MatchRecord, usernames: Mapping[str, str]) -> schemas.MatchRead:
    return schemas.MatchRead(
        id=match.id,
        tournament_id=match.tournament_id,
        matchday=match.matchday,
        player_a_id=match.player_a_id,
        player_a=usernames.get(match.player_a_id, UNKNOWN_USER),
        team_a_id=match.team_a_id,
        player_b_id=match.player_b_id,
        player_b=usernames.get(match.player_b_id, UNKNOWN_USER),
        team_b_id=match.team_b_id,
        score_a=match.score_a,
        score_b=match.score_b,
        is_completed=match.is_completed,
    )


def schedule_to_read(
    grouped: Mapping[int, list[MatchRecord]],
    usernames: Mapping[str, str],
) -> list[schemas.MatchdayRead]:
    return [
        schemas.MatchdayRead(
            matchday=matchday,
            matches=[match_to_read(match, usernames) for match in matches],
        )
        for matchday, matches in grouped.items()
    ]


def tournament_to_read(tournament: TournamentRecord) -> schemas.TournamentRead:
    return schemas.TournamentRead(
        id=tournament.id,
        name=tournament.name,
        format=tournament.format,
        status=tournament.status,
        description=tournament.description,
        start_date=tournament.start_date,
        created_at=tournament.created_at,
        participant_ids=tournament.participant_ids,
        pool_team_ids=tournament.pool_team_ids,
    )


def tournament_to_detail(lifecycle: TournamentLifecycle, tournament: TournamentRecord) -> schemas.TournamentDetail:
    summary = tournament_to_read(tournament)
    return schemas.TournamentDetail(
        **summary.model_dump(),
        progress=lifecycle.progress(tournament.id),
        fixtures=lifecycle.fixture_readiness(tournament.id),
        can_finish=lifecycle.can_finish(tournament.id),
    )
