from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas, serializers
from ..deps import get_integrity, get_lifecycle, get_repository
from ..exceptions import LockedTournamentError, NotFoundError
from ..integrity import IntegrityMaintainer
from ..lifecycle import TournamentLifecycle
from ..repository import SqlTournamentRepository
from ..scheduling import group_by_matchday

router = APIRouter(tags=["tournaments"])


@router.get("/", response_model=list[schemas.TournamentRead])
def list_tournaments(
    repo: SqlTournamentRepository = Depends(get_repository),
) -> list[schemas.TournamentRead]:
    return [serializers.tournament_to_read(tournament) for tournament in repo.list_tournaments()]


@router.post("/", response_model=schemas.TournamentDetail, status_code=status.HTTP_201_CREATED)
def create_tournament(
    payload: schemas.TournamentCreate,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.create_tournament(
            payload.name,
            payload.format,
            description=payload.description,
            start_date=payload.start_date,
            participant_ids=payload.participant_ids,
            pool_team_ids=payload.pool_team_ids,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)


@router.get("/{tournament_id}", response_model=schemas.TournamentDetail)
def get_tournament(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.get(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)


@router.delete("/{tournament_id}", response_model=schemas.PurgeResult)
def delete_tournament(
    tournament_id: str,
    integrity: IntegrityMaintainer = Depends(get_integrity),
) -> schemas.PurgeResult:
    try:
        deleted = integrity.delete_tournament(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return schemas.PurgeResult(deleted=deleted)


@router.put("/{tournament_id}/roster", response_model=schemas.TournamentDetail)
def update_roster(
    tournament_id: str,
    payload: schemas.RosterUpdate,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.set_roster(tournament_id, payload.participant_ids)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)


@router.put("/{tournament_id}/pool", response_model=schemas.TournamentDetail)
def update_pool(
    tournament_id: str,
    payload: schemas.PoolUpdate,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.set_draw_pool(tournament_id, payload.team_ids)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)


@router.post("/{tournament_id}/lottery", response_model=list[schemas.AssignmentRead])
def run_lottery(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> list[schemas.AssignmentRead]:
    try:
        assignments = lifecycle.run_lottery(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return [schemas.AssignmentRead.model_validate(assignment) for assignment in assignments]


@router.get("/{tournament_id}/assignments", response_model=list[schemas.AssignmentRead])
def list_assignments(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
    repo: SqlTournamentRepository = Depends(get_repository),
) -> list[schemas.AssignmentRead]:
    try:
        lifecycle.get(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return [schemas.AssignmentRead.model_validate(item) for item in repo.list_assignments(tournament_id)]


@router.put("/{tournament_id}/assignments/{user_id}", response_model=list[schemas.AssignmentRead])
def assign_team(
    tournament_id: str,
    user_id: str,
    payload: schemas.ManualAssignment,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> list[schemas.AssignmentRead]:
    try:
        assignments = lifecycle.assign_team(tournament_id, user_id, payload.team_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return [schemas.AssignmentRead.model_validate(item) for item in assignments]


@router.post(
    "/{tournament_id}/fixtures",
    response_model=list[schemas.MatchdayRead],
    status_code=status.HTTP_201_CREATED,
)
def generate_fixtures(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
    repo: SqlTournamentRepository = Depends(get_repository),
) -> list[schemas.MatchdayRead]:
    try:
        matches = lifecycle.generate_fixtures(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.schedule_to_read(group_by_matchday(matches), repo.usernames())


@router.get("/{tournament_id}/schedule", response_model=list[schemas.MatchdayRead])
def get_schedule(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
    repo: SqlTournamentRepository = Depends(get_repository),
) -> list[schemas.MatchdayRead]:
    try:
        grouped = lifecycle.schedule(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    return serializers.schedule_to_read(grouped, repo.usernames())


@router.get("/{tournament_id}/standings", response_model=list[schemas.StandingRow])
def get_standings(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> list[schemas.StandingRow]:
    try:
        return lifecycle.compute_standings(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post("/{tournament_id}/finish", response_model=schemas.TournamentDetail)
def finish_tournament(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.finish(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)


@router.post("/{tournament_id}/reset", response_model=schemas.TournamentDetail)
def reset_tournament(
    tournament_id: str,
    lifecycle: TournamentLifecycle = Depends(get_lifecycle),
) -> schemas.TournamentDetail:
    try:
        tournament = lifecycle.reset(tournament_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return serializers.tournament_to_detail(lifecycle, tournament)
