from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas, serializers
from ..deps import get_ledger, get_repository
from ..exceptions import LockedTournamentError, NotFoundError
from ..ledger import MatchLedger
from ..repository import SqlTournamentRepository

router = APIRouter(tags=["matches"])


@router.get("/{match_id}", response_model=schemas.MatchRead)
def get_match(
    match_id: str,
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.MatchRead:
    match = repo.get_match(match_id)
    if match is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Match not found: {match_id}")
    return serializers.match_to_read(match, repo.usernames())


@router.patch("/{match_id}/score", response_model=schemas.MatchRead)
def update_score(
    match_id: str,
    payload: schemas.ScoreUpdate,
    ledger: MatchLedger = Depends(get_ledger),
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.MatchRead:
    try:
        match = ledger.set_result(match_id, payload.score_a, payload.score_b)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.match_to_read(match, repo.usernames())


@router.post("/{match_id}/undo", response_model=schemas.MatchRead)
def undo_score(
    match_id: str,
    ledger: MatchLedger = Depends(get_ledger),
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.MatchRead:
    try:
        match = ledger.undo_result(match_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except LockedTournamentError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return serializers.match_to_read(match, repo.usernames())
