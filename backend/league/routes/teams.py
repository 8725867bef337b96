from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas
from ..deps import get_repository
from ..repository import SqlTournamentRepository

router = APIRouter(tags=["teams"])


@router.get("/", response_model=list[schemas.TeamRead])
def list_teams(repo: SqlTournamentRepository = Depends(get_repository)) -> list[schemas.TeamRead]:
    return [schemas.TeamRead.model_validate(team) for team in repo.list_teams()]


@router.post("/", response_model=schemas.TeamRead, status_code=status.HTTP_201_CREATED)
def create_team(
    payload: schemas.TeamCreate,
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.TeamRead:
    try:
        with repo.atomic():
            team = repo.create_team(payload.name, payload.type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return schemas.TeamRead.model_validate(team)
