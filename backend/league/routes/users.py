from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas, standings
from ..deps import get_repository
from ..repository import SqlTournamentRepository

router = APIRouter(tags=["users"])


@router.get("/", response_model=list[schemas.UserRead])
def list_users(repo: SqlTournamentRepository = Depends(get_repository)) -> list[schemas.UserRead]:
    return [schemas.UserRead.model_validate(user) for user in repo.list_users()]


@router.post("/", response_model=schemas.UserRead, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: schemas.UserCreate,
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.UserRead:
    try:
        with repo.atomic():
            user = repo.create_user(payload.username, payload.role)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return schemas.UserRead.model_validate(user)


@router.get("/{user_id}/profile", response_model=schemas.CareerSummary)
def get_profile(
    user_id: str,
    repo: SqlTournamentRepository = Depends(get_repository),
) -> schemas.CareerSummary:
    if repo.get_user(user_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User not found: {user_id}")

    # Rows of deleted tournaments that were never purged do not count.
    live = repo.tournament_ids()
    matches = [match for match in repo.list_all_matches() if match.tournament_id in live]
    return standings.career_summary(user_id, matches, repo.usernames())
