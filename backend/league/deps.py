from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_db
from .integrity import IntegrityMaintainer
from .ledger import MatchLedger
from .lifecycle import TournamentLifecycle
from .repository import SqlTournamentRepository


def get_repository(db: Session = Depends(get_db)) -> SqlTournamentRepository:
    return SqlTournamentRepository(db)


def get_lifecycle(repo: SqlTournamentRepository = Depends(get_repository)) -> TournamentLifecycle:
    return TournamentLifecycle(repo)


def get_ledger(repo: SqlTournamentRepository = Depends(get_repository)) -> MatchLedger:
    return MatchLedger(repo)


def get_integrity(repo: SqlTournamentRepository = Depends(get_repository)) -> IntegrityMaintainer:
    return IntegrityMaintainer(repo)
