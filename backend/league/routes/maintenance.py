from fastapi import APIRouter, Depends

from .. import schemas
from ..deps import get_integrity
from ..integrity import IntegrityMaintainer

router = APIRouter(tags=["maintenance"])


@router.get("/orphans", response_model=schemas.OrphanReport)
def scan_orphans(integrity: IntegrityMaintainer = Depends(get_integrity)) -> schemas.OrphanReport:
    return integrity.scan_orphans()


@router.post("/orphans/purge", response_model=schemas.PurgeResult)
def purge_orphans(integrity: IntegrityMaintainer = Depends(get_integrity)) -> schemas.PurgeResult:
    return schemas.PurgeResult(deleted=integrity.purge_orphans())
