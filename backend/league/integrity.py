import logging

from . import schemas
from .exceptions import NotFoundError
from .repository import TournamentRepository

logger = logging.getLogger(__name__)


class IntegrityMaintainer:
    """Cascading tournament delete and cleanup of records left without a tournament.

    Both paths go through ``repo.delete_tournament_records`` so there is a single
    definition of what belongs to a tournament.
    """

    def __init__(self, repo: TournamentRepository) -> None:
        self.repo = repo

    def delete_tournament(self, tournament_id: str) -> int:
        if self.repo.get_tournament(tournament_id) is None:
            raise NotFoundError("Tournament", tournament_id)

        with self.repo.atomic():
            deleted = self.repo.delete_tournament(tournament_id)

        logger.info("action=TOURNAMENT_DELETE tournament=%s records=%d", tournament_id, deleted)
        return deleted

    def _orphan_tournament_ids(self) -> tuple[set[str], int, int]:
        live = self.repo.tournament_ids()
        orphan_ids: set[str] = set()
        matches = assignments = 0

        for match in self.repo.list_all_matches():
            if match.tournament_id not in live:
                orphan_ids.add(match.tournament_id)
                matches += 1
        for assignment in self.repo.list_all_assignments():
            if assignment.tournament_id not in live:
                orphan_ids.add(assignment.tournament_id)
                assignments += 1

        return orphan_ids, matches, assignments

    def scan_orphans(self) -> schemas.OrphanReport:
        _, matches, assignments = self._orphan_tournament_ids()
        return schemas.OrphanReport(matches=matches, assignments=assignments)

    def purge_orphans(self) -> int:
        with self.repo.atomic():
            orphan_ids, _, _ = self._orphan_tournament_ids()
            deleted = self.repo.delete_tournament_records(orphan_ids, include_chat=False)

        if deleted:
            logger.info("action=DB_CLEAN purged=%d tournaments=%d", deleted, len(orphan_ids))
        return deleted
