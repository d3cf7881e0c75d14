"""Application service: re-project a POS order's table status.

The host calls this after staff change an item status in the POS, so the
table and the digital menu customer both reflect kitchen progress.
"""

from __future__ import annotations

from dms.domain.events import EventPublisher
from dms.domain.exceptions import EntityNotFoundError
from dms.domain.model.pos import TableStatus
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository
from dms.domain.service.table_status_projector import TableStatusProjector


class ProjectTableStatusHandler:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
    ) -> None:
        self._pos_repo = pos_repo
        self._projector = TableStatusProjector(pos_repo, source, publisher)

    def handle(self, pos_order_id: str) -> TableStatus | None:
        if self._pos_repo.get_order(pos_order_id) is None:
            raise EntityNotFoundError(f"POS order {pos_order_id} not found")
        return self._projector.project(pos_order_id)
