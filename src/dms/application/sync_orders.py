"""Application service: one sync pass over the digital menu.

New orders are ingested first, then every synced order is reconciled.
Each order is handled to completion before the next one starts, and a
failure on one order is logged and skipped so the rest of the batch
still goes through.
"""

from __future__ import annotations

import logging

from dms.application.dto import SyncResult
from dms.application.ingest_order import IngestOrderHandler
from dms.application.reconcile_status import ReconcileStatusHandler
from dms.domain.events import EventPublisher, EventType
from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder, iter_raw_orders
from dms.domain.model.sync_state import SyncState
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository

logger = logging.getLogger(__name__)


class SyncOrdersHandler:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
    ) -> None:
        self._source = source
        self._publisher = publisher
        self._ingest = IngestOrderHandler(pos_repo, source, publisher)
        self._reconcile = ReconcileStatusHandler(pos_repo, source, publisher)

    def handle(self, state: SyncState) -> SyncResult:
        try:
            new_orders = self._ingest_new(state)
        except SourceUnavailableError:
            logger.exception("Error during digital menu sync")
            return SyncResult()

        # Re-read so orders flagged above are seen with their new flags.
        try:
            updated_orders = self._reconcile_synced(state)
        except SourceUnavailableError:
            logger.exception("Error reading digital menu orders for status updates")
            updated_orders = 0

        result = SyncResult(new_orders=new_orders, updated_orders=updated_orders)
        if result.total > 0:
            logger.info(
                "Digital menu sync: %d new, %d updated",
                result.new_orders,
                result.updated_orders,
            )
            self._publisher.publish(
                EventType.DIGITAL_MENU_SYNCED,
                {"newOrders": result.new_orders, "updatedOrders": result.updated_orders},
            )
        return result

    def _ingest_new(self, state: SyncState) -> int:
        synced = 0
        for raw, customer_doc in iter_raw_orders(self._source.list_customer_documents()):
            if raw.get("syncedToPOS") is True:
                continue
            try:
                order = ExternalOrder.from_document(raw, customer_doc)
                if not order.status.is_ingestible or state.is_processed(order.order_id):
                    continue
                self._ingest.handle(order, state)
                synced += 1
            except Exception:
                logger.exception("Failed to sync digital menu order %s", raw.get("_id"))
        return synced

    def _reconcile_synced(self, state: SyncState) -> int:
        updated = 0
        for raw, customer_doc in iter_raw_orders(self._source.list_customer_documents()):
            if raw.get("syncedToPOS") is not True:
                continue
            try:
                order = ExternalOrder.from_document(raw, customer_doc)
                if self._reconcile.handle(order, state):
                    updated += 1
            except Exception:
                logger.exception("Failed to update digital menu order %s", raw.get("_id"))
        return updated
