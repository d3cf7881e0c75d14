"""Application service: rebuild SyncState from the digital menu flags."""

from __future__ import annotations

import logging

from dms.domain.exceptions import DomainException, SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder, iter_raw_orders
from dms.domain.model.sync_state import SyncState
from dms.domain.repository.external_order_source import ExternalOrderSource

logger = logging.getLogger(__name__)


class LoadSyncStateHandler:

    def __init__(self, source: ExternalOrderSource) -> None:
        self._source = source

    def handle(self, state: SyncState) -> int:
        """Seed *state* with every order already flagged ``syncedToPOS``.

        Returns how many orders were loaded.  An unreachable source leaves
        the state untouched; the ``syncedToPOS`` check in the sync pass
        still prevents re-ingesting those orders.
        """
        try:
            customer_docs = self._source.list_customer_documents()
        except SourceUnavailableError:
            logger.exception("Error loading sync state")
            return 0

        loaded = 0
        for raw, customer_doc in iter_raw_orders(customer_docs):
            if raw.get("syncedToPOS") is not True:
                continue
            try:
                order = ExternalOrder.from_document(raw, customer_doc)
            except DomainException:
                logger.warning("Skipping malformed synced order %s", raw.get("_id"), exc_info=True)
                continue
            state.mark_processed(order.order_id, order.status, order.payment_status)
            loaded += 1

        logger.info("Loaded %d synced orders from the digital menu", loaded)
        return loaded
