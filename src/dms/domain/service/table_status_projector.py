"""Domain service: project kitchen progress onto tables and customers.

A table's status is a cached summary of its current order's item
statuses, never an independent fact.  The same summary is written onto
the digital menu customer record so the ordering UI can show progress
without talking to the POS.
"""

from __future__ import annotations

import logging
from typing import Iterable

from dms.domain.events import EventPublisher, EventType
from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.pos import ItemStatus, TableStatus
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository

logger = logging.getLogger(__name__)


def write_customer_table_status(
    source: ExternalOrderSource,
    customer_phone: str,
    status: TableStatus,
) -> bool:
    """Mirror *status* onto the digital menu customer, best-effort.

    Callers write this between POS writes and their own bookkeeping, so a
    failing customers collection must not abort them.
    """
    try:
        return source.update_customer_table_status(customer_phone, status.value)
    except SourceUnavailableError:
        logger.warning(
            "Failed to update customer %s tableStatus to %s",
            customer_phone,
            status.value,
            exc_info=True,
        )
        return False


def derive_table_status(statuses: Iterable[ItemStatus]) -> TableStatus | None:
    """Summarize item statuses into one table status.

    Returns None for an order without items; there is nothing to project.
    """
    statuses = list(statuses)
    if not statuses:
        return None

    if all(s is ItemStatus.SERVED for s in statuses):
        return TableStatus.SERVED
    if all(s in (ItemStatus.READY, ItemStatus.SERVED) for s in statuses):
        # At least one READY, otherwise the branch above would have matched.
        return TableStatus.READY
    if any(s in (ItemStatus.PREPARING, ItemStatus.READY) for s in statuses):
        return TableStatus.PREPARING
    return TableStatus.OCCUPIED


class TableStatusProjector:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
    ) -> None:
        self._pos_repo = pos_repo
        self._source = source
        self._publisher = publisher

    def project(self, pos_order_id: str) -> TableStatus | None:
        """Recompute the order's table status and write it to both sides.

        The table write is skipped when the status is already current, so
        repeated projections publish nothing.  The customer record is
        written independently of whether the order has a table.
        """
        order = self._pos_repo.get_order(pos_order_id)
        if order is None:
            logger.warning("Cannot project table status: POS order %s not found", pos_order_id)
            return None

        items = self._pos_repo.get_order_items(order.id)
        derived = derive_table_status(item.status for item in items)
        if derived is None:
            return None

        if order.table_id:
            table = self._pos_repo.get_table(order.table_id)
            if table is not None and table.status is not derived:
                updated = self._pos_repo.update_table_status(table.id, derived)
                if updated is not None:
                    self._publisher.publish(EventType.TABLE_UPDATED, updated.to_payload())

        if order.customer_phone:
            write_customer_table_status(self._source, order.customer_phone, derived)

        return derived
