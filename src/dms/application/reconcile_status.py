"""Application service: Reconcile a synced digital menu order with the POS.

Two state machines move independently: the digital menu order status and
the POS item statuses.  This handler pushes digital menu changes into the
POS one observation at a time, and hands payment signals to auto-checkout.
"""

from __future__ import annotations

import logging

from dms.application.auto_checkout import AutoCheckoutHandler
from dms.domain.events import EventPublisher, EventType
from dms.domain.model.external_order import ExternalOrder, ExternalOrderStatus
from dms.domain.model.pos import ItemStatus
from dms.domain.model.sync_state import SyncState
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository
from dms.domain.service.table_status_projector import TableStatusProjector

logger = logging.getLogger(__name__)

# Cancelled orders are served so they drop out of the kitchen display;
# POS items have no cancelled lane.
ITEM_STATUS_FOR: dict[ExternalOrderStatus, ItemStatus] = {
    ExternalOrderStatus.PENDING: ItemStatus.NEW,
    ExternalOrderStatus.CONFIRMED: ItemStatus.NEW,
    ExternalOrderStatus.PREPARING: ItemStatus.PREPARING,
    ExternalOrderStatus.COMPLETED: ItemStatus.SERVED,
    ExternalOrderStatus.CANCELLED: ItemStatus.SERVED,
}


class ReconcileStatusHandler:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
    ) -> None:
        self._pos_repo = pos_repo
        self._publisher = publisher
        self._checkout = AutoCheckoutHandler(pos_repo, source, publisher)
        self._projector = TableStatusProjector(pos_repo, source, publisher)

    def handle(self, order: ExternalOrder, state: SyncState) -> bool:
        """Reconcile one synced order.  Returns True if it counts as updated."""
        order_id = order.order_id

        # Payment signal wins over ordinary diffing and also catches
        # transitions that happened while the engine was not running.
        if order.wants_checkout and order.pos_order_id:
            pos_order = self._pos_repo.get_order(order.pos_order_id)
            if pos_order is not None and not pos_order.is_settled:
                logger.info(
                    "Order %s has invoice_generated but is not checked out - processing now",
                    order_id,
                )
                invoice = self._checkout.handle(order, pos_order)
                state.observe(order_id, order.status, order.payment_status)
                # A failed checkout is not an update; the next pass retries it.
                return invoice is not None

        if not state.has_observation(order_id):
            # First sight since startup: initialization, not a transition.
            state.observe(order_id, order.status, order.payment_status)
            return False

        previous_status = state.statuses[order_id]
        previous_payment = state.payment_statuses[order_id]
        status_changed = previous_status is not order.status
        payment_changed = previous_payment is not order.payment_status
        if not (status_changed or payment_changed):
            return False

        self._apply_item_status(order)
        state.observe(order_id, order.status, order.payment_status)

        if status_changed:
            logger.info(
                "Updated digital menu order %s status: %s -> %s",
                order_id,
                previous_status.value,
                order.status.value,
            )
        if payment_changed:
            logger.info(
                "Updated digital menu order %s paymentStatus: %s -> %s",
                order_id,
                previous_payment.value,
                order.payment_status.value,
            )

        self._publisher.publish(
            EventType.DIGITAL_MENU_ORDER_UPDATED,
            {
                "orderId": order_id,
                "customerName": order.customer_name,
                "previousStatus": previous_status.value,
                "newStatus": order.status.value,
                "previousPaymentStatus": previous_payment.value,
                "newPaymentStatus": order.payment_status.value,
            },
        )
        return True

    def _apply_item_status(self, order: ExternalOrder) -> None:
        target = ITEM_STATUS_FOR.get(order.status)
        if target is None:
            logger.info(
                "No item status for digital menu status %r on order %s; items left as is",
                order.raw_status,
                order.order_id,
            )
            return

        if not order.pos_order_id:
            logger.warning("No POS order ID linked to digital menu order %s", order.order_id)
            return

        pos_order = self._pos_repo.get_order(order.pos_order_id)
        if pos_order is None:
            logger.warning("POS order %s not found", order.pos_order_id)
            return

        changed = 0
        for item in self._pos_repo.get_order_items(pos_order.id):
            if item.status is not target:
                self._pos_repo.update_order_item_status(item.id, target)
                changed += 1

        if changed:
            self._projector.project(pos_order.id)
            logger.info(
                "Updated POS order %s items to status: %s (from digital menu status: %s)",
                pos_order.id,
                target.value,
                order.raw_status,
            )
