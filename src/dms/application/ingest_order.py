"""Application service: Ingest a digital menu order into the POS.

Creates the POS order and its items, seats it at the referenced table and
finally flags the digital menu order as synced.  The flag is written last
so a crash part-way leaves the order eligible for the next pass.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from dms.domain.events import EventPublisher, EventType
from dms.domain.exceptions import ValidationError
from dms.domain.model.external_order import ExternalOrder, PaymentStatus
from dms.domain.model.pos import (
    UNKNOWN_MENU_ITEM_ID,
    ItemStatus,
    MenuItem,
    OrderItem,
    PosOrder,
    PosOrderStatus,
    Table,
    TableStatus,
)
from dms.domain.model.sync_state import SyncState
from dms.domain.model.value_objects import Money
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository
from dms.domain.service.table_resolver import TableResolver
from dms.domain.service.table_status_projector import write_customer_table_status

logger = logging.getLogger(__name__)

ORDER_TYPE_DINE_IN = "dine-in"


class IngestOrderHandler:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
    ) -> None:
        self._pos_repo = pos_repo
        self._source = source
        self._publisher = publisher
        self._table_resolver = TableResolver(pos_repo)

    def handle(self, order: ExternalOrder, state: SyncState) -> str:
        """Create the POS order for *order* and return its ID.

        Steps:
        1. Resolve and occupy the table (optional, never blocks).
        2. Create the POS order and link the table to it.
        3. Create one POS item per digital menu item.
        4. Store the digital menu total, warning on a mismatch.
        5. Flag the digital menu order and record it in *state*.
        """
        if order.synced_to_pos or state.is_processed(order.order_id):
            raise ValidationError(f"Digital menu order {order.order_id} is already synced")
        if not order.status.is_ingestible:
            raise ValidationError(
                f"Digital menu order {order.order_id} has status "
                f"{order.raw_status!r}, expected pending or confirmed"
            )

        table = self._seat(order)

        pos_order = self._pos_repo.create_order(
            PosOrder(
                id=None,
                table_id=table.id if table else None,
                order_type=ORDER_TYPE_DINE_IN,
                # Unpaid orders go straight to the kitchen display.
                status=(
                    PosOrderStatus.BILLED
                    if order.payment_status is PaymentStatus.PAID
                    else PosOrderStatus.SENT_TO_KITCHEN
                ),
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                payment_mode=order.payment_method,
            )
        )
        self._publisher.publish(EventType.ORDER_CREATED, pos_order.to_payload())

        if table is not None:
            linked = self._pos_repo.update_table_order(table.id, pos_order.id)
            if linked is not None:
                self._publisher.publish(EventType.TABLE_UPDATED, linked.to_payload())

        subtotal = self._create_items(order, pos_order.id)
        self._store_total(order, pos_order.id, subtotal)

        if order.customer_phone:
            write_customer_table_status(self._source, order.customer_phone, TableStatus.OCCUPIED)

        if self._source.mark_order_synced(order, pos_order.id, datetime.now(timezone.utc)):
            state.mark_processed(order.order_id, order.status, order.payment_status)
            self._publisher.publish(
                EventType.DIGITAL_MENU_ORDER_SYNCED,
                {
                    "orderId": order.order_id,
                    "customerName": order.customer_name,
                    "status": order.raw_status,
                },
            )
            logger.info(
                "Synced digital menu order %s for %s as POS order %s",
                order.order_id,
                order.customer_name,
                pos_order.id,
            )
        else:
            logger.warning(
                "Failed to mark digital menu order %s as synced - no document matched",
                order.order_id,
            )

        return pos_order.id

    # --- Steps -------------------------------------------------------------------

    def _seat(self, order: ExternalOrder) -> Table | None:
        if not order.table_number:
            return None

        table = self._table_resolver.resolve(order.table_number, order.floor_number)
        if table is None:
            logger.warning("Table %s not found in POS system", order.location_label)
            return None

        if table.status is TableStatus.FREE:
            occupied = self._pos_repo.update_table_status(table.id, TableStatus.OCCUPIED)
            if occupied is not None:
                self._publisher.publish(EventType.TABLE_UPDATED, occupied.to_payload())
        return table

    def _create_items(self, order: ExternalOrder, pos_order_id: str) -> Money:
        """Create the POS items and return their locally computed subtotal."""
        catalog = self._pos_repo.get_menu_items()
        subtotal = Money.zero()

        for ext_item in order.items:
            menu_item = _find_menu_item(catalog, ext_item.menu_item_name)
            if menu_item is None:
                logger.info(
                    "Menu item %r not in catalog, recording it as unknown",
                    ext_item.menu_item_name,
                )

            created = self._pos_repo.create_order_item(
                OrderItem(
                    id=None,
                    order_id=pos_order_id,
                    menu_item_id=menu_item.id if menu_item else UNKNOWN_MENU_ITEM_ID,
                    name=ext_item.menu_item_name,
                    quantity=ext_item.quantity,
                    price=ext_item.price.quantize(),
                    status=ItemStatus.NEW,
                    notes=ext_item.kitchen_notes,
                    is_veg=menu_item.is_veg if menu_item else True,
                )
            )
            subtotal = subtotal + ext_item.line_total
            self._publisher.publish(
                EventType.ORDER_ITEM_ADDED,
                {"orderId": pos_order_id, "item": created.to_payload()},
            )

        return subtotal

    def _store_total(self, order: ExternalOrder, pos_order_id: str, subtotal: Money) -> None:
        # The digital menu total is authoritative; a mismatch is only reported.
        expected = (subtotal + order.tax).quantize()
        declared = order.total.quantize()
        if declared.differs_from(expected):
            logger.warning(
                "Order total mismatch for %s: Digital Menu=%s, Calculated=%s",
                order.customer_name,
                declared,
                expected,
            )
        self._pos_repo.update_order_total(pos_order_id, declared)


def _find_menu_item(catalog: list[MenuItem], name: str) -> MenuItem | None:
    wanted = name.lower()
    for item in catalog:
        if item.name.lower() == wanted:
            return item
    return None
