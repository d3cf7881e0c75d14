"""Application service: Auto-checkout when the digital menu reports payment.

Settles the POS order, frees its table and issues the invoice.  Running
it twice for the same order is harmless: the order's *current* POS status
is re-read first and a paid or billed order is left alone.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal

from dms.domain.events import EventPublisher, EventType
from dms.domain.model.external_order import ExternalOrder
from dms.domain.model.pos import Invoice, PosOrder, Table, TableStatus
from dms.domain.model.value_objects import Money
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository
from dms.domain.service.table_status_projector import write_customer_table_status

logger = logging.getLogger(__name__)

TAX_RATE = Decimal("0.05")
DEFAULT_PAYMENT_MODE = "cash"


def invoice_number_for(existing_count: int) -> str:
    return f"INV-{existing_count + 1:04d}"


class AutoCheckoutHandler:

    def __init__(
        self,
        pos_repo: PosRepository,
        source: ExternalOrderSource,
        publisher: EventPublisher,
        invoice_number_lock: threading.Lock | None = None,
    ) -> None:
        self._pos_repo = pos_repo
        self._source = source
        self._publisher = publisher
        # Invoice numbers are "count + 1"; serialize the read-then-create.
        self._invoice_number_lock = invoice_number_lock or threading.Lock()

    def handle(self, order: ExternalOrder, pos_order: PosOrder) -> Invoice | None:
        """Check out *pos_order* and return the invoice, or None if skipped."""
        current = self._pos_repo.get_order(pos_order.id)
        if current is None:
            logger.warning("POS order %s not found, cannot auto-checkout", pos_order.id)
            return None
        if current.is_settled:
            logger.info(
                "POS order %s is already %s, skipping auto-checkout",
                current.id,
                current.status.value,
            )
            return None

        logger.info("Auto-generating invoice for digital menu order %s", order.order_id)

        order_items = self._pos_repo.get_order_items(current.id)
        subtotal = Money.zero()
        for item in order_items:
            subtotal = subtotal + item.line_total
        subtotal = subtotal.quantize()
        tax = (subtotal * TAX_RATE).quantize()
        total = (subtotal + tax).quantize()

        payment_mode = (order.payment_method or DEFAULT_PAYMENT_MODE).lower()

        checked_out = self._pos_repo.checkout_order(current.id, payment_mode)
        if checked_out is None:
            logger.error("Failed to checkout order %s", current.id)
            return None

        table = self._free_table(checked_out)

        customer_phone = checked_out.customer_phone or order.customer_phone
        if customer_phone:
            write_customer_table_status(self._source, customer_phone, TableStatus.FREE)

        floor_name = None
        if table is not None and table.floor_id:
            floor = self._pos_repo.get_floor(table.floor_id)
            floor_name = floor.name if floor else None

        with self._invoice_number_lock:
            invoice_number = invoice_number_for(len(self._pos_repo.get_invoices()))
            invoice = self._pos_repo.create_invoice(
                Invoice(
                    id=None,
                    invoice_number=invoice_number,
                    order_id=checked_out.id,
                    table_number=table.table_number if table else None,
                    floor_name=floor_name,
                    customer_name=checked_out.customer_name,
                    customer_phone=checked_out.customer_phone,
                    subtotal=subtotal,
                    tax=tax,
                    total=total,
                    payment_mode=payment_mode,
                    status="Paid",
                    items=Invoice.snapshot_items(order_items),
                )
            )

        self._publisher.publish(EventType.ORDER_PAID, checked_out.to_payload())
        self._publisher.publish(EventType.INVOICE_CREATED, invoice.to_payload())

        logger.info(
            "Auto-generated invoice %s for digital menu order %s",
            invoice_number,
            order.order_id,
        )
        return invoice

    def _free_table(self, order: PosOrder) -> Table | None:
        """Unlink and free the order's table; return it as it was before."""
        if not order.table_id:
            return None

        table = self._pos_repo.get_table(order.table_id)
        self._pos_repo.update_table_order(order.table_id, None)
        freed = self._pos_repo.update_table_status(order.table_id, TableStatus.FREE)
        if freed is not None:
            self._publisher.publish(EventType.TABLE_UPDATED, freed.to_payload())
        return table
