"""Digital menu orders as read from the external source.

The digital menu stores one document per customer with the placed orders
embedded in an ``orders`` array.  Everything here is read-only from the
engine's point of view; the only writes back are the sync bookkeeping
fields, done through ``ExternalOrderSource``.

Status strings are normalized exactly once, in ``ExternalOrder.from_document``,
so the rest of the engine only ever compares enum members.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator

from dms.domain.model.value_objects import Money


class ExternalOrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    INVOICE_GENERATED = "invoice_generated"
    UNKNOWN = "unknown"

    @classmethod
    def normalize(cls, raw: str | None) -> ExternalOrderStatus:
        return _STATUS_SPELLINGS.get(raw or "", cls.UNKNOWN)

    @property
    def is_ingestible(self) -> bool:
        return self in (ExternalOrderStatus.PENDING, ExternalOrderStatus.CONFIRMED)


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    INVOICE_GENERATED = "invoice_generated"
    OTHER = "other"

    @classmethod
    def normalize(cls, raw: str | None) -> PaymentStatus:
        # The digital menu omits paymentStatus on fresh orders.
        if not raw:
            return cls.PENDING
        return _PAYMENT_SPELLINGS.get(raw, cls.OTHER)


_STATUS_SPELLINGS: dict[str, ExternalOrderStatus] = {
    "pending": ExternalOrderStatus.PENDING,
    "confirmed": ExternalOrderStatus.CONFIRMED,
    "preparing": ExternalOrderStatus.PREPARING,
    "completed": ExternalOrderStatus.COMPLETED,
    "cancelled": ExternalOrderStatus.CANCELLED,
    "invoice_generated": ExternalOrderStatus.INVOICE_GENERATED,
    "invoice generated": ExternalOrderStatus.INVOICE_GENERATED,
}

_PAYMENT_SPELLINGS: dict[str, PaymentStatus] = {
    "pending": PaymentStatus.PENDING,
    "paid": PaymentStatus.PAID,
    "invoice_generated": PaymentStatus.INVOICE_GENERATED,
    "invoice generated": PaymentStatus.INVOICE_GENERATED,
}


@dataclass(frozen=True)
class ExternalOrderItem:
    menu_item_name: str
    quantity: int
    price: Money
    spice_level: str | None = None
    notes: str | None = None

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity

    @property
    def kitchen_notes(self) -> str | None:
        """Free-text notes with the spice level appended, or None."""
        parts = [self.notes, f"Spice: {self.spice_level}" if self.spice_level else None]
        joined = " | ".join(p for p in parts if p)
        return joined or None


@dataclass
class ExternalOrder:
    """One order embedded in a digital menu customer document."""

    order_id: str
    customer_doc_id: Any
    embedded_id: Any  # raw ``_id`` as stored, used for the positional update
    customer_id: str | None
    customer_name: str | None
    customer_phone: str | None
    status: ExternalOrderStatus
    raw_status: str | None
    payment_status: PaymentStatus
    raw_payment_status: str
    items: list[ExternalOrderItem] = field(default_factory=list)
    subtotal: Money = field(default_factory=Money.zero)
    tax: Money = field(default_factory=Money.zero)
    total: Money = field(default_factory=Money.zero)
    payment_method: str | None = None
    table_number: str | None = None
    floor_number: str | None = None
    order_date: datetime | str | None = None
    synced_to_pos: bool = False
    synced_at: datetime | str | None = None
    pos_order_id: str | None = None

    # --- Factory ---------------------------------------------------------------

    @staticmethod
    def from_document(raw: dict, customer_doc: dict) -> ExternalOrder:
        """Build an order from its embedded dict plus the owning customer doc."""
        embedded_id = raw.get("_id")
        if embedded_id is not None:
            order_id = str(embedded_id)
        else:
            order_id = f"{customer_doc.get('_id')}_{raw.get('orderDate')}"

        table_number = raw.get("tableNumber")
        floor_number = raw.get("floorNumber")

        return ExternalOrder(
            order_id=order_id,
            customer_doc_id=customer_doc.get("_id"),
            embedded_id=embedded_id,
            customer_id=customer_doc.get("customerId"),
            customer_name=customer_doc.get("customerName"),
            customer_phone=customer_doc.get("customerPhone"),
            status=ExternalOrderStatus.normalize(raw.get("status")),
            raw_status=raw.get("status"),
            payment_status=PaymentStatus.normalize(raw.get("paymentStatus")),
            raw_payment_status=raw.get("paymentStatus") or "pending",
            items=[_item_from_raw(i) for i in raw.get("items") or []],
            subtotal=Money.of(raw.get("subtotal")),
            tax=Money.of(raw.get("tax")),
            total=Money.of(raw.get("total")),
            payment_method=raw.get("paymentMethod"),
            table_number=str(table_number) if table_number not in (None, "") else None,
            floor_number=str(floor_number) if floor_number not in (None, "") else None,
            order_date=raw.get("orderDate"),
            synced_to_pos=raw.get("syncedToPOS") is True,
            synced_at=raw.get("syncedAt"),
            pos_order_id=raw.get("posOrderId"),
        )

    # --- Queries ---------------------------------------------------------------

    @property
    def wants_checkout(self) -> bool:
        """True when the digital menu signalled that billing is complete."""
        return (
            self.payment_status is PaymentStatus.INVOICE_GENERATED
            or self.status is ExternalOrderStatus.INVOICE_GENERATED
        )

    @property
    def location_label(self) -> str:
        if self.floor_number:
            return f"{self.table_number} on floor {self.floor_number}"
        return str(self.table_number)


def _item_from_raw(raw: dict) -> ExternalOrderItem:
    return ExternalOrderItem(
        menu_item_name=raw.get("menuItemName") or "",
        quantity=int(raw.get("quantity") or 0),
        price=Money.of(raw.get("price")),
        spice_level=raw.get("spiceLevel") or None,
        notes=raw.get("notes") or None,
    )


def iter_raw_orders(customer_docs: list[dict]) -> Iterator[tuple[dict, dict]]:
    """Yield ``(raw_order, customer_doc)`` pairs in stored order.

    Parsing is left to the caller so a malformed record can be skipped
    without losing the rest of the batch.
    """
    for customer_doc in customer_docs:
        orders = customer_doc.get("orders")
        if not isinstance(orders, list):
            continue
        for raw in orders:
            if isinstance(raw, dict):
                yield raw, customer_doc
