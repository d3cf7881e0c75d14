"""POS-side entities the sync engine reads and mutates.

These are owned by the host POS application; the engine only ever
touches them through ``PosRepository``.  New entities are created with
``id=None`` and the repository assigns the identifier on create, the same
way an aggregate gets its id on first save.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from dms.domain.model.value_objects import Money

UNKNOWN_MENU_ITEM_ID = "unknown"


class PosOrderStatus(Enum):
    SAVED = "saved"
    SENT_TO_KITCHEN = "sent_to_kitchen"
    BILLED = "billed"
    PAID = "paid"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ItemStatus(Enum):
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"


class TableStatus(Enum):
    FREE = "free"
    OCCUPIED = "occupied"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class PosOrder:
    id: str | None
    table_id: str | None
    order_type: str
    status: PosOrderStatus
    total: Money = field(default_factory=Money.zero)
    customer_name: str | None = None
    customer_phone: str | None = None
    customer_address: str | None = None
    payment_mode: str | None = None
    created_at: datetime = field(default_factory=_now)
    paid_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_settled(self) -> bool:
        """Paid or billed orders never go through auto-checkout again."""
        return self.status in (PosOrderStatus.PAID, PosOrderStatus.BILLED)

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "tableId": self.table_id,
            "orderType": self.order_type,
            "status": self.status.value,
            "total": str(self.total),
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "paymentMode": self.payment_mode,
            "createdAt": self.created_at.isoformat(),
            "paidAt": self.paid_at.isoformat() if self.paid_at else None,
        }


@dataclass
class OrderItem:
    id: str | None
    order_id: str
    menu_item_id: str
    name: str
    quantity: int
    price: Money
    status: ItemStatus = ItemStatus.NEW
    notes: str | None = None
    is_veg: bool = True

    @property
    def line_total(self) -> Money:
        return self.price * self.quantity

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "orderId": self.order_id,
            "menuItemId": self.menu_item_id,
            "name": self.name,
            "quantity": self.quantity,
            "price": str(self.price),
            "notes": self.notes,
            "status": self.status.value,
            "isVeg": self.is_veg,
        }


@dataclass
class Floor:
    id: str
    name: str
    display_order: int = 0


@dataclass
class Table:
    id: str
    table_number: str
    seats: int = 4
    status: TableStatus = TableStatus.FREE
    current_order_id: str | None = None
    floor_id: str | None = None

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "tableNumber": self.table_number,
            "seats": self.seats,
            "status": self.status.value,
            "currentOrderId": self.current_order_id,
            "floorId": self.floor_id,
        }


@dataclass
class MenuItem:
    id: str
    name: str
    price: Money
    is_veg: bool = True
    available: bool = True


@dataclass
class Invoice:
    """Issued once per settled order; never mutated after creation."""

    id: str | None
    invoice_number: str
    order_id: str
    subtotal: Money
    tax: Money
    total: Money
    payment_mode: str
    items: str  # JSON snapshot of the order items
    discount: Money = field(default_factory=Money.zero)
    status: str = "Paid"
    table_number: str | None = None
    floor_name: str | None = None
    customer_name: str | None = None
    customer_phone: str | None = None
    notes: str | None = None
    created_at: datetime = field(default_factory=_now)

    @staticmethod
    def snapshot_items(order_items: list[OrderItem]) -> str:
        lines = []
        for item in order_items:
            line = {
                "name": item.name,
                "quantity": item.quantity,
                "price": float(item.price.amount),
                "isVeg": item.is_veg,
            }
            if item.notes:
                line["notes"] = item.notes
            lines.append(line)
        return json.dumps(lines)

    def to_payload(self) -> dict:
        return {
            "id": self.id,
            "invoiceNumber": self.invoice_number,
            "orderId": self.order_id,
            "tableNumber": self.table_number,
            "floorName": self.floor_name,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "discount": str(self.discount),
            "total": str(self.total),
            "paymentMode": self.payment_mode,
            "status": self.status,
            "items": self.items,
            "createdAt": self.created_at.isoformat(),
        }
