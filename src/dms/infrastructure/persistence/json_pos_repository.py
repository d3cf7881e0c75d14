"""JSON-file-backed implementation of PosRepository.

One file per collection under the data directory.  Used for local runs
and demos; a host POS plugs in its own PosRepository.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

from dms.domain.model.pos import (
    Floor,
    Invoice,
    ItemStatus,
    MenuItem,
    OrderItem,
    PosOrder,
    PosOrderStatus,
    Table,
    TableStatus,
)
from dms.domain.model.value_objects import Money
from dms.domain.repository.pos_repository import PosRepository


class _JsonCollection:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    def load(self) -> list[dict]:
        return json.loads(self._file_path.read_text(encoding="utf-8"))

    def persist(self, records: list[dict]) -> None:
        self._file_path.write_text(
            json.dumps(records, indent=2) + "\n", encoding="utf-8"
        )

    def find(self, record_id: str) -> dict | None:
        for raw in self.load():
            if raw["id"] == record_id:
                return raw
        return None

    def upsert(self, record: dict) -> None:
        records = self.load()
        for i, raw in enumerate(records):
            if raw["id"] == record["id"]:
                records[i] = record
                break
        else:
            records.append(record)
        self.persist(records)

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("[]", encoding="utf-8")


class JsonPosRepository(PosRepository):

    def __init__(self, data_dir: Path) -> None:
        self._orders = _JsonCollection(data_dir / "orders.json")
        self._items = _JsonCollection(data_dir / "order_items.json")
        self._tables = _JsonCollection(data_dir / "tables.json")
        self._floors = _JsonCollection(data_dir / "floors.json")
        self._invoices = _JsonCollection(data_dir / "invoices.json")
        self._menu_items = _JsonCollection(data_dir / "menu_items.json")

    # --- Orders ----------------------------------------------------------------

    def get_order(self, order_id: str) -> PosOrder | None:
        raw = self._orders.find(order_id)
        return _order_to_domain(raw) if raw else None

    def create_order(self, order: PosOrder) -> PosOrder:
        order.id = str(uuid4())
        self._orders.upsert(_order_to_raw(order))
        return order

    def update_order_total(self, order_id: str, total: Money) -> None:
        order = self.get_order(order_id)
        if order is not None:
            order.total = total
            self._orders.upsert(_order_to_raw(order))

    def checkout_order(self, order_id: str, payment_mode: str) -> PosOrder | None:
        order = self.get_order(order_id)
        if order is None:
            return None
        now = datetime.now(timezone.utc)
        order.status = PosOrderStatus.PAID
        order.payment_mode = payment_mode
        order.paid_at = now
        order.completed_at = now
        self._orders.upsert(_order_to_raw(order))
        return order

    # --- Order items -----------------------------------------------------------

    def create_order_item(self, item: OrderItem) -> OrderItem:
        item.id = str(uuid4())
        self._items.upsert(_item_to_raw(item))
        return item

    def get_order_items(self, order_id: str) -> list[OrderItem]:
        return [_item_to_domain(raw) for raw in self._items.load() if raw["order_id"] == order_id]

    def update_order_item_status(self, item_id: str, status: ItemStatus) -> OrderItem | None:
        raw = self._items.find(item_id)
        if raw is None:
            return None
        item = _item_to_domain(raw)
        item.status = status
        self._items.upsert(_item_to_raw(item))
        return item

    # --- Tables and floors -----------------------------------------------------

    def get_tables(self) -> list[Table]:
        return [_table_to_domain(raw) for raw in self._tables.load()]

    def get_table(self, table_id: str) -> Table | None:
        raw = self._tables.find(table_id)
        return _table_to_domain(raw) if raw else None

    def update_table_status(self, table_id: str, status: TableStatus) -> Table | None:
        table = self.get_table(table_id)
        if table is None:
            return None
        table.status = status
        self._tables.upsert(_table_to_raw(table))
        return table

    def update_table_order(self, table_id: str, order_id: str | None) -> Table | None:
        table = self.get_table(table_id)
        if table is None:
            return None
        table.current_order_id = order_id
        self._tables.upsert(_table_to_raw(table))
        return table

    def get_floors(self) -> list[Floor]:
        floors = [
            Floor(id=raw["id"], name=raw["name"], display_order=raw.get("display_order", 0))
            for raw in self._floors.load()
        ]
        return sorted(floors, key=lambda f: f.display_order)

    def get_floor(self, floor_id: str) -> Floor | None:
        for floor in self.get_floors():
            if floor.id == floor_id:
                return floor
        return None

    # --- Invoices and catalog --------------------------------------------------

    def get_invoices(self) -> list[Invoice]:
        return [_invoice_to_domain(raw) for raw in self._invoices.load()]

    def create_invoice(self, invoice: Invoice) -> Invoice:
        invoice.id = str(uuid4())
        self._invoices.upsert(_invoice_to_raw(invoice))
        return invoice

    def get_menu_items(self) -> list[MenuItem]:
        return [
            MenuItem(
                id=raw["id"],
                name=raw["name"],
                price=Money.of(raw["price"]),
                is_veg=raw.get("is_veg", True),
                available=raw.get("available", True),
            )
            for raw in self._menu_items.load()
        ]


# --- Serialization ---------------------------------------------------------------


def _dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _order_to_raw(order: PosOrder) -> dict:
    return {
        "id": order.id,
        "table_id": order.table_id,
        "order_type": order.order_type,
        "status": order.status.value,
        "total": str(order.total.amount),
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone,
        "customer_address": order.customer_address,
        "payment_mode": order.payment_mode,
        "created_at": order.created_at.isoformat(),
        "paid_at": _dt(order.paid_at),
        "completed_at": _dt(order.completed_at),
    }


def _order_to_domain(raw: dict) -> PosOrder:
    return PosOrder(
        id=raw["id"],
        table_id=raw.get("table_id"),
        order_type=raw["order_type"],
        status=PosOrderStatus(raw["status"]),
        total=Money.of(raw.get("total", "0")),
        customer_name=raw.get("customer_name"),
        customer_phone=raw.get("customer_phone"),
        customer_address=raw.get("customer_address"),
        payment_mode=raw.get("payment_mode"),
        created_at=datetime.fromisoformat(raw["created_at"]),
        paid_at=_parse_dt(raw.get("paid_at")),
        completed_at=_parse_dt(raw.get("completed_at")),
    )


def _item_to_raw(item: OrderItem) -> dict:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "menu_item_id": item.menu_item_id,
        "name": item.name,
        "quantity": item.quantity,
        "price": str(item.price.amount),
        "notes": item.notes,
        "status": item.status.value,
        "is_veg": item.is_veg,
    }


def _item_to_domain(raw: dict) -> OrderItem:
    return OrderItem(
        id=raw["id"],
        order_id=raw["order_id"],
        menu_item_id=raw["menu_item_id"],
        name=raw["name"],
        quantity=raw["quantity"],
        price=Money.of(raw["price"]),
        notes=raw.get("notes"),
        status=ItemStatus(raw["status"]),
        is_veg=raw.get("is_veg", True),
    )


def _table_to_raw(table: Table) -> dict:
    return {
        "id": table.id,
        "table_number": table.table_number,
        "seats": table.seats,
        "status": table.status.value,
        "current_order_id": table.current_order_id,
        "floor_id": table.floor_id,
    }


def _table_to_domain(raw: dict) -> Table:
    return Table(
        id=raw["id"],
        table_number=str(raw["table_number"]),
        seats=raw.get("seats", 4),
        status=TableStatus(raw.get("status", "free")),
        current_order_id=raw.get("current_order_id"),
        floor_id=raw.get("floor_id"),
    )


def _invoice_to_raw(invoice: Invoice) -> dict:
    return {
        "id": invoice.id,
        "invoice_number": invoice.invoice_number,
        "order_id": invoice.order_id,
        "table_number": invoice.table_number,
        "floor_name": invoice.floor_name,
        "customer_name": invoice.customer_name,
        "customer_phone": invoice.customer_phone,
        "subtotal": str(invoice.subtotal.amount),
        "tax": str(invoice.tax.amount),
        "discount": str(invoice.discount.amount),
        "total": str(invoice.total.amount),
        "payment_mode": invoice.payment_mode,
        "status": invoice.status,
        "items": invoice.items,
        "notes": invoice.notes,
        "created_at": invoice.created_at.isoformat(),
    }


def _invoice_to_domain(raw: dict) -> Invoice:
    return Invoice(
        id=raw["id"],
        invoice_number=raw["invoice_number"],
        order_id=raw["order_id"],
        table_number=raw.get("table_number"),
        floor_name=raw.get("floor_name"),
        customer_name=raw.get("customer_name"),
        customer_phone=raw.get("customer_phone"),
        subtotal=Money.of(raw["subtotal"]),
        tax=Money.of(raw["tax"]),
        discount=Money.of(raw.get("discount", "0")),
        total=Money.of(raw["total"]),
        payment_mode=raw["payment_mode"],
        status=raw.get("status", "Paid"),
        items=raw.get("items", "[]"),
        notes=raw.get("notes"),
        created_at=datetime.fromisoformat(raw["created_at"]),
    )
