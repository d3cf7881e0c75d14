"""In-memory fakes for testing.

These implement the same abstract interfaces as the JSON / MongoDB
adapters but keep everything in dicts.  Reads return copies so handlers
cannot accidentally depend on mutating what a repository handed them.
"""

from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

from dms.domain.events import EventPublisher, EventType
from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder
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
from dms.domain.repository.external_order_source import ExternalOrderSource
from dms.domain.repository.pos_repository import PosRepository


class FakePosRepository(PosRepository):

    def __init__(
        self,
        tables: list[Table] | None = None,
        floors: list[Floor] | None = None,
        menu_items: list[MenuItem] | None = None,
    ) -> None:
        self.orders: dict[str, PosOrder] = {}
        self.items: dict[str, OrderItem] = {}
        self.tables: dict[str, Table] = {t.id: t for t in tables or []}
        self.floors: dict[str, Floor] = {f.id: f for f in floors or []}
        self.invoices: list[Invoice] = []
        self.menu_items: list[MenuItem] = list(menu_items or [])
        self.item_status_writes = 0
        self.fail_checkout = False
        self._seq = 0

    def _next_id(self, prefix: str) -> str:
        self._seq += 1
        return f"{prefix}-{self._seq}"

    # --- Orders ----------------------------------------------------------------

    def get_order(self, order_id: str) -> PosOrder | None:
        return copy.deepcopy(self.orders.get(order_id))

    def create_order(self, order: PosOrder) -> PosOrder:
        order.id = self._next_id("order")
        self.orders[order.id] = copy.deepcopy(order)
        return order

    def update_order_total(self, order_id: str, total: Money) -> None:
        if order_id in self.orders:
            self.orders[order_id].total = total

    def checkout_order(self, order_id: str, payment_mode: str) -> PosOrder | None:
        order = self.orders.get(order_id)
        if order is None or self.fail_checkout:
            return None
        order.status = PosOrderStatus.PAID
        order.payment_mode = payment_mode
        order.paid_at = datetime.now(timezone.utc)
        return copy.deepcopy(order)

    # --- Order items -----------------------------------------------------------

    def create_order_item(self, item: OrderItem) -> OrderItem:
        item.id = self._next_id("item")
        self.items[item.id] = copy.deepcopy(item)
        return item

    def get_order_items(self, order_id: str) -> list[OrderItem]:
        return [copy.deepcopy(i) for i in self.items.values() if i.order_id == order_id]

    def update_order_item_status(self, item_id: str, status: ItemStatus) -> OrderItem | None:
        item = self.items.get(item_id)
        if item is None:
            return None
        item.status = status
        self.item_status_writes += 1
        return copy.deepcopy(item)

    # --- Tables and floors -----------------------------------------------------

    def get_tables(self) -> list[Table]:
        return [copy.deepcopy(t) for t in self.tables.values()]

    def get_table(self, table_id: str) -> Table | None:
        return copy.deepcopy(self.tables.get(table_id))

    def update_table_status(self, table_id: str, status: TableStatus) -> Table | None:
        table = self.tables.get(table_id)
        if table is None:
            return None
        table.status = status
        return copy.deepcopy(table)

    def update_table_order(self, table_id: str, order_id: str | None) -> Table | None:
        table = self.tables.get(table_id)
        if table is None:
            return None
        table.current_order_id = order_id
        return copy.deepcopy(table)

    def get_floors(self) -> list[Floor]:
        return [copy.deepcopy(f) for f in self.floors.values()]

    def get_floor(self, floor_id: str) -> Floor | None:
        return copy.deepcopy(self.floors.get(floor_id))

    # --- Invoices and catalog --------------------------------------------------

    def get_invoices(self) -> list[Invoice]:
        return [copy.deepcopy(i) for i in self.invoices]

    def create_invoice(self, invoice: Invoice) -> Invoice:
        invoice.id = self._next_id("invoice")
        self.invoices.append(copy.deepcopy(invoice))
        return invoice

    def get_menu_items(self) -> list[MenuItem]:
        return [copy.deepcopy(m) for m in self.menu_items]


class FakeExternalOrderSource(ExternalOrderSource):

    def __init__(
        self,
        customer_docs: list[dict] | None = None,
        customers: list[dict] | None = None,
    ) -> None:
        self.customer_docs: list[dict] = list(customer_docs or [])
        self.customers: list[dict] = list(customers or [])
        self.unavailable = False
        self.reject_mark_synced = False
        self.fail_customer_writes = False

    def list_customer_documents(self) -> list[dict]:
        if self.unavailable:
            raise SourceUnavailableError("digital menu store is down")
        return [copy.deepcopy(d) for d in self.customer_docs if d.get("orders")]

    def mark_order_synced(
        self,
        order: ExternalOrder,
        pos_order_id: str,
        synced_at: datetime,
    ) -> bool:
        if self.reject_mark_synced:
            return False
        for doc in self.customer_docs:
            if doc.get("_id") != order.customer_doc_id:
                continue
            for embedded in doc.get("orders", []):
                if embedded.get("_id") == order.embedded_id:
                    embedded.update(syncedToPOS=True, syncedAt=synced_at, posOrderId=pos_order_id)
                    return True
        return False

    def update_customer_table_status(self, customer_phone: str, table_status: str) -> bool:
        if self.fail_customer_writes:
            raise SourceUnavailableError("customers collection is down")
        for customer in self.customers:
            if customer.get("phoneNumber") == customer_phone:
                customer["tableStatus"] = table_status
                return True
        return False

    def list_orders(self) -> list[dict]:
        return [copy.deepcopy(d) for d in self.customer_docs]

    def list_logged_in_customers(self) -> list[dict]:
        return [c for c in self.customers if c.get("loginStatus") == "loggedin"]

    # --- Test helpers ----------------------------------------------------------

    def embedded(self, order_id: str) -> dict:
        for doc in self.customer_docs:
            for embedded in doc.get("orders", []):
                if embedded.get("_id") == order_id:
                    return embedded
        raise KeyError(order_id)

    def customer(self, phone: str) -> dict:
        for customer in self.customers:
            if customer.get("phoneNumber") == phone:
                return customer
        raise KeyError(phone)


class RecordingPublisher(EventPublisher):

    def __init__(self) -> None:
        self.events: list[tuple[EventType, dict[str, Any]]] = []

    def publish(self, event_type: EventType, payload: dict[str, Any]) -> None:
        self.events.append((event_type, payload))

    def of_type(self, event_type: EventType) -> list[dict[str, Any]]:
        return [payload for t, payload in self.events if t is event_type]
