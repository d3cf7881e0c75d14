"""Abstract repository over the host POS store.

Defined in the domain layer so the sync engine never depends on how the
POS persists its data.  Concrete implementations live in the
infrastructure layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from dms.domain.model.pos import (
    Floor,
    Invoice,
    ItemStatus,
    MenuItem,
    OrderItem,
    PosOrder,
    Table,
    TableStatus,
)
from dms.domain.model.value_objects import Money


class PosRepository(ABC):

    # --- Orders ----------------------------------------------------------------

    @abstractmethod
    def get_order(self, order_id: str) -> PosOrder | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def create_order(self, order: PosOrder) -> PosOrder:
        """Persist a new order and return it with its assigned ID."""

    @abstractmethod
    def update_order_total(self, order_id: str, total: Money) -> None:
        """Overwrite the stored order total."""

    @abstractmethod
    def checkout_order(self, order_id: str, payment_mode: str) -> PosOrder | None:
        """Mark the order paid with the given mode; None if it does not exist."""

    # --- Order items -----------------------------------------------------------

    @abstractmethod
    def create_order_item(self, item: OrderItem) -> OrderItem:
        """Persist a new order item and return it with its assigned ID."""

    @abstractmethod
    def get_order_items(self, order_id: str) -> list[OrderItem]:
        """Return every item of an order."""

    @abstractmethod
    def update_order_item_status(self, item_id: str, status: ItemStatus) -> OrderItem | None:
        """Change an item's kitchen status; None if it does not exist."""

    # --- Tables and floors -----------------------------------------------------

    @abstractmethod
    def get_tables(self) -> list[Table]:
        """Return every table, in display order."""

    @abstractmethod
    def get_table(self, table_id: str) -> Table | None:
        """Return a table by its ID, or None if not found."""

    @abstractmethod
    def update_table_status(self, table_id: str, status: TableStatus) -> Table | None:
        """Change a table's status; None if it does not exist."""

    @abstractmethod
    def update_table_order(self, table_id: str, order_id: str | None) -> Table | None:
        """Link a table to an order, or unlink it with None."""

    @abstractmethod
    def get_floors(self) -> list[Floor]:
        """Return every floor."""

    @abstractmethod
    def get_floor(self, floor_id: str) -> Floor | None:
        """Return a floor by its ID, or None if not found."""

    # --- Invoices and catalog --------------------------------------------------

    @abstractmethod
    def get_invoices(self) -> list[Invoice]:
        """Return every issued invoice."""

    @abstractmethod
    def create_invoice(self, invoice: Invoice) -> Invoice:
        """Persist a new invoice and return it with its assigned ID."""

    @abstractmethod
    def get_menu_items(self) -> list[MenuItem]:
        """Return the full menu catalog."""
