"""Abstract access to the digital menu's document store."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from dms.domain.model.external_order import ExternalOrder


class ExternalOrderSource(ABC):
    """Customer documents with embedded orders, owned by the digital menu.

    Implementations raise ``SourceUnavailableError`` when the store cannot
    be read at all.
    """

    @abstractmethod
    def list_customer_documents(self) -> list[dict]:
        """Return every customer document that has a non-empty ``orders`` array."""

    @abstractmethod
    def mark_order_synced(
        self,
        order: ExternalOrder,
        pos_order_id: str,
        synced_at: datetime,
    ) -> bool:
        """Set ``syncedToPOS``, ``syncedAt`` and ``posOrderId`` on one embedded order.

        Returns False when no embedded order matched.
        """

    @abstractmethod
    def update_customer_table_status(self, customer_phone: str, table_status: str) -> bool:
        """Write ``tableStatus`` onto the customer record keyed by phone.

        Returns True when a record was modified.  The write is best-effort:
        a store failure is logged and reported as False, never raised.
        """

    @abstractmethod
    def list_orders(self) -> list[dict]:
        """Return raw customer-order documents, newest first."""

    @abstractmethod
    def list_logged_in_customers(self) -> list[dict]:
        """Return customers whose ``loginStatus`` is ``loggedin``."""
