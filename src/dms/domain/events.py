"""Events pushed to POS screens so they refresh without polling."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class EventType(Enum):
    ORDER_CREATED = "order_created"
    ORDER_ITEM_ADDED = "order_item_added"
    TABLE_UPDATED = "table_updated"
    ORDER_PAID = "order_paid"
    INVOICE_CREATED = "invoice_created"
    DIGITAL_MENU_ORDER_SYNCED = "digital_menu_order_synced"
    DIGITAL_MENU_ORDER_UPDATED = "digital_menu_order_updated"
    DIGITAL_MENU_SYNCED = "digital_menu_synced"


class EventPublisher(ABC):
    """Fire-and-forget push channel.

    Implementations must not raise: a lost refresh is not worth failing a
    sync over.
    """

    @abstractmethod
    def publish(self, event_type: EventType, payload: dict[str, Any]) -> None:
        """Send one event to every listening screen."""
