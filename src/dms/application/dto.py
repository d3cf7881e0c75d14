"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI / scheduler and the application layer
without exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SyncResult:
    """Output of one sync pass."""

    new_orders: int = 0
    updated_orders: int = 0

    @property
    def total(self) -> int:
        return self.new_orders + self.updated_orders


@dataclass(frozen=True)
class SyncStatusDTO:
    is_running: bool
    processed_orders: int

    def to_dict(self) -> dict:
        return {"isRunning": self.is_running, "processedOrders": self.processed_orders}


@dataclass(frozen=True)
class ExternalOrderSummaryDTO:
    """Output: one digital menu order as listed by the CLI."""

    order_id: str
    customer_name: str
    status: str
    payment_status: str
    table: str
    total: str
    synced: bool
    pos_order_id: str
