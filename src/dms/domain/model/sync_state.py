"""SyncState: what the engine has already pushed into the POS.

One instance is owned by the scheduler and handed to every handler.  It
lives for the process lifetime and is rebuilt on startup from the
``syncedToPOS`` flags on the digital menu documents; those flags, not this
object, are the source of truth.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dms.domain.model.external_order import ExternalOrderStatus, PaymentStatus


@dataclass
class SyncState:
    """Invariant: every id in ``processed_ids`` has a ``posOrderId`` recorded
    on its digital menu order.  No entry means "never ingested".
    """

    processed_ids: set[str] = field(default_factory=set)
    statuses: dict[str, ExternalOrderStatus] = field(default_factory=dict)
    payment_statuses: dict[str, PaymentStatus] = field(default_factory=dict)

    def is_processed(self, order_id: str) -> bool:
        return order_id in self.processed_ids

    def mark_processed(
        self,
        order_id: str,
        status: ExternalOrderStatus,
        payment_status: PaymentStatus,
    ) -> None:
        self.processed_ids.add(order_id)
        self.observe(order_id, status, payment_status)

    def observe(
        self,
        order_id: str,
        status: ExternalOrderStatus,
        payment_status: PaymentStatus,
    ) -> None:
        """Record the latest values seen on the digital menu."""
        self.statuses[order_id] = status
        self.payment_statuses[order_id] = payment_status

    def has_observation(self, order_id: str) -> bool:
        return order_id in self.statuses and order_id in self.payment_statuses

    def clear(self) -> None:
        self.processed_ids.clear()
        self.statuses.clear()
        self.payment_statuses.clear()

    @property
    def processed_count(self) -> int:
        return len(self.processed_ids)
