"""JSON-file-backed implementation of ExternalOrderSource.

Mirrors the digital menu's MongoDB collections as two JSON arrays so the
engine can run against exported data or a local fixture.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder
from dms.domain.repository.external_order_source import ExternalOrderSource

logger = logging.getLogger(__name__)


class JsonExternalOrderSource(ExternalOrderSource):

    def __init__(self, orders_path: Path, customers_path: Path) -> None:
        self._orders_path = orders_path
        self._customers_path = customers_path
        self._ensure_file(orders_path)
        self._ensure_file(customers_path)

    # --- ExternalOrderSource interface -----------------------------------------

    def list_customer_documents(self) -> list[dict]:
        return [
            doc for doc in self._load_raw(self._orders_path)
            if isinstance(doc.get("orders"), list) and doc["orders"]
        ]

    def mark_order_synced(
        self,
        order: ExternalOrder,
        pos_order_id: str,
        synced_at: datetime,
    ) -> bool:
        docs = self._load_raw(self._orders_path)
        for doc in docs:
            if doc.get("_id") != order.customer_doc_id:
                continue
            for embedded in doc.get("orders") or []:
                if self._matches(embedded, order):
                    embedded["syncedToPOS"] = True
                    embedded["syncedAt"] = synced_at.isoformat()
                    embedded["posOrderId"] = pos_order_id
                    self._persist_raw(self._orders_path, docs)
                    return True
        return False

    def update_customer_table_status(self, customer_phone: str, table_status: str) -> bool:
        try:
            customers = self._load_raw(self._customers_path)
        except SourceUnavailableError as exc:
            logger.warning("Failed to update customer %s tableStatus: %s", customer_phone, exc)
            return False
        modified = False
        for customer in customers:
            if customer.get("phoneNumber") == customer_phone and customer.get("tableStatus") != table_status:
                customer["tableStatus"] = table_status
                customer["updatedAt"] = datetime.now(timezone.utc).isoformat()
                modified = True
                break
        if modified:
            try:
                self._persist_raw(self._customers_path, customers)
            except OSError as exc:
                logger.warning("Failed to update customer %s tableStatus: %s", customer_phone, exc)
                return False
        return modified

    def list_orders(self) -> list[dict]:
        docs = self._load_raw(self._orders_path)
        return sorted(docs, key=lambda d: str(d.get("createdAt") or ""), reverse=True)

    def list_logged_in_customers(self) -> list[dict]:
        return [
            c for c in self._load_raw(self._customers_path)
            if c.get("loginStatus") == "loggedin"
        ]

    # --- Helpers ---------------------------------------------------------------

    @staticmethod
    def _matches(embedded: dict, order: ExternalOrder) -> bool:
        if order.embedded_id is not None:
            return embedded.get("_id") == order.embedded_id
        return embedded.get("_id") is None and embedded.get("orderDate") == order.order_date

    # --- File helpers ----------------------------------------------------------

    @staticmethod
    def _load_raw(path: Path) -> list[dict]:
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc

    @staticmethod
    def _persist_raw(path: Path, records: list[dict]) -> None:
        path.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")

    @staticmethod
    def _ensure_file(path: Path) -> None:
        if not path.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("[]", encoding="utf-8")
