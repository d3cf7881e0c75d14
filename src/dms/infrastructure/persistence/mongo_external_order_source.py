"""MongoDB-backed implementation of ExternalOrderSource (the live digital menu)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder
from dms.domain.repository.external_order_source import ExternalOrderSource

logger = logging.getLogger(__name__)

_HAS_ORDERS = {"orders": {"$exists": True, "$ne": []}}


class MongoExternalOrderSource(ExternalOrderSource):

    def __init__(self, orders: Collection, customers: Collection) -> None:
        self._orders = orders
        self._customers = customers

    def list_customer_documents(self) -> list[dict]:
        try:
            return list(self._orders.find(_HAS_ORDERS))
        except PyMongoError as exc:
            raise SourceUnavailableError(f"Cannot read digital menu orders: {exc}") from exc

    def mark_order_synced(
        self,
        order: ExternalOrder,
        pos_order_id: str,
        synced_at: datetime,
    ) -> bool:
        if order.embedded_id is not None:
            match = {"_id": order.customer_doc_id, "orders._id": order.embedded_id}
        else:
            match = {"_id": order.customer_doc_id, "orders.orderDate": order.order_date}

        result = self._orders.update_one(
            match,
            {
                "$set": {
                    "orders.$.syncedToPOS": True,
                    "orders.$.syncedAt": synced_at,
                    "orders.$.posOrderId": pos_order_id,
                }
            },
        )
        return result.matched_count > 0

    def update_customer_table_status(self, customer_phone: str, table_status: str) -> bool:
        try:
            result = self._customers.update_one(
                {"phoneNumber": customer_phone},
                {"$set": {"tableStatus": table_status, "updatedAt": datetime.now(timezone.utc)}},
            )
        except PyMongoError as exc:
            logger.warning("Failed to update customer %s tableStatus: %s", customer_phone, exc)
            return False
        if result.modified_count > 0:
            logger.info("Updated customer %s tableStatus to: %s", customer_phone, table_status)
        return result.modified_count > 0

    def list_orders(self) -> list[dict]:
        try:
            return list(self._orders.find({}).sort("createdAt", DESCENDING))
        except PyMongoError as exc:
            raise SourceUnavailableError(f"Cannot read digital menu orders: {exc}") from exc

    def list_logged_in_customers(self) -> list[dict]:
        try:
            return list(self._customers.find({"loginStatus": "loggedin"}))
        except PyMongoError as exc:
            raise SourceUnavailableError(f"Cannot read digital menu customers: {exc}") from exc
