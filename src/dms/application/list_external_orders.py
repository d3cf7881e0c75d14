"""Application service: list digital menu orders and customers (queries)."""

from __future__ import annotations

from dms.application.dto import ExternalOrderSummaryDTO
from dms.domain.model.external_order import ExternalOrder, iter_raw_orders
from dms.domain.repository.external_order_source import ExternalOrderSource


class ListExternalOrdersHandler:

    def __init__(self, source: ExternalOrderSource) -> None:
        self._source = source

    def handle(self) -> list[ExternalOrderSummaryDTO]:
        return [
            self._to_dto(ExternalOrder.from_document(raw, customer_doc))
            for raw, customer_doc in iter_raw_orders(self._source.list_orders())
        ]

    @staticmethod
    def _to_dto(order: ExternalOrder) -> ExternalOrderSummaryDTO:
        if order.table_number:
            table = order.location_label
        else:
            table = "-"
        return ExternalOrderSummaryDTO(
            order_id=order.order_id,
            customer_name=order.customer_name or "",
            status=order.raw_status or "",
            payment_status=order.raw_payment_status,
            table=table,
            total=str(order.total.quantize()),
            synced=order.synced_to_pos,
            pos_order_id=order.pos_order_id or "-",
        )


class ListLoggedInCustomersHandler:

    def __init__(self, source: ExternalOrderSource) -> None:
        self._source = source

    def handle(self) -> list[dict]:
        return self._source.list_logged_in_customers()
