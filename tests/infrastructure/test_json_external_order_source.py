"""Tests for the JSON-file digital menu source."""

import json
import logging
from datetime import datetime, timezone

import pytest

from dms.domain.exceptions import SourceUnavailableError
from dms.domain.model.external_order import ExternalOrder
from dms.infrastructure.persistence.json_external_order_source import JsonExternalOrderSource
from tests.builders import customer_doc, order_doc

SYNCED_AT = datetime(2026, 10, 16, 12, 30, tzinfo=timezone.utc)


def _setup(tmp_path, docs, customers=()):
    orders_path = tmp_path / "digital_menu_customer_orders.json"
    customers_path = tmp_path / "customers.json"
    orders_path.write_text(json.dumps(docs))
    customers_path.write_text(json.dumps(list(customers)))
    return JsonExternalOrderSource(orders_path, customers_path), orders_path, customers_path


class TestJsonExternalOrderSource:

    def test_documents_without_orders_are_not_listed(self, tmp_path):
        source, _, _ = _setup(tmp_path, [customer_doc(order_doc()), customer_doc(doc_id="empty")])

        assert [d["_id"] for d in source.list_customer_documents()] == ["cust-doc-1"]

    def test_mark_synced_writes_flags_back(self, tmp_path):
        doc = customer_doc(order_doc("a"), order_doc("b"))
        source, orders_path, _ = _setup(tmp_path, [doc])
        order = ExternalOrder.from_document(doc["orders"][1], doc)

        assert source.mark_order_synced(order, "pos-1", SYNCED_AT) is True

        a, b = json.loads(orders_path.read_text())[0]["orders"]
        assert "syncedToPOS" not in a
        assert b["syncedToPOS"] is True
        assert b["posOrderId"] == "pos-1"
        assert b["syncedAt"] == SYNCED_AT.isoformat()

    def test_mark_synced_without_embedded_id_matches_on_order_date(self, tmp_path):
        raw = order_doc()
        del raw["_id"]
        doc = customer_doc(raw)
        source, orders_path, _ = _setup(tmp_path, [doc])

        assert source.mark_order_synced(ExternalOrder.from_document(raw, doc), "pos-1", SYNCED_AT)
        assert json.loads(orders_path.read_text())[0]["orders"][0]["syncedToPOS"] is True

    def test_mark_synced_reports_no_match(self, tmp_path):
        doc = customer_doc(order_doc())
        source, _, _ = _setup(tmp_path, [customer_doc(order_doc(), doc_id="someone-else")])

        assert source.mark_order_synced(ExternalOrder.from_document(doc["orders"][0], doc), "p", SYNCED_AT) is False

    def test_customer_table_status_reports_modification(self, tmp_path):
        source, _, customers_path = _setup(
            tmp_path, [], customers=[{"phoneNumber": "9876543210", "tableStatus": "free"}]
        )

        assert source.update_customer_table_status("9876543210", "occupied") is True
        assert source.update_customer_table_status("9876543210", "occupied") is False
        assert source.update_customer_table_status("0000000000", "occupied") is False
        assert json.loads(customers_path.read_text())[0]["tableStatus"] == "occupied"

    def test_orders_listed_newest_first(self, tmp_path):
        old = {**customer_doc(order_doc(), doc_id="old"), "createdAt": "2026-10-01T00:00:00Z"}
        new = {**customer_doc(order_doc(), doc_id="new"), "createdAt": "2026-10-15T00:00:00Z"}
        source, _, _ = _setup(tmp_path, [old, new])

        assert [d["_id"] for d in source.list_orders()] == ["new", "old"]

    def test_logged_in_customers(self, tmp_path):
        source, _, _ = _setup(
            tmp_path,
            [],
            customers=[
                {"phoneNumber": "1", "loginStatus": "loggedin"},
                {"phoneNumber": "2", "loginStatus": "loggedout"},
            ],
        )

        assert [c["phoneNumber"] for c in source.list_logged_in_customers()] == ["1"]

    def test_corrupt_file_is_unavailable(self, tmp_path):
        source, orders_path, _ = _setup(tmp_path, [])
        orders_path.write_text("{not json")

        with pytest.raises(SourceUnavailableError, match="Cannot read"):
            source.list_customer_documents()

    def test_unreadable_customers_file_is_reported_not_raised(self, tmp_path, caplog):
        source, _, customers_path = _setup(tmp_path, [])
        customers_path.write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert source.update_customer_table_status("9876543210", "free") is False

        assert "Failed to update customer 9876543210 tableStatus" in caplog.text
