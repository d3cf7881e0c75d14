"""Unit tests for table status derivation and projection."""

import logging

import pytest

from dms.domain.events import EventType
from dms.domain.model.pos import ItemStatus, OrderItem, PosOrder, PosOrderStatus, TableStatus
from dms.domain.model.value_objects import Money
from dms.domain.service.table_status_projector import TableStatusProjector, derive_table_status
from tests.builders import setup

NEW, PREPARING, READY, SERVED = ItemStatus.NEW, ItemStatus.PREPARING, ItemStatus.READY, ItemStatus.SERVED


class TestDeriveTableStatus:

    @pytest.mark.parametrize(
        "statuses, expected",
        [
            ([READY, READY, SERVED], TableStatus.READY),
            ([NEW, PREPARING], TableStatus.PREPARING),
            ([SERVED, SERVED], TableStatus.SERVED),
            ([NEW, NEW], TableStatus.OCCUPIED),
            ([NEW, READY], TableStatus.PREPARING),
            ([PREPARING, SERVED], TableStatus.PREPARING),
            ([READY], TableStatus.READY),
        ],
    )
    def test_truth_table(self, statuses, expected):
        assert derive_table_status(statuses) is expected

    def test_no_items_derives_nothing(self):
        assert derive_table_status([]) is None


def _seed_order(pos_repo, statuses, table_id="t-ground-7", phone="9876543210"):
    order = pos_repo.create_order(
        PosOrder(
            id=None,
            table_id=table_id,
            order_type="dine-in",
            status=PosOrderStatus.SENT_TO_KITCHEN,
            customer_phone=phone,
        )
    )
    for status in statuses:
        pos_repo.create_order_item(
            OrderItem(
                id=None,
                order_id=order.id,
                menu_item_id="m-naan",
                name="Butter Naan",
                quantity=1,
                price=Money.of("40"),
                status=status,
            )
        )
    return order


class TestTableStatusProjector:

    def test_projects_onto_table_and_customer(self):
        pos_repo, source, publisher = setup()
        order = _seed_order(pos_repo, [READY, SERVED])

        result = TableStatusProjector(pos_repo, source, publisher).project(order.id)

        assert result is TableStatus.READY
        assert pos_repo.tables["t-ground-7"].status is TableStatus.READY
        assert source.customer("9876543210")["tableStatus"] == "ready"
        assert len(publisher.of_type(EventType.TABLE_UPDATED)) == 1

    def test_unchanged_table_is_not_republished(self):
        pos_repo, source, publisher = setup()
        order = _seed_order(pos_repo, [PREPARING])
        projector = TableStatusProjector(pos_repo, source, publisher)

        projector.project(order.id)
        projector.project(order.id)

        assert len(publisher.of_type(EventType.TABLE_UPDATED)) == 1

    def test_order_without_table_still_updates_customer(self):
        pos_repo, source, publisher = setup()
        order = _seed_order(pos_repo, [SERVED], table_id=None)

        TableStatusProjector(pos_repo, source, publisher).project(order.id)

        assert source.customer("9876543210")["tableStatus"] == "served"
        assert publisher.events == []

    def test_missing_order_is_ignored(self):
        pos_repo, source, publisher = setup()
        assert TableStatusProjector(pos_repo, source, publisher).project("nope") is None

    def test_failing_customer_write_still_updates_table(self, caplog):
        pos_repo, source, publisher = setup()
        source.fail_customer_writes = True
        order = _seed_order(pos_repo, [SERVED])

        with caplog.at_level(logging.WARNING):
            result = TableStatusProjector(pos_repo, source, publisher).project(order.id)

        assert result is TableStatus.SERVED
        assert pos_repo.tables["t-ground-7"].status is TableStatus.SERVED
        assert "Failed to update customer 9876543210 tableStatus" in caplog.text
