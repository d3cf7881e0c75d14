"""Unit tests for resolving digital menu table references."""

import logging

from dms.domain.model.pos import Table
from dms.domain.service.table_resolver import TableResolver
from tests.builders import setup


def _resolver():
    pos_repo, _, _ = setup()
    return TableResolver(pos_repo)


class TestTableResolver:

    def test_floor_disambiguates_shared_number(self):
        assert _resolver().resolve("5", "Ground").id == "t-ground-5"
        assert _resolver().resolve("5", "First").id == "t-first-5"

    def test_floor_match_is_case_insensitive(self):
        assert _resolver().resolve("5", "gRoUnD").id == "t-ground-5"

    def test_unknown_floor_falls_back_to_first_match(self, caplog):
        with caplog.at_level(logging.WARNING):
            table = _resolver().resolve("5", "Rooftop")

        assert table.id == "t-first-5"
        assert 'Floor "Rooftop" not found' in caplog.text
        assert "Multiple tables" in caplog.text

    def test_number_absent_on_named_floor_falls_back(self):
        # Table 7 only exists on Ground.
        assert _resolver().resolve("7", "First").id == "t-ground-7"

    def test_unique_number_without_floor_does_not_warn(self, caplog):
        with caplog.at_level(logging.WARNING):
            table = _resolver().resolve("7")

        assert table.id == "t-ground-7"
        assert caplog.text == ""

    def test_no_match(self):
        assert _resolver().resolve("42") is None

    def test_first_listed_table_wins_without_floor(self):
        pos_repo, _, _ = setup()
        pos_repo.tables = {
            "b": Table(id="b", table_number="9"),
            "a": Table(id="a", table_number="9"),
        }
        assert TableResolver(pos_repo).resolve("9").id == "b"
