"""Tests for the background sync scheduler."""

import logging

from dms.application.dto import SyncResult
from dms.infrastructure.scheduler import SyncScheduler


class _CountingLoad:

    def __init__(self):
        self.calls = 0

    def handle(self, state):
        self.calls += 1
        state.processed_ids.add(f"loaded-{self.calls}")
        return 1


class _StubSync:

    def __init__(self, result=SyncResult(new_orders=2, updated_orders=1)):
        self.result = result
        self.calls = 0
        self.on_handle = None

    def handle(self, state):
        self.calls += 1
        if self.on_handle is not None:
            self.on_handle()
        return self.result


def _setup():
    load, sync = _CountingLoad(), _StubSync()
    return SyncScheduler(load_state=load, sync_orders=sync), load, sync


class TestSyncScheduler:

    def test_sync_orders_returns_new_plus_updated(self):
        scheduler, _, _ = _setup()
        assert scheduler.sync_orders() == 3

    def test_overlapping_pass_is_skipped(self):
        scheduler, _, sync = _setup()
        nested = []
        sync.on_handle = lambda: nested.append(scheduler.sync_orders())

        assert scheduler.sync_orders() == 3
        assert nested == [0]
        assert sync.calls == 1

    def test_start_hydrates_and_runs_first_pass(self):
        scheduler, load, sync = _setup()

        scheduler.start(interval_seconds=3600)
        try:
            assert load.calls == 1
            assert sync.calls == 1
            assert scheduler.get_sync_status().to_dict() == {"isRunning": True, "processedOrders": 1}
        finally:
            scheduler.stop()
            scheduler.join(timeout=1)

        assert scheduler.get_sync_status().is_running is False

    def test_start_twice_is_a_no_op(self, caplog):
        scheduler, load, _ = _setup()

        scheduler.start(interval_seconds=3600)
        try:
            with caplog.at_level(logging.WARNING):
                scheduler.start(interval_seconds=3600)
        finally:
            scheduler.stop()
            scheduler.join(timeout=1)

        assert load.calls == 1
        assert "already running" in caplog.text

    def test_failing_pass_does_not_escape_start(self, caplog):
        scheduler, _, sync = _setup()

        def boom():
            raise RuntimeError("db exploded")

        sync.on_handle = boom
        with caplog.at_level(logging.ERROR):
            scheduler.start(interval_seconds=3600)
        scheduler.stop()
        scheduler.join(timeout=1)

        assert "Digital menu sync tick failed" in caplog.text
        # The lock is released even when a pass raises.
        sync.on_handle = None
        assert scheduler.sync_orders() == 3

    def test_load_state_replaces_previous_state(self):
        scheduler, _, _ = _setup()
        scheduler.state.processed_ids.add("stale")

        scheduler.load_state()

        assert scheduler.state.processed_ids == {"loaded-1"}

    def test_stop_without_start_is_harmless(self):
        scheduler, _, _ = _setup()
        scheduler.stop()
        scheduler.join()
        assert scheduler.get_sync_status().is_running is False
