"""Background scheduler for the digital menu sync.

Owns the SyncState and a daemon thread that runs one sync pass per
interval.  Timer ticks and manual ``sync_orders()`` calls share one
non-blocking lock, so a pass never overlaps another one: a tick that
finds a pass in progress is skipped.
"""

from __future__ import annotations

import logging
import threading

from dms.application.dto import SyncStatusDTO
from dms.application.load_sync_state import LoadSyncStateHandler
from dms.application.sync_orders import SyncOrdersHandler
from dms.domain.model.sync_state import SyncState

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0


class SyncScheduler:

    def __init__(
        self,
        load_state: LoadSyncStateHandler,
        sync_orders: SyncOrdersHandler,
        state: SyncState | None = None,
    ) -> None:
        self._load_state = load_state
        self._sync_orders = sync_orders
        self._state = state if state is not None else SyncState()
        self._lifecycle_lock = threading.Lock()
        self._pass_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._running = False

    @property
    def state(self) -> SyncState:
        return self._state

    def start(self, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> None:
        """Hydrate state, run one pass right away, then poll every interval."""
        with self._lifecycle_lock:
            if self._running:
                logger.warning("Digital menu sync service is already running")
                return
            self._running = True
            self._stop_event = threading.Event()

        logger.info("Starting digital menu sync service...")
        self.load_state()
        self._tick()

        self._thread = threading.Thread(
            target=self._loop,
            args=(interval_seconds, self._stop_event),
            name="digital-menu-sync",
            daemon=True,
        )
        self._thread.start()
        logger.info("Digital menu sync service started (polling every %ss)", interval_seconds)

    def load_state(self) -> int:
        """Rebuild the sync state from the digital menu's ``syncedToPOS`` flags."""
        self._state.clear()
        return self._load_state.handle(self._state)

    def stop(self) -> None:
        """Stop the timer.  A pass already in progress runs to completion."""
        with self._lifecycle_lock:
            if not self._running:
                return
            self._running = False
            self._stop_event.set()
        logger.info("Digital menu sync service stopped")

    def join(self, timeout: float | None = None) -> None:
        """Wait for the polling thread to exit after ``stop()``."""
        if self._thread is not None:
            self._thread.join(timeout)

    def sync_orders(self) -> int:
        """Run one pass now; returns new + updated orders (0 when skipped)."""
        if not self._pass_lock.acquire(blocking=False):
            logger.warning("Previous digital menu sync pass still running, skipping")
            return 0
        try:
            return self._sync_orders.handle(self._state).total
        finally:
            self._pass_lock.release()

    def get_sync_status(self) -> SyncStatusDTO:
        return SyncStatusDTO(
            is_running=self._running,
            processed_orders=self._state.processed_count,
        )

    def _loop(self, interval_seconds: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval_seconds):
            self._tick()

    def _tick(self) -> None:
        try:
            self.sync_orders()
        except Exception:
            logger.exception("Digital menu sync tick failed")
