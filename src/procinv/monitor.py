"""Background polling of the inventory engine."""

import threading
from queue import Queue

import structlog

from procinv.engine import InventoryEngine, InventorySnapshot

logger = structlog.get_logger(__name__)

MIN_POLL_RATE = 0.1


class InventoryMonitor:
    """
    Polls an InventoryEngine in a daemon thread.

    Each poll pushes a fresh InventorySnapshot onto a thread-safe Queue. A
    poll that fails is logged and the loop carries on.
    """

    def __init__(
        self,
        engine: InventoryEngine,
        update_queue: Queue[InventorySnapshot],
        poll_rate: float = 2.0,
    ) -> None:
        """
        Initialize the InventoryMonitor.

        Args:
            engine: Engine to collect snapshots from.
            update_queue: Thread-safe queue to push snapshots to.
            poll_rate: Seconds between polls. Default 2.0s.
        """
        self._engine = engine
        self._queue = update_queue
        self._poll_rate = max(MIN_POLL_RATE, poll_rate)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def poll_rate(self) -> float:
        """Get the current poll rate."""
        return self._poll_rate

    @poll_rate.setter
    def poll_rate(self, value: float) -> None:
        """Set the poll rate."""
        self._poll_rate = max(MIN_POLL_RATE, value)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="InventoryMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(self._engine.snapshot())
            except Exception:
                logger.exception("inventory_poll_failed")

            self._stop_event.wait(timeout=self._poll_rate)
