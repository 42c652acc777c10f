"""
Main loop: run poll cycles at a fixed interval until cancelled.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .poll_cycle import PollCycle
from .price_store import PriceStore, Snapshot

logger = logging.getLogger(__name__)


class SchedulerState(Enum):
    """Lifecycle of the main loop."""

    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class StopSignal:
    """The single, idempotent cancellation path for the main loop."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.RLock()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> bool:
        """
        Request shutdown. Safe to call from any thread or a signal handler.

        Returns:
            True for the first request, False if shutdown was already requested
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
        logger.info(f"Stop requested: {reason}")
        return True

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or the timeout passes. Returns True if cancelled."""
        return self._event.wait(timeout)

    @property
    def reason(self) -> Optional[str]:
        return self._reason


class Scheduler:
    """Drives PollCycle, renders each snapshot, and waits for the next tick."""

    def __init__(
        self,
        poll_cycle: PollCycle,
        store: PriceStore,
        render: Callable[[Snapshot], None],
        interval_seconds: float = 1,
        stop_signal: Optional[StopSignal] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the scheduler.

        Args:
            poll_cycle: Cycle to run on every tick
            store: Store to snapshot after each cycle
            render: Receives every snapshot
            interval_seconds: Wait between the end of one cycle and the next
            stop_signal: Cancellation signal (a new one is created if None)
            on_stop: Releases display resources once the loop has stopped
        """
        self.poll_cycle = poll_cycle
        self.store = store
        self.render = render
        self.interval_seconds = interval_seconds
        self.stop_signal = stop_signal or StopSignal()
        self.on_stop = on_stop
        self._state = SchedulerState.RUNNING

    @property
    def state(self) -> SchedulerState:
        return self._state

    def stop(self, reason: str = "stop requested") -> None:
        self.stop_signal.cancel(reason)

    def run(self) -> int:
        """
        Run cycles until the stop signal fires.

        Cancellation is only honoured between cycles: a cycle in flight always
        completes its fan-in first. Display resources are released even if a
        cycle raises.

        Returns:
            Process exit code (0 after a clean shutdown)
        """
        logger.info(f"Watching {len(self.store)} symbols every {self.interval_seconds}s")
        try:
            while not self.stop_signal.is_set():
                report = self.poll_cycle.run()
                if report.failed:
                    logger.info(f"Cycle {report.cycle_number}: no data for {', '.join(report.failed)}")
                self.render(self.store.snapshot())

                if self.stop_signal.wait(self.interval_seconds):
                    break
        finally:
            self._state = SchedulerState.STOPPING
            logger.debug("Scheduler stopping")
            if self.on_stop is not None:
                self.on_stop()
            self._state = SchedulerState.STOPPED

        logger.info(f"Stopped after {self.poll_cycle.cycle_count} cycles ({self.stop_signal.reason})")
        return 0
