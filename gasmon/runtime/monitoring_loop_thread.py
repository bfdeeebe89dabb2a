from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Optional

from gasmon.domain.models import LoopState
from gasmon.services.controller import MonitoringController

logger = logging.getLogger(__name__)


class MonitoringLoopThread:
    """
    Fixed-cadence thread driving the monitoring controller.

    Responsibilities
    ----------------
    - Call `MonitoringController.run_cycle()` once per tick.
    - Never overlap cycles: a tick that arrives while a cycle is still running
      is skipped, not queued.
    - Keep running through failures: exceptions raised by a cycle are logged
      and the previous snapshot stays published.

    Concurrency Model
    -----------------
    - The only suspension point is the wait between ticks, done with
      ``stop_event.wait(timeout)`` so a stop request wakes the thread at once.
    - `stop()` lets an in-flight cycle finish its publish step; no cycle starts
      after the stop event is set.

    Parameters
    ----------
    controller
        Controller that runs one fetch/derive/publish cycle.
    interval_s
        Time between tick starts, in seconds.
    stop_event
        Thread stop signal. When set, the loop exits.
    clock
        Monotonic clock used for tick scheduling.
    """

    def __init__(
        self,
        controller: MonitoringController,
        interval_s: float = 3.0,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")
        self._controller = controller
        self._interval_s = interval_s
        self._stop = stop_event or threading.Event()
        self._clock = clock
        self._skipped_ticks = 0
        self._thread = threading.Thread(target=self._run, name="monitoring-loop", daemon=True)

    @property
    def skipped_ticks(self) -> int:
        """Ticks dropped because a cycle overran the interval."""
        return self._skipped_ticks

    @property
    def state(self) -> LoopState:
        """Loop phase; STOPPED once cancelled and the thread has exited."""
        if self._stop.is_set() and not self._thread.is_alive():
            return LoopState.STOPPED
        return self._controller.state

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def start(self) -> None:
        """
        Start the loop thread if it is not already running.
        """
        if not self._thread.is_alive():
            self._thread.start()

    def stop(self) -> None:
        """
        Signal the loop to stop after the current cycle.
        """
        self._stop.set()

    def join(self, timeout: float | None = 2.0) -> None:
        """
        Join the loop thread.

        Parameters
        ----------
        timeout
            Maximum time to wait for the thread to exit. A loop that was
            never started returns at once.
        """
        if self._thread.ident is not None:
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        """
        Tick loop: wait, run one cycle, reschedule.
        """
        logger.info("monitoring loop started (interval=%.2fs)", self._interval_s)
        next_tick = self._clock() + self._interval_s

        while not self._stop.wait(max(0.0, next_tick - self._clock())):
            try:
                self._controller.run_cycle()
            except Exception:
                logger.exception("monitoring cycle failed, keeping previous snapshot")

            next_tick += self._interval_s
            now = self._clock()
            if now > next_tick:
                missed = int((now - next_tick) // self._interval_s) + 1
                self._skipped_ticks += missed
                next_tick += missed * self._interval_s
                logger.warning(
                    "cycle overran interval, skipping %d tick(s)",
                    missed,
                    extra={"cycle": self._controller.cycle, "reason": "overrun"},
                )

        logger.info("monitoring loop stopped")
