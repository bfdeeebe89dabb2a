"""
Unit tests for gasmon.runtime.monitoring_loop_thread.MonitoringLoopThread.

A fake controller records cycle calls; short intervals keep the tests fast.
These tests validate:
- cycles run on the cadence until stop() is called
- no cycle starts after stop()
- a failing cycle does not kill the loop
- overrunning cycles cause ticks to be skipped, never overlapped
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from gasmon.domain.models import LoopState
from gasmon.runtime.monitoring_loop_thread import MonitoringLoopThread


@dataclass
class FakeController:
    """
    Fake controller counting cycles.

    Parameters
    ----------
    cycle_duration_s
        Time each cycle sleeps, to simulate slow cycles.
    fail_every
        If set, every n-th cycle raises RuntimeError.
    """

    cycle_duration_s: float = 0.0
    fail_every: Optional[int] = None
    calls: int = 0
    active: int = 0
    max_active: int = 0
    call_times: List[float] = field(default_factory=list)
    state: LoopState = LoopState.IDLE
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @property
    def cycle(self) -> int:
        return self.calls

    def run_cycle(self, now=None):
        with self._lock:
            self.calls += 1
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            self.call_times.append(time.monotonic())
            n = self.calls
        try:
            if self.cycle_duration_s:
                time.sleep(self.cycle_duration_s)
            if self.fail_every and n % self.fail_every == 0:
                raise RuntimeError(f"cycle {n} failed")
        finally:
            with self._lock:
                self.active -= 1
        return None


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


def test_rejects_non_positive_interval() -> None:
    with pytest.raises(ValueError):
        MonitoringLoopThread(FakeController(), interval_s=0)  # type: ignore[arg-type]


def test_runs_cycles_until_stopped() -> None:
    controller = FakeController()
    loop = MonitoringLoopThread(controller, interval_s=0.01)  # type: ignore[arg-type]

    loop.start()
    assert _wait_for(lambda: controller.calls >= 3)
    loop.stop()
    loop.join(timeout=2.0)

    assert not loop.running
    assert loop.state is LoopState.STOPPED
    calls_at_stop = controller.calls
    time.sleep(0.05)
    assert controller.calls == calls_at_stop


def test_join_without_start_returns() -> None:
    loop = MonitoringLoopThread(FakeController(), interval_s=0.01)  # type: ignore[arg-type]

    loop.stop()
    loop.join(timeout=0.1)

    assert loop.state is LoopState.STOPPED


def test_stop_before_first_tick_runs_no_cycle() -> None:
    controller = FakeController()
    loop = MonitoringLoopThread(controller, interval_s=10.0)  # type: ignore[arg-type]

    loop.start()
    loop.stop()
    loop.join(timeout=2.0)

    assert controller.calls == 0
    assert not loop.running


def test_failing_cycle_does_not_stop_loop() -> None:
    controller = FakeController(fail_every=2)
    loop = MonitoringLoopThread(controller, interval_s=0.01)  # type: ignore[arg-type]

    loop.start()
    assert _wait_for(lambda: controller.calls >= 5)
    loop.stop()
    loop.join(timeout=2.0)

    assert controller.calls >= 5


def test_overrunning_cycles_never_overlap_and_skip_ticks() -> None:
    controller = FakeController(cycle_duration_s=0.05)
    loop = MonitoringLoopThread(controller, interval_s=0.01)  # type: ignore[arg-type]

    loop.start()
    assert _wait_for(lambda: controller.calls >= 3)
    loop.stop()
    loop.join(timeout=2.0)

    assert controller.max_active == 1
    assert loop.skipped_ticks > 0


def test_stop_lets_in_flight_cycle_finish() -> None:
    controller = FakeController(cycle_duration_s=0.1)
    loop = MonitoringLoopThread(controller, interval_s=0.01)  # type: ignore[arg-type]

    loop.start()
    assert _wait_for(lambda: controller.active == 1)
    loop.stop()
    loop.join(timeout=2.0)

    assert controller.active == 0
    assert controller.calls == 1


def test_shared_stop_event_stops_loop() -> None:
    stop = threading.Event()
    controller = FakeController()
    loop = MonitoringLoopThread(controller, interval_s=0.01, stop_event=stop)  # type: ignore[arg-type]

    loop.start()
    assert _wait_for(lambda: controller.calls >= 1)
    stop.set()
    loop.join(timeout=2.0)

    assert not loop.running
