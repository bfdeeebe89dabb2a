"""
Stress test for the running monitoring pipeline.

The loop thread runs at a short interval while ingest threads publish raw
readings and consumer threads read snapshots from the StateStore. Each
snapshot a consumer sees must be internally consistent: its sample is the
newest history entry, the window sizes respect their capacities, and cycle
numbers never go backwards.
"""

from __future__ import annotations

import threading
import time
from typing import List

import pytest

from gasmon.core.random_source import SeededRandomSource
from gasmon.core.state.reading_store import ReadingStore
from gasmon.core.state_store import StateStore
from gasmon.runtime.monitoring_loop_thread import MonitoringLoopThread
from gasmon.services.controller import MonitoringController


@pytest.mark.stress
def test_snapshots_stay_consistent_while_loop_runs() -> None:
    readings = ReadingStore()
    store = StateStore()
    controller = MonitoringController(source=readings, store=store, rng=SeededRandomSource(1))
    loop = MonitoringLoopThread(controller, interval_s=0.002)

    done = threading.Event()
    errors: List[BaseException] = []

    def ingest(tid: int) -> None:
        try:
            k = 0
            while not done.is_set():
                readings.publish(float((tid * 97 + k) % 800), float((tid * 31 + k) % 1500))
                k += 1
        except BaseException as e:
            errors.append(e)

    def consumer() -> None:
        try:
            last_cycle = 0
            while not done.is_set():
                snap = store.latest
                if snap is None:
                    continue
                assert snap.cycle >= last_cycle
                last_cycle = snap.cycle
                assert len(snap.history) == min(snap.cycle, 20)
                assert snap.history[-1] == snap.sample
                assert len(snap.alerts) <= 10
        except BaseException as e:
            errors.append(e)

    threads = [threading.Thread(target=ingest, args=(i,)) for i in range(2)]
    threads += [threading.Thread(target=consumer) for _ in range(3)]

    loop.start()
    for t in threads:
        t.start()

    deadline = time.monotonic() + 5.0
    while store.published_count < 50 and time.monotonic() < deadline:
        time.sleep(0.01)

    done.set()
    loop.stop()
    loop.join(timeout=5.0)
    for t in threads:
        t.join(timeout=5.0)

    assert not loop.running, "loop thread did not stop"
    assert all(not t.is_alive() for t in threads), "A thread did not finish (possible deadlock)"
    if errors:
        raise AssertionError(f"Concurrency test caught exceptions: {errors!r}")

    assert store.published_count >= 50
    assert store.published_count == controller.cycle
