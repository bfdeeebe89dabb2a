"""
Unit tests for gasmon.core.state_store.StateStore.

The store holds the latest published MonitorSnapshot. These tests check the
"no data yet" initial state and that publishing replaces the snapshot as a
whole.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from gasmon.core.state_store import StateStore
from gasmon.domain.models import GAS_ORDER, CalibratedSample, MonitorSnapshot, PredictionSnapshot, Trend


def _mk_snapshot(cycle: int) -> MonitorSnapshot:
    ts = datetime(2026, 1, 1, 10, 0, cycle)
    sample = CalibratedSample(methane_pct=float(cycle), co_ppm=0.0, h2s_ppm=0.0, timestamp=ts)
    return MonitorSnapshot(
        sample=sample,
        history=(sample,),
        alerts=(),
        prediction=PredictionSnapshot(trend=Trend.INCREASING, change_pct=0.0, projected={g: 0.0 for g in GAS_ORDER}),
        cycle=cycle,
        published_at=ts,
    )


def test_latest_is_none_before_first_publish() -> None:
    store = StateStore()
    assert store.latest is None
    assert store.published_count == 0


def test_publish_replaces_latest() -> None:
    store = StateStore()
    s1 = _mk_snapshot(1)
    s2 = _mk_snapshot(2)

    store.publish(s1)
    store.publish(s2)

    assert store.latest is s2
    assert store.published_count == 2


def test_published_snapshot_is_frozen() -> None:
    store = StateStore()
    store.publish(_mk_snapshot(1))

    snap = store.latest
    assert snap is not None
    with pytest.raises(AttributeError):
        snap.cycle = 99  # type: ignore[misc]
    assert isinstance(snap.history, tuple)
