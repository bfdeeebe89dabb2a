"""
Unit tests for gasmon.core.state.alert_ledger.

These tests validate:
- one alert per gas at or above its warning cutoff, in gas order
- message templates and two-decimal value formatting
- newest-first ordering across cycles and capacity truncation
- no deduplication of sustained breaches
"""

from __future__ import annotations

import itertools
from datetime import datetime, timedelta

from gasmon.core.state.alert_ledger import AlertLedger, alert_message, build_alerts
from gasmon.domain.models import CalibratedSample, Gas, ThresholdTier


def _mk_sample(methane: float = 0.0, co: float = 0.0, h2s: float = 0.0) -> CalibratedSample:
    return CalibratedSample(
        methane_pct=methane,
        co_ppm=co,
        h2s_ppm=h2s,
        timestamp=datetime(2026, 1, 1, 10, 0, 0),
    )


def _counter_ids():
    """Deterministic id factory: a1, a2, ..."""
    counter = itertools.count(1)
    return lambda: f"a{next(counter)}"


def test_alert_message_templates() -> None:
    assert alert_message(ThresholdTier.DANGER, Gas.METHANE) == "DANGER: METHANE level critical!"
    assert alert_message(ThresholdTier.WARNING, Gas.CARBON_MONOXIDE) == "WARNING: CARBONMONOXIDE level elevated"


def test_build_alerts_all_safe_returns_empty() -> None:
    assert build_alerts(_mk_sample(0.5, 10.0, 1.0)) == []


def test_build_alerts_fields() -> None:
    ts = datetime(2026, 1, 1, 10, 0, 3)
    alerts = build_alerts(_mk_sample(methane=6.0, co=60.0), now=ts, id_factory=_counter_ids())

    assert [a.gas for a in alerts] == [Gas.METHANE, Gas.CARBON_MONOXIDE]
    danger, warning = alerts
    assert danger.severity is ThresholdTier.DANGER
    assert danger.value == "6.00"
    assert danger.message == "DANGER: METHANE level critical!"
    assert danger.timestamp == ts
    assert warning.severity is ThresholdTier.WARNING
    assert warning.value == "60.00"
    assert warning.message == "WARNING: CARBONMONOXIDE level elevated"
    assert danger.id != warning.id


def test_build_alerts_formats_value_to_two_decimals() -> None:
    (alert,) = build_alerts(_mk_sample(methane=2.5049))
    assert alert.value == "2.50"


def test_default_ids_are_unique() -> None:
    ledger = AlertLedger()
    for _ in range(5):
        ledger.evaluate_and_record(_mk_sample(6.0, 120.0, 25.0))
    ids = [a.id for a in ledger.snapshot()]
    assert len(ids) == len(set(ids)) == 10


def test_evaluate_and_record_danger_scenario() -> None:
    """
    methane 6.0 % and CO 120 ppm are both DANGER: two records at the front,
    methane first.
    """
    ledger = AlertLedger(id_factory=_counter_ids())
    ledger.evaluate_and_record(_mk_sample(methane=3.0))  # one older WARNING

    new = ledger.evaluate_and_record(_mk_sample(methane=6.0, co=120.0))

    assert [(a.gas, a.severity) for a in new] == [
        (Gas.METHANE, ThresholdTier.DANGER),
        (Gas.CARBON_MONOXIDE, ThresholdTier.DANGER),
    ]
    snap = ledger.snapshot()
    assert list(snap[:2]) == new
    assert snap[2].severity is ThresholdTier.WARNING


def test_ledger_is_newest_first_and_capped_at_ten() -> None:
    """
    After M alerts in total, length is min(M, 10) and order is strictly by
    insertion, newest first.
    """
    ledger = AlertLedger(id_factory=_counter_ids())
    total = 0
    for i in range(7):
        # Alternate 1-alert and 2-alert cycles; severities deliberately mixed.
        if i % 2:
            ledger.evaluate_and_record(_mk_sample(methane=6.0, co=60.0))
            total += 2
        else:
            ledger.evaluate_and_record(_mk_sample(co=120.0))
            total += 1
        assert len(ledger) == min(total, 10)

    # Batches newest first; each batch keeps gas order (methane before CO).
    ids = [int(a.id[1:]) for a in ledger.snapshot()]
    assert ids == [10, 8, 9, 7, 5, 6, 4, 2, 3, 1]

    ledger.evaluate_and_record(_mk_sample(methane=6.0, co=60.0))  # a11, a12
    ids = [int(a.id[1:]) for a in ledger.snapshot()]
    assert ids == [11, 12, 10, 8, 9, 7, 5, 6, 4, 2]


def test_ledger_order_matches_batches() -> None:
    ledger = AlertLedger(capacity=10, id_factory=_counter_ids())
    ledger.evaluate_and_record(_mk_sample(methane=6.0, co=120.0))  # a1, a2
    ledger.evaluate_and_record(_mk_sample(h2s=12.0))  # a3
    ledger.evaluate_and_record(_mk_sample(methane=3.0, co=60.0, h2s=25.0))  # a4, a5, a6

    assert [a.id for a in ledger.snapshot()] == ["a4", "a5", "a6", "a3", "a1", "a2"]


def test_truncation_discards_oldest() -> None:
    ledger = AlertLedger(capacity=4, id_factory=_counter_ids())
    ledger.evaluate_and_record(_mk_sample(methane=6.0, co=120.0))  # a1, a2
    ledger.evaluate_and_record(_mk_sample(methane=6.0, co=120.0))  # a3, a4
    ledger.evaluate_and_record(_mk_sample(methane=6.0))  # a5

    assert [a.id for a in ledger.snapshot()] == ["a5", "a3", "a4", "a1"]


def test_sustained_breach_is_not_deduplicated() -> None:
    ledger = AlertLedger()
    for _ in range(3):
        ledger.evaluate_and_record(_mk_sample(methane=6.0))

    snap = ledger.snapshot()
    assert len(snap) == 3
    assert {a.message for a in snap} == {"DANGER: METHANE level critical!"}


def test_safe_sample_leaves_ledger_untouched() -> None:
    ledger = AlertLedger()
    ledger.evaluate_and_record(_mk_sample(methane=6.0))
    before = ledger.snapshot()

    assert ledger.evaluate_and_record(_mk_sample()) == []
    assert ledger.snapshot() == before


def test_alert_timestamps_follow_now() -> None:
    ledger = AlertLedger()
    t0 = datetime(2026, 1, 1, 10, 0, 0)
    ledger.evaluate_and_record(_mk_sample(methane=6.0), now=t0)
    ledger.evaluate_and_record(_mk_sample(methane=6.0), now=t0 + timedelta(seconds=3))

    assert [a.timestamp for a in ledger.snapshot()] == [t0 + timedelta(seconds=3), t0]
