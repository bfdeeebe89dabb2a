from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Mapping, Sequence

from gasmon.domain.models import GAS_ORDER, AlertRecord, CalibratedSample, Gas, ThresholdTier


@dataclass(frozen=True)
class HistoryStats:
    """
    Aggregates over the history window.

    Parameters
    ----------
    count
        Number of samples aggregated.
    average
        Mean concentration per gas (0.0 for an empty window).
    peak
        Maximum concentration per gas, floored at 0.0.
    """

    count: int
    average: Mapping[Gas, float]
    peak: Mapping[Gas, float]


def history_stats(history: Sequence[CalibratedSample]) -> HistoryStats:
    """
    Compute average and peak levels for each gas.

    Parameters
    ----------
    history
        Samples in any order.

    Returns
    -------
    HistoryStats
        Per-gas averages and peaks.
    """
    n = len(history)
    average: Dict[Gas, float] = {}
    peak: Dict[Gas, float] = {}
    for gas in GAS_ORDER:
        values = [s.value_for(gas) for s in history]
        average[gas] = sum(values) / n if n else 0.0
        peak[gas] = max(values + [0.0])
    return HistoryStats(count=n, average=average, peak=peak)


def alert_counts(alerts: Sequence[AlertRecord]) -> Dict[str, int]:
    """
    Count alerts by severity.

    Returns
    -------
    dict[str, int]
        Keys ``total``, ``danger`` and ``warning``.
    """
    by_severity = Counter(a.severity for a in alerts)
    return {
        "total": len(alerts),
        "danger": by_severity[ThresholdTier.DANGER],
        "warning": by_severity[ThresholdTier.WARNING],
    }
