"""
Static gas threshold table and tier classification.

The table maps every monitored gas to its safe/warning/danger cutoffs.
Classification is inclusive-upward: a value exactly equal to a cutoff belongs
to that cutoff's tier, and checks run from the highest tier down so the
highest applicable tier wins.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping, Optional

from gasmon.domain.models import GAS_ORDER, Gas, GasThreshold, ThresholdTier

ThresholdTable = Mapping[Gas, GasThreshold]


def make_threshold_table(entries: Mapping[Gas, GasThreshold]) -> ThresholdTable:
    """
    Build a read-only threshold table.

    Parameters
    ----------
    entries
        One `GasThreshold` per monitored gas.

    Returns
    -------
    Mapping[Gas, GasThreshold]
        Immutable mapping in `GAS_ORDER`.

    Raises
    ------
    ValueError
        If a gas is missing, or a gas' cutoffs are not ordered
        ``safe <= warning <= danger``.
    """
    table = {}
    for gas in GAS_ORDER:
        if gas not in entries:
            raise ValueError(f"missing threshold for gas {gas.value!r}")
        t = entries[gas]
        if not (t.safe <= t.warning <= t.danger):
            raise ValueError(
                f"thresholds for {gas.value!r} must satisfy safe <= warning <= danger, "
                f"got safe={t.safe} warning={t.warning} danger={t.danger}"
            )
        table[gas] = t
    return MappingProxyType(table)


DEFAULT_THRESHOLDS: ThresholdTable = make_threshold_table(
    {
        Gas.METHANE: GasThreshold(safe=1.0, warning=2.5, danger=5.0, unit="%"),
        Gas.CARBON_MONOXIDE: GasThreshold(safe=25.0, warning=50.0, danger=100.0, unit="ppm"),
        Gas.HYDROGEN_SULFIDE: GasThreshold(safe=5.0, warning=10.0, danger=20.0, unit="ppm"),
    }
)


def classify(gas: Gas, value: float, table: Optional[ThresholdTable] = None) -> ThresholdTier:
    """
    Classify a gas concentration into a threshold tier.

    Parameters
    ----------
    gas
        Gas the value belongs to.
    value
        Finite concentration in the gas' unit. Negative values are SAFE.
    table
        Threshold table. Defaults to `DEFAULT_THRESHOLDS`.

    Returns
    -------
    ThresholdTier
        DANGER if ``value >= danger``, else WARNING if ``value >= warning``,
        else SAFE.

    Raises
    ------
    ValueError
        If ``value`` is NaN or infinite. Callers must sanitize first.
    """
    if not math.isfinite(value):
        raise ValueError(f"cannot classify non-finite value {value!r} for {gas.value!r}")

    t = (table or DEFAULT_THRESHOLDS)[gas]
    if value >= t.danger:
        return ThresholdTier.DANGER
    if value >= t.warning:
        return ThresholdTier.WARNING
    return ThresholdTier.SAFE
