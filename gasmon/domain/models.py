"""
Domain models and enums.

This module defines the core domain-level types used across the system:
- Monitored gases, threshold tiers and prediction trends
- Raw sensor readings (MQ-2 / MQ-7 channels) and calibrated samples
- Per-gas threshold limits
- Alert records, prediction snapshots and the published monitor snapshot

These are designed as immutable (frozen) dataclasses so they can be shared
between the monitoring loop thread and request-handling threads safely.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Mapping, Optional, Tuple


class Gas(str, Enum):
    """
    Gas monitored by the system.

    Members
    -------
    METHANE : str
        Methane concentration, derived from the MQ-2 channel (percent).
    CARBON_MONOXIDE : str
        Carbon monoxide concentration, derived from the MQ-7 channel (ppm).
    HYDROGEN_SULFIDE : str
        Hydrogen sulfide concentration (ppm). No physical sensor feeds this
        channel; see `gasmon.core.calibration.synthesize_h2s`.
    """

    METHANE = "methane"
    CARBON_MONOXIDE = "carbonMonoxide"
    HYDROGEN_SULFIDE = "hydrogenSulfide"


# Evaluation order for thresholds and alert batches.
GAS_ORDER: Tuple[Gas, ...] = (Gas.METHANE, Gas.CARBON_MONOXIDE, Gas.HYDROGEN_SULFIDE)


class ThresholdTier(str, Enum):
    """
    Severity tier of a single gas concentration.

    Members
    -------
    SAFE : str
        Below the warning cutoff.
    WARNING : str
        At or above the warning cutoff, below danger.
    DANGER : str
        At or above the danger cutoff.
    """

    SAFE = "safe"
    WARNING = "warning"
    DANGER = "danger"

    @property
    def rank(self) -> int:
        """Position in the total order safe < warning < danger."""
        return _TIER_RANK[self]


_TIER_RANK = {ThresholdTier.SAFE: 0, ThresholdTier.WARNING: 1, ThresholdTier.DANGER: 2}


class Trend(str, Enum):
    """Direction reported by the prediction heuristic."""

    INCREASING = "increasing"
    DECREASING = "decreasing"


class LoopState(str, Enum):
    """
    Phase of the monitoring loop.

    Members
    -------
    IDLE : str
        Waiting for the next tick.
    POLLING : str
        Fetching the latest raw reading.
    DERIVING : str
        Calibrating, recording history/alerts and projecting.
    PUBLISHING : str
        Swapping the new snapshot into the state store.
    STOPPED : str
        Loop cancelled; no further cycles run.
    """

    IDLE = "idle"
    POLLING = "polling"
    DERIVING = "deriving"
    PUBLISHING = "publishing"
    STOPPED = "stopped"


@dataclass(frozen=True)
class RawReading:
    """
    Raw reading published by the sensor node.

    Parameters
    ----------
    mq2
        MQ-2 channel value (unitless, not range-checked).
    mq7
        MQ-7 channel value (unitless, not range-checked).
    timestamp
        Time the reading was published to the store.
    """

    mq2: float
    mq7: float
    timestamp: datetime


# Timestamp carried by the zero-valued default before anything is published.
NO_READING_TIMESTAMP = datetime(1970, 1, 1, 0, 0, 0)

EMPTY_READING = RawReading(mq2=0, mq7=0, timestamp=NO_READING_TIMESTAMP)


@dataclass(frozen=True)
class CalibratedSample:
    """
    Raw reading converted into gas concentrations.

    Parameters
    ----------
    methane_pct
        Methane concentration in percent.
    co_ppm
        Carbon monoxide concentration in ppm.
    h2s_ppm
        Hydrogen sulfide concentration in ppm (synthetic placeholder).
    timestamp
        Time the sample was derived.
    """

    methane_pct: float
    co_ppm: float
    h2s_ppm: float
    timestamp: datetime

    def value_for(self, gas: Gas) -> float:
        """
        Return the concentration for one gas.

        Parameters
        ----------
        gas
            Gas to look up.

        Returns
        -------
        float
            Concentration in the gas' native unit.
        """
        return getattr(self, _SAMPLE_FIELDS[gas])

    def replace_value(self, gas: Gas, value: float) -> "CalibratedSample":
        """Return a copy of this sample with one gas value replaced."""
        return replace(self, **{_SAMPLE_FIELDS[gas]: value})

    def values(self) -> Mapping[Gas, float]:
        """Return all gas values keyed by gas, in evaluation order."""
        return {gas: self.value_for(gas) for gas in GAS_ORDER}


_SAMPLE_FIELDS = {
    Gas.METHANE: "methane_pct",
    Gas.CARBON_MONOXIDE: "co_ppm",
    Gas.HYDROGEN_SULFIDE: "h2s_ppm",
}


@dataclass(frozen=True)
class GasThreshold:
    """
    Threshold cutoffs for one gas.

    Parameters
    ----------
    safe
        Upper bound of the nominal range (informational, shown to operators).
    warning
        Values at or above this cutoff classify as WARNING.
    danger
        Values at or above this cutoff classify as DANGER.
    unit
        Display unit (e.g., "%", "ppm").
    """

    safe: float
    warning: float
    danger: float
    unit: str


@dataclass(frozen=True)
class AlertRecord:
    """
    Alert raised when a sample reaches the warning or danger tier for a gas.

    Parameters
    ----------
    id
        Unique identifier of the alert.
    severity
        WARNING or DANGER (never SAFE).
    gas
        Gas that triggered the alert.
    value
        Triggering value formatted with two decimals.
    message
        Human-readable message.
    timestamp
        Creation time.
    """

    id: str
    severity: ThresholdTier
    gas: Gas
    value: str
    message: str
    timestamp: datetime


@dataclass(frozen=True)
class PredictionSnapshot:
    """
    Short-horizon projection derived from the latest sample.

    Parameters
    ----------
    trend
        Reported direction.
    change_pct
        Percent change applied to every gas, within [-10, 10].
    projected
        Projected concentration per gas.
    """

    trend: Trend
    change_pct: float
    projected: Mapping[Gas, float]


@dataclass(frozen=True)
class MonitorSnapshot:
    """
    Consistent set of outputs published at the end of one monitoring cycle.

    Parameters
    ----------
    sample
        Calibrated sample derived in this cycle.
    history
        History window contents, oldest first.
    alerts
        Alert ledger contents, newest first.
    prediction
        Prediction derived in this cycle.
    cycle
        Sequence number of the cycle (1-based).
    published_at
        Time the snapshot was published.
    """

    sample: CalibratedSample
    history: Tuple[CalibratedSample, ...]
    alerts: Tuple[AlertRecord, ...]
    prediction: PredictionSnapshot
    cycle: int
    published_at: Optional[datetime] = None
