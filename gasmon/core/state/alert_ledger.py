from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from gasmon.core.alert.thresholds import DEFAULT_THRESHOLDS, ThresholdTable, classify
from gasmon.core.state.bounded_buffer import BoundedBuffer
from gasmon.domain.models import AlertRecord, CalibratedSample, Gas, ThresholdTier

logger = logging.getLogger(__name__)

DEFAULT_ALERT_CAPACITY = 10

_MESSAGES = {
    ThresholdTier.DANGER: "DANGER: {gas} level critical!",
    ThresholdTier.WARNING: "WARNING: {gas} level elevated",
}


def _new_alert_id() -> str:
    return uuid.uuid4().hex


def alert_message(severity: ThresholdTier, gas: Gas) -> str:
    """
    Render the message for an alert.

    Parameters
    ----------
    severity
        WARNING or DANGER.
    gas
        Gas that triggered the alert.

    Returns
    -------
    str
        e.g. ``"DANGER: METHANE level critical!"``.
    """
    return _MESSAGES[severity].format(gas=gas.value.upper())


def build_alerts(
    sample: CalibratedSample,
    table: ThresholdTable = DEFAULT_THRESHOLDS,
    now: Optional[datetime] = None,
    id_factory: Callable[[], str] = _new_alert_id,
) -> List[AlertRecord]:
    """
    Build the alert batch for one sample.

    Every gas in the table is classified in table order; each WARNING or
    DANGER result yields one `AlertRecord`.

    Parameters
    ----------
    sample
        Calibrated sample with finite values.
    table
        Threshold table used for classification.
    now
        Alert timestamp. If None, uses `datetime.now()`.
    id_factory
        Callable producing unique alert ids.

    Returns
    -------
    list of AlertRecord
        Alerts in gas order; empty if every gas is SAFE.
    """
    ts = now or datetime.now()
    alerts: List[AlertRecord] = []
    for gas in table:
        value = sample.value_for(gas)
        tier = classify(gas, value, table)
        if tier is ThresholdTier.SAFE:
            continue
        alerts.append(
            AlertRecord(
                id=id_factory(),
                severity=tier,
                gas=gas,
                value=f"{value:.2f}",
                message=alert_message(tier, gas),
                timestamp=ts,
            )
        )
    return alerts


class AlertLedger:
    """
    Newest-first log of alert records with a fixed capacity.

    Each evaluation prepends its whole batch (batch order preserved) and
    the ledger is then truncated to the most recent ``capacity`` records.
    Repeated identical alerts across cycles are not deduplicated.

    Notes
    -----
    Only the monitoring loop mutates the ledger; no locking is done here.

    Parameters
    ----------
    capacity
        Maximum number of retained records.
    table
        Threshold table used for classification.
    id_factory
        Callable producing unique alert ids.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_ALERT_CAPACITY,
        table: ThresholdTable = DEFAULT_THRESHOLDS,
        id_factory: Callable[[], str] = _new_alert_id,
    ) -> None:
        self._buffer: BoundedBuffer[AlertRecord] = BoundedBuffer(capacity, newest_first=True)
        self._table = table
        self._id_factory = id_factory

    @property
    def capacity(self) -> int:
        return self._buffer.capacity

    def evaluate_and_record(self, sample: CalibratedSample, now: Optional[datetime] = None) -> List[AlertRecord]:
        """
        Classify a sample and record the resulting alerts.

        Parameters
        ----------
        sample
            Calibrated sample with finite values.
        now
            Alert timestamp. If None, uses `datetime.now()`.

        Returns
        -------
        list of AlertRecord
            Newly created alerts in gas order.
        """
        batch = build_alerts(sample, self._table, now=now, id_factory=self._id_factory)
        if batch:
            self._buffer.add(batch)
            for a in batch:
                logger.warning(
                    a.message,
                    extra={"gas": a.gas.value, "severity": a.severity.value, "value": a.value},
                )
        return batch

    def snapshot(self) -> Tuple[AlertRecord, ...]:
        """Return the ledger contents, newest first."""
        return self._buffer.snapshot()

    def __len__(self) -> int:
        return len(self._buffer)
