from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from gasmon.core.calibration import calibrate
from gasmon.core.prediction import PredictionEngine
from gasmon.core.random_source import RandomSource
from gasmon.core.sources import ReadingSource, ReadingSourceUnavailable
from gasmon.core.state.alert_ledger import AlertLedger
from gasmon.core.state.history_window import HistoryWindow
from gasmon.core.state_store import StateStore
from gasmon.domain.models import (
    GAS_ORDER,
    CalibratedSample,
    Gas,
    LoopState,
    MonitorSnapshot,
    PredictionSnapshot,
)

logger = logging.getLogger(__name__)


@dataclass
class MonitoringController:
    """
    Run one monitoring cycle: fetch, derive and publish.

    Responsibilities
    ----------------
    - Fetch the latest raw reading from the configured source.
    - Calibrate it and replace non-finite gas values with the last good value.
    - Append the sample to the history window.
    - Record threshold alerts in the alert ledger.
    - Project the sample with the prediction engine.
    - Publish the sample, history, alerts and prediction to the `StateStore`
      as one snapshot.

    Notes
    -----
    History, ledger and the last-good values are owned by the controller and
    touched only from the monitoring loop thread, so no locking is done here.
    The only shared objects are the reading source and the state store, both
    of which are thread-safe.

    Parameters
    ----------
    source
        Where raw readings are fetched from.
    store
        Snapshot store consumers read from.
    rng
        Random source for the hydrogen-sulfide placeholder.
    history
        Sliding window of calibrated samples.
    ledger
        Newest-first alert log.
    predictor
        Prediction engine. Defaults to one sharing ``rng``.
    """

    source: ReadingSource
    store: StateStore
    rng: RandomSource
    history: HistoryWindow = field(default_factory=HistoryWindow)
    ledger: AlertLedger = field(default_factory=AlertLedger)
    predictor: Optional[PredictionEngine] = None

    _cycle: int = field(default=0, init=False)
    _state: LoopState = field(default=LoopState.IDLE, init=False)
    _last_good: Dict[Gas, float] = field(default_factory=lambda: {g: 0.0 for g in GAS_ORDER}, init=False)
    _last_good_projection: Dict[Gas, float] = field(
        default_factory=lambda: {g: 0.0 for g in GAS_ORDER}, init=False
    )

    def __post_init__(self) -> None:
        if self.predictor is None:
            self.predictor = PredictionEngine(self.rng)

    @property
    def cycle(self) -> int:
        """Number of completed cycles."""
        return self._cycle

    @property
    def state(self) -> LoopState:
        """Current phase of the cycle (IDLE between cycles)."""
        return self._state

    def run_cycle(self, now: Optional[datetime] = None) -> Optional[MonitorSnapshot]:
        """
        Run one fetch/derive/publish cycle.

        The controller moves through POLLING, DERIVING and PUBLISHING and is
        back in IDLE when this method returns, whether or not it raised.

        Parameters
        ----------
        now
            Timestamp used for the sample, alerts and snapshot. If None, uses
            `datetime.now()`.

        Returns
        -------
        MonitorSnapshot or None
            The published snapshot, or None if the source was unavailable and
            the cycle was skipped (the previous snapshot stays published).
        """
        ts = now or datetime.now()
        try:
            self._state = LoopState.POLLING
            try:
                raw = self.source.fetch_latest()
            except ReadingSourceUnavailable as e:
                logger.warning("skipping cycle, reading source unavailable: %s", e, extra={"reason": "source"})
                return None

            self._state = LoopState.DERIVING
            sample = self._sanitize_sample(calibrate(raw, self.rng, now=ts))
            self.history.append(sample)
            self.ledger.evaluate_and_record(sample, now=ts)
            prediction = self._sanitize_prediction(self.predictor.project(sample))  # type: ignore[union-attr]

            self._state = LoopState.PUBLISHING
            snapshot = MonitorSnapshot(
                sample=sample,
                history=self.history.snapshot(),
                alerts=self.ledger.snapshot(),
                prediction=prediction,
                cycle=self._cycle + 1,
                published_at=ts,
            )
            self.store.publish(snapshot)
            self._cycle += 1
        finally:
            self._state = LoopState.IDLE

        logger.debug(
            "cycle published: methane=%.2f co=%.2f h2s=%.2f",
            sample.methane_pct,
            sample.co_ppm,
            sample.h2s_ppm,
            extra={"cycle": self._cycle},
        )
        return snapshot

    def _sanitize_sample(self, sample: CalibratedSample) -> CalibratedSample:
        """
        Replace non-finite gas values with the last good value for that gas.

        Parameters
        ----------
        sample
            Freshly calibrated sample.

        Returns
        -------
        CalibratedSample
            Sample whose values are all finite.
        """
        for gas in GAS_ORDER:
            value = sample.value_for(gas)
            if math.isfinite(value):
                self._last_good[gas] = value
                continue
            fallback = self._last_good[gas]
            logger.warning(
                "non-finite calibrated value %r, using last good value %.2f",
                value,
                fallback,
                extra={"gas": gas.value, "reason": "non_finite"},
            )
            sample = sample.replace_value(gas, fallback)
        return sample

    def _sanitize_prediction(self, prediction: PredictionSnapshot) -> PredictionSnapshot:
        """Replace non-finite projected values with the last good projection."""
        projected: Dict[Gas, float] = {}
        for gas in GAS_ORDER:
            value = prediction.projected[gas]
            if math.isfinite(value):
                self._last_good_projection[gas] = value
            else:
                logger.warning(
                    "non-finite projected value %r, using last good projection",
                    value,
                    extra={"gas": gas.value, "reason": "non_finite"},
                )
            projected[gas] = self._last_good_projection[gas]
        return PredictionSnapshot(trend=prediction.trend, change_pct=prediction.change_pct, projected=projected)
