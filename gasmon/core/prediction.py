"""
Short-horizon trend projection.

`PredictionEngine` is a placeholder heuristic, not a forecasting model: the
trend direction and the percent change are drawn from the injected
`RandomSource` independently of each other and of the sample history. The
same change percentage is applied to every gas. A real model can replace it
as long as it returns a `PredictionSnapshot` of the same shape.
"""

from __future__ import annotations

from gasmon.core.random_source import RandomSource
from gasmon.domain.models import GAS_ORDER, CalibratedSample, PredictionSnapshot, Trend

MAX_CHANGE_PCT = 10.0


class PredictionEngine:
    """
    Random-walk style projection of the latest sample.

    Parameters
    ----------
    rng
        Random source for the trend direction and change magnitude.
    """

    def __init__(self, rng: RandomSource) -> None:
        self._rng = rng

    def project(self, sample: CalibratedSample) -> PredictionSnapshot:
        """
        Project every gas by one shared percent change.

        Parameters
        ----------
        sample
            Latest calibrated sample.

        Returns
        -------
        PredictionSnapshot
            ``projected[gas] = sample[gas] * (1 + change_pct / 100)``.
        """
        trend = Trend.INCREASING if self._rng.random() > 0.5 else Trend.DECREASING
        change_pct = self._rng.uniform(-MAX_CHANGE_PCT, MAX_CHANGE_PCT)
        factor = 1 + change_pct / 100
        projected = {gas: sample.value_for(gas) * factor for gas in GAS_ORDER}
        return PredictionSnapshot(trend=trend, change_pct=change_pct, projected=projected)
