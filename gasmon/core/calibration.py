"""
Conversion of raw MQ sensor channels into gas concentrations.

Mapping
-------
- methane (%)  = mq2 / 100
- CO (ppm)     = mq7 / 10
- H2S (ppm)    = synthetic value in [0, 10)

Hydrogen sulfide has no physical sensor input. Its value is a placeholder
drawn from the injected `RandomSource` each cycle and must not be read as a
real measurement.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from gasmon.core.random_source import RandomSource
from gasmon.domain.models import CalibratedSample, RawReading

MQ2_DIVISOR = 100.0
MQ7_DIVISOR = 10.0
H2S_PLACEHOLDER_MAX_PPM = 10.0


def synthesize_h2s(rng: RandomSource) -> float:
    """
    Draw the placeholder hydrogen-sulfide value.

    Parameters
    ----------
    rng
        Random source; ``rng.random()`` must return a value in [0, 1).

    Returns
    -------
    float
        Synthetic concentration in [0, 10) ppm.
    """
    return rng.random() * H2S_PLACEHOLDER_MAX_PPM


def _scale(value: float, divisor: float) -> float:
    try:
        return value / divisor
    except OverflowError:
        # int channel too large for a float; the controller's non-finite fallback applies.
        return math.inf if value > 0 else -math.inf


def methane_pct(mq2: float) -> float:
    return _scale(mq2, MQ2_DIVISOR)


def co_ppm(mq7: float) -> float:
    return _scale(mq7, MQ7_DIVISOR)


def calibrate(raw: RawReading, rng: RandomSource, now: Optional[datetime] = None) -> CalibratedSample:
    """
    Convert a raw reading into a calibrated sample.

    Values are not clamped; negative or extreme channel values map through
    unchanged. Non-finite results are left for the caller to handle.

    Parameters
    ----------
    raw
        Raw reading fetched from the reading store.
    rng
        Random source for the hydrogen-sulfide placeholder.
    now
        Sample timestamp. If None, uses `datetime.now()`.

    Returns
    -------
    CalibratedSample
        Calibrated concentrations.
    """
    return CalibratedSample(
        methane_pct=methane_pct(raw.mq2),
        co_ppm=co_ppm(raw.mq7),
        h2s_ppm=synthesize_h2s(rng),
        timestamp=now or datetime.now(),
    )
