"""
Injectable source of randomness for synthetic signals.

The hydrogen-sulfide channel and the prediction heuristic are placeholders
driven by random values. Both draw from a `RandomSource` so tests can script
the values and a deployment can seed the generator for reproducible runs.
"""

from __future__ import annotations

import random
from typing import Optional, Protocol


class RandomSource(Protocol):
    """
    Protocol interface for random draws.

    Methods
    -------
    random()
        Return a float in [0, 1).
    uniform(low, high)
        Return a float in [low, high].
    """

    def random(self) -> float:
        ...

    def uniform(self, low: float, high: float) -> float:
        ...


class SeededRandomSource:
    """
    `RandomSource` backed by `random.Random`.

    Parameters
    ----------
    seed
        Optional seed. None seeds from the operating system.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)


def build_random_source(seed: Optional[int] = None) -> RandomSource:
    """Build the shared random source used by calibration and prediction."""
    return SeededRandomSource(seed)
