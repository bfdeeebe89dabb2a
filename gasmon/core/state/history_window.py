from __future__ import annotations

from typing import Tuple

from gasmon.core.state.bounded_buffer import BoundedBuffer
from gasmon.domain.models import CalibratedSample

DEFAULT_HISTORY_CAPACITY = 20


class HistoryWindow:
    """
    Sliding window of the most recent calibrated samples.

    The window starts empty, grows until it reaches capacity and then behaves
    as a fixed-size buffer: each append evicts the oldest sample.

    Notes
    -----
    - Only the monitoring loop mutates the window; no locking is done here.
    - `snapshot()` returns a tuple, so callers cannot modify the window
      through it.

    Parameters
    ----------
    capacity
        Maximum number of retained samples.
    """

    def __init__(self, capacity: int = DEFAULT_HISTORY_CAPACITY) -> None:
        self._buffer: BoundedBuffer[CalibratedSample] = BoundedBuffer(capacity)

    @property
    def capacity(self) -> int:
        return self._buffer.capacity

    def append(self, sample: CalibratedSample) -> None:
        """
        Append one sample, evicting the oldest if over capacity.

        Parameters
        ----------
        sample
            Calibrated sample to retain.
        """
        self._buffer.add((sample,))

    def snapshot(self) -> Tuple[CalibratedSample, ...]:
        """
        Return the window contents, oldest first.

        Returns
        -------
        tuple of CalibratedSample
            Read-only copy of the window.
        """
        return self._buffer.snapshot()

    def __len__(self) -> int:
        return len(self._buffer)
