from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from gasmon.domain.models import EMPTY_READING, RawReading


@dataclass
class ReadingStore:
    """
    Single-slot holder of the most recent raw sensor reading.

    The store is shared between the ingest endpoint (writer, request threads)
    and the monitoring loop (reader). Each publish builds a new immutable
    `RawReading` and swaps it into the slot, so a reader always observes one
    complete, previously published value.

    Notes
    -----
    - "Last write wins": concurrent publishes are ordered by whichever swap
      happens last. No history is kept at this layer.
    - Channel values are not validated or clamped here.
    - State is memory-resident only and is lost on restart.

    Attributes
    ----------
    _latest
        Current slot contents; `EMPTY_READING` until the first publish.
    """

    _latest: RawReading = EMPTY_READING
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def publish(self, mq2: float, mq7: float, now: Optional[datetime] = None) -> RawReading:
        """
        Overwrite the slot with a new reading stamped with the publish time.

        Parameters
        ----------
        mq2
            MQ-2 channel value.
        mq7
            MQ-7 channel value.
        now
            Publish timestamp. If None, uses `datetime.now()`.

        Returns
        -------
        RawReading
            The reading now held by the store.
        """
        reading = RawReading(mq2=mq2, mq7=mq7, timestamp=now or datetime.now())
        with self._lock:
            self._latest = reading
        return reading

    def fetch_latest(self) -> RawReading:
        """
        Return the current slot contents.

        Returns
        -------
        RawReading
            Latest published reading, or the zero-valued default
            ``{mq2: 0, mq7: 0}`` stamped with `NO_READING_TIMESTAMP`.
        """
        with self._lock:
            return self._latest

    @property
    def has_reading(self) -> bool:
        """True once at least one reading has been published."""
        with self._lock:
            return self._latest is not EMPTY_READING
