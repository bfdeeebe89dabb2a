"""
Contract between the monitoring loop and wherever raw readings come from.

Two implementations exist:
- `gasmon.core.state.reading_store.ReadingStore` (in-process slot)
- `gasmon.transport.http_source.HttpReadingSource` (polls the ingest API)
"""

from __future__ import annotations

from typing import Protocol

from gasmon.domain.models import RawReading


class ReadingSourceUnavailable(RuntimeError):
    """Raised when the latest reading cannot be retrieved this cycle."""


class ReadingSource(Protocol):
    """
    Protocol interface for fetching the latest raw reading.

    Methods
    -------
    fetch_latest()
        Return the most recent raw reading. May raise
        `ReadingSourceUnavailable` on transient transport failures.
    """

    def fetch_latest(self) -> RawReading:
        ...
