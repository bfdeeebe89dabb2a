from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Optional

from gasmon.domain.models import MonitorSnapshot


@dataclass
class StateStore:
    """
    Thread-safe holder of the latest published monitor snapshot.

    The monitoring loop publishes one `MonitorSnapshot` per cycle; API
    handlers and other consumers read it from their own threads.

    Concurrency Model
    -----------------
    Publishing swaps a reference to a frozen snapshot under a re-entrant lock
    (`threading.RLock`). Consumers therefore always see the sample, history,
    alerts and prediction of the same cycle, never a mix of two cycles.

    Attributes
    ----------
    _latest
        Last published snapshot, or None before the first cycle completes.
    """

    _latest: Optional[MonitorSnapshot] = None
    _published_count: int = 0

    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    def publish(self, snapshot: MonitorSnapshot) -> None:
        """
        Replace the published snapshot.

        Parameters
        ----------
        snapshot
            Snapshot built at the end of a monitoring cycle.
        """
        with self._lock:
            self._latest = snapshot
            self._published_count += 1

    @property
    def latest(self) -> Optional[MonitorSnapshot]:
        """
        Latest published snapshot.

        Returns
        -------
        MonitorSnapshot or None
            None while no cycle has completed ("no data yet").
        """
        with self._lock:
            return self._latest

    @property
    def published_count(self) -> int:
        """Number of snapshots published since start."""
        with self._lock:
            return self._published_count
