from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterable, Iterator, Tuple, TypeVar

T = TypeVar("T")


class BoundedBuffer(Generic[T]):
    """
    Fixed-capacity buffer that always evicts its oldest entries.

    The same primitive backs both the history window (oldest first) and the
    alert ledger (newest first). Only the end new items enter from differs:

    - ``newest_first=False``: items are appended at the back, eviction
      drops from the front.
    - ``newest_first=True``: a batch is placed at the front with its order
      preserved, eviction drops from the back.

    Parameters
    ----------
    capacity
        Maximum number of retained items (must be positive).
    newest_first
        Ordering of `snapshot()` and the end at which items are inserted.
    """

    def __init__(self, capacity: int, newest_first: bool = False) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._newest_first = newest_first
        self._items: Deque[T] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, items: Iterable[T]) -> None:
        """
        Insert a batch of items, then evict down to capacity.

        Parameters
        ----------
        items
            Items in batch order. For a newest-first buffer the first item of
            the batch ends up at the very front.
        """
        batch = list(items)
        if self._newest_first:
            # deque.maxlen discards from the opposite end on extendleft.
            self._items.extendleft(reversed(batch))
        else:
            self._items.extend(batch)

    def snapshot(self) -> Tuple[T, ...]:
        """Return an immutable copy of the contents in buffer order."""
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.snapshot())
