"""
Bounded in-memory event history.

Records are kept newest first. Once the store holds `capacity` records, each
insert drops the oldest one; reads never affect which record goes next.
"""

import threading
from collections import deque

from .models import EventRecord


class EventStore:
    """Thread-safe, fixed-capacity, most-recent-first sequence of event records."""

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._events: deque[EventRecord] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(self, record: EventRecord) -> int:
        """Insert a record at the head, evicting the tail when full.

        Returns the number of stored records after the insert.
        """
        with self._lock:
            # appendleft on a bounded deque discards from the right end
            self._events.appendleft(record)
            return len(self._events)

    def snapshot(self) -> list[EventRecord]:
        """Return copies of the current records, newest first.

        Records are deep-copied so callers cannot change stored payloads
        through the nested dicts.
        """
        with self._lock:
            return [record.model_copy(deep=True) for record in self._events]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
