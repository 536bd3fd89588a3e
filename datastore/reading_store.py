from __future__ import annotations

from functools import lru_cache
from threading import Lock
from typing import Optional

from models.records import SensorReading


class ReadingStore:
    """Holds the most recent reading in memory.

    Readings are immutable, so swapping the reference under the lock is enough
    for readers to always see a complete value.
    """

    def __init__(self) -> None:
        self._reading: Optional[SensorReading] = None
        self._lock = Lock()

    def set(self, reading: SensorReading) -> None:
        with self._lock:
            self._reading = reading

    def get(self) -> Optional[SensorReading]:
        with self._lock:
            return self._reading


@lru_cache
def build_default_store() -> ReadingStore:
    return ReadingStore()
