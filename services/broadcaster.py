"""Publishing readings to the store and to every live subscriber."""

from __future__ import annotations

import logging
from functools import lru_cache
from threading import Lock
from typing import Callable, Optional

from app.schemas import encode_reading
from datastore.reading_store import ReadingStore, build_default_store
from models.records import SensorReading
from services.registry import Subscriber, SubscriberRegistry, build_default_registry


logger = logging.getLogger(__name__)


class ReadingSerializationError(ValueError):
    """Raised when a reading cannot be turned into its wire representation."""


class Broadcaster:
    """Coordinates the reading store, the subscriber registry and replays."""

    def __init__(
        self,
        store: ReadingStore,
        registry: SubscriberRegistry,
        serializer: Callable[[SensorReading], str] = encode_reading,
    ) -> None:
        self.store = store
        self.registry = registry
        self._serializer = serializer
        self._publish_lock = Lock()

    def publish(self, reading: SensorReading) -> int:
        """Make ``reading`` the latest one and push it to all subscribers.

        The reading is serialized once, before the store is touched, so a
        reading that cannot be encoded never becomes the latest value.
        Returns the number of subscribers that accepted the payload.
        """
        payload = self._encode(reading)
        with self._publish_lock:
            self.store.set(reading)
            return self.registry.broadcast(payload)

    def latest(self) -> Optional[SensorReading]:
        return self.store.get()

    def connect(self, subscriber: Subscriber) -> bool:
        """Register a subscriber and replay the latest reading to it alone.

        Registration happens before the store is read, so a publish racing
        with this call reaches the subscriber through one path or the other.
        Returns ``False`` when the replay failed and the subscriber was dropped.
        """
        self.registry.register(subscriber)
        reading = self.store.get()
        if reading is None:
            return True

        try:
            subscriber.send(self._encode(reading))
        except Exception as exc:  # replay failures are handled like broadcast ones
            logger.warning("Replay to new subscriber failed", extra={"reason": repr(exc)})
            self.registry.discard_failed([subscriber])
            return False
        logger.debug("Latest reading replayed to new subscriber")
        return True

    def disconnect(self, subscriber: Subscriber) -> None:
        self.registry.deregister(subscriber)

    def shutdown(self) -> None:
        """Close every live subscriber during application shutdown."""
        self.registry.close_all()

    def _encode(self, reading: SensorReading) -> str:
        try:
            return self._serializer(reading)
        except ValueError as exc:
            raise ReadingSerializationError(str(exc)) from exc


@lru_cache
def build_default_broadcaster() -> Broadcaster:
    """Factory that wires the broadcaster with the default store and registry."""
    return Broadcaster(store=build_default_store(), registry=build_default_registry())
