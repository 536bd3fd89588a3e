"""Registry of live subscriber handles and the fan-out pass over them."""

from __future__ import annotations

import logging
from functools import lru_cache
from threading import Lock
from typing import Protocol, Set


logger = logging.getLogger(__name__)


class Subscriber(Protocol):
    """An outbound delivery channel for one connected client.

    ``send`` must not block; it raises when the payload cannot be accepted.
    ``close`` releases the underlying connection and may be called repeatedly.
    """

    def send(self, payload: str) -> None:
        ...

    def close(self) -> None:
        ...


class SubscriberRegistry:
    """Thread-safe set of live subscribers.

    The lock only guards membership changes and snapshots. Deliveries happen
    outside of it so a registration never waits behind a broadcast.
    """

    def __init__(self) -> None:
        self._subscribers: Set[Subscriber] = set()
        self._lock = Lock()

    def register(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.add(subscriber)

    def deregister(self, subscriber: Subscriber) -> None:
        with self._lock:
            self._subscribers.discard(subscriber)

    def count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def broadcast(self, payload: str) -> int:
        """Deliver ``payload`` to every subscriber, pruning those that fail.

        Returns the number of successful deliveries.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        failed: list[Subscriber] = []
        for subscriber in subscribers:
            try:
                subscriber.send(payload)
            except Exception as exc:  # any failure is terminal for the handle
                logger.warning(
                    "Delivery to subscriber failed, removing it",
                    extra={"reason": repr(exc)},
                )
                failed.append(subscriber)

        if failed:
            self.discard_failed(failed)

        delivered = len(subscribers) - len(failed)
        if subscribers:
            logger.info(
                "Broadcast sent",
                extra={
                    "delivered": delivered,
                    "pruned": len(failed) or None,
                    "connections": self.count(),
                },
            )
        return delivered

    def discard_failed(self, subscribers: list[Subscriber]) -> None:
        """Deregister and close subscribers whose delivery failed."""
        with self._lock:
            for subscriber in subscribers:
                self._subscribers.discard(subscriber)
        for subscriber in subscribers:
            _close_quietly(subscriber)

    def close_all(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
            self._subscribers.clear()
        for subscriber in subscribers:
            _close_quietly(subscriber)


def _close_quietly(subscriber: Subscriber) -> None:
    try:
        subscriber.close()
    except Exception as exc:  # pragma: no cover - close failures only get logged
        logger.debug("Closing subscriber failed", extra={"reason": repr(exc)})


@lru_cache
def build_default_registry() -> SubscriberRegistry:
    return SubscriberRegistry()
