"""WebSocket-backed subscriber handles."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from fastapi import WebSocket


logger = logging.getLogger(__name__)

_CLOSE = None


class SubscriberUnavailableError(RuntimeError):
    """Raised when a subscriber can no longer accept payloads."""


class WebSocketSubscriber:
    """Buffers payloads for one WebSocket connection.

    ``send`` never waits on the network: payloads go into a bounded queue that
    :meth:`pump` drains. A full queue means the peer is not keeping up, which
    is reported as a failure so the registry drops it. ``send`` and ``close``
    must be called from the event loop running the connection.
    """

    def __init__(self, websocket: WebSocket, queue_size: int = 32, send_timeout: float = 5.0) -> None:
        self.websocket = websocket
        self.send_timeout = send_timeout
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=queue_size)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, payload: str) -> None:
        if self._closed:
            raise SubscriberUnavailableError("subscriber is closed")
        try:
            self._queue.put_nowait(payload)
        except asyncio.QueueFull as exc:
            raise SubscriberUnavailableError("subscriber queue is full") from exc

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()
        self._queue.put_nowait(_CLOSE)

    async def pump(self) -> None:
        """Write queued payloads to the socket until the subscriber closes."""
        while True:
            payload = await self._queue.get()
            if payload is _CLOSE or self._closed:
                return
            try:
                await asyncio.wait_for(self.websocket.send_text(payload), timeout=self.send_timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    "WebSocket write timed out",
                    extra={"reason": f"no progress after {self.send_timeout}s"},
                )
                self._closed = True
                return
            except Exception as exc:  # transport errors end this subscriber only
                logger.warning("WebSocket write failed", extra={"reason": repr(exc)})
                self._closed = True
                return
