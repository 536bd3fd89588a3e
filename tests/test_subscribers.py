"""Tests for the queue-backed WebSocket subscriber handle."""

from __future__ import annotations

import asyncio

import pytest

from services.subscribers import SubscriberUnavailableError, WebSocketSubscriber
from tests.fakes import FakeWebSocket


async def _wait_until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            pytest.fail("condition not reached in time")
        await asyncio.sleep(0.005)


def test_pump_writes_payloads_in_order_and_stops_on_close() -> None:
    async def scenario() -> None:
        websocket = FakeWebSocket()
        subscriber = WebSocketSubscriber(websocket, queue_size=4)
        pump = asyncio.create_task(subscriber.pump())

        subscriber.send("a")
        subscriber.send("b")
        subscriber.send("c")
        await _wait_until(lambda: len(websocket.sent) == 3)

        subscriber.close()
        await asyncio.wait_for(pump, timeout=1.0)

        assert websocket.sent == ["a", "b", "c"]

    asyncio.run(scenario())


def test_send_raises_when_queue_is_full() -> None:
    async def scenario() -> None:
        subscriber = WebSocketSubscriber(FakeWebSocket(), queue_size=2)
        subscriber.send("a")
        subscriber.send("b")

        with pytest.raises(SubscriberUnavailableError):
            subscriber.send("c")

    asyncio.run(scenario())


def test_send_after_close_raises_and_close_is_idempotent() -> None:
    async def scenario() -> None:
        subscriber = WebSocketSubscriber(FakeWebSocket(), queue_size=1)
        subscriber.send("pending")

        subscriber.close()
        subscriber.close()

        assert subscriber.closed is True
        with pytest.raises(SubscriberUnavailableError):
            subscriber.send("late")

    asyncio.run(scenario())


def test_close_discards_queued_payloads() -> None:
    async def scenario() -> None:
        websocket = FakeWebSocket()
        subscriber = WebSocketSubscriber(websocket, queue_size=3)
        subscriber.send("a")
        subscriber.send("b")

        subscriber.close()
        await asyncio.wait_for(subscriber.pump(), timeout=1.0)

        assert websocket.sent == []

    asyncio.run(scenario())


def test_slow_write_times_out_and_closes_subscriber() -> None:
    async def scenario() -> None:
        websocket = FakeWebSocket(delay=1.0)
        subscriber = WebSocketSubscriber(websocket, queue_size=2, send_timeout=0.01)
        subscriber.send("stuck")

        await asyncio.wait_for(subscriber.pump(), timeout=1.0)

        assert subscriber.closed is True
        assert websocket.sent == []
        with pytest.raises(SubscriberUnavailableError):
            subscriber.send("next")

    asyncio.run(scenario())


def test_transport_error_closes_subscriber() -> None:
    async def scenario() -> None:
        websocket = FakeWebSocket(error=RuntimeError("socket closed"))
        subscriber = WebSocketSubscriber(websocket, queue_size=2)
        subscriber.send("payload")

        await asyncio.wait_for(subscriber.pump(), timeout=1.0)

        assert subscriber.closed is True

    asyncio.run(scenario())
