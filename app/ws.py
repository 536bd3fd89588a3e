"""WebSocket route streaming live readings to dashboards."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from fastapi.websockets import WebSocketState

from services.broadcaster import Broadcaster, build_default_broadcaster
from services.subscribers import WebSocketSubscriber
from settings import Settings, get_settings


logger = logging.getLogger(__name__)

router = APIRouter()


def get_broadcaster() -> Broadcaster:
    return build_default_broadcaster()


def _remote_host(websocket: WebSocket) -> str:
    client = websocket.client
    return client.host if client else "unknown"


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    # Inbound messages are read only to notice the peer going away.
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws")
async def stream_readings(
    websocket: WebSocket,
    broadcaster: Broadcaster = Depends(get_broadcaster),
    settings: Settings = Depends(get_settings),
) -> None:
    remote_host = _remote_host(websocket)
    subscriber = WebSocketSubscriber(
        websocket,
        queue_size=settings.subscriber_queue_size,
        send_timeout=settings.subscriber_send_timeout,
    )

    # Registered before the handshake completes so the client never observes
    # an accepted socket that is not yet part of the fan-out.
    broadcaster.connect(subscriber)
    try:
        await websocket.accept()
    except Exception:
        broadcaster.disconnect(subscriber)
        subscriber.close()
        raise

    logger.info(
        "WebSocket session established",
        extra={
            "remote_host": remote_host,
            "user_agent": websocket.headers.get("user-agent") or "unknown",
            "connections": broadcaster.registry.count(),
        },
    )

    reader = asyncio.create_task(_wait_for_disconnect(websocket))
    writer = asyncio.create_task(subscriber.pump())
    try:
        done, _pending = await asyncio.wait({reader, writer}, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = task.exception()
            if exc is not None and not isinstance(exc, WebSocketDisconnect):
                logger.warning(
                    "WebSocket session ended with error",
                    extra={"remote_host": remote_host, "reason": repr(exc)},
                )
    finally:
        for task in (reader, writer):
            task.cancel()
        broadcaster.disconnect(subscriber)
        subscriber.close()
        await asyncio.gather(reader, writer, return_exceptions=True)
        if websocket.application_state == WebSocketState.CONNECTED and (
            websocket.client_state == WebSocketState.CONNECTED
        ):
            try:
                await websocket.close()
            except RuntimeError as exc:
                logger.debug("WebSocket already closed", extra={"reason": repr(exc)})
        logger.info(
            "WebSocket session closed",
            extra={"remote_host": remote_host, "connections": broadcaster.registry.count()},
        )
