"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError

from app.schemas import PushResponse, ReadingMessage, SensorPushPayload, encode_reading
from models.records import SensorReading
from services.broadcaster import Broadcaster, ReadingSerializationError, build_default_broadcaster
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

MAX_LOGGED_BODY_BYTES = 1024
_NOT_RECEIVED = "not received"

router = APIRouter()


def get_broadcaster() -> Broadcaster:
    return build_default_broadcaster()


def sanitize_for_log(content: bytes) -> str:
    """Decode a request body for logging, masking control characters."""
    text = content.decode("utf-8", errors="replace")
    return "".join(
        char if ord(char) >= 32 or char in "\n\r\t" else "." for char in text
    )


def truncate_for_log(text: str, limit: int = MAX_LOGGED_BODY_BYTES) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "...(truncated)"


def format_measurement(value: Optional[Union[int, float]], unit: str = "") -> str:
    if value is None:
        return _NOT_RECEIVED
    if isinstance(value, float):
        return f"{value:.1f}{unit}"
    return f"{value}{unit}"


def describe_reading(reading: SensorReading) -> str:
    return (
        f"kind={reading.kind} timestamp={reading.timestamp} "
        f"temperature={format_measurement(reading.temperature, '°C')} "
        f"air_humidity={format_measurement(reading.air_humidity, '%')} "
        f"luminosity={format_measurement(reading.luminosity, '%')} "
        f"soil={format_measurement(reading.soil_moisture, '%')} "
        f"(raw={format_measurement(reading.soil_raw)}) "
        f"pump={reading.pump_status} light={reading.light_status}"
    )


async def _read_limited_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise HTTPException(
            status_code=413,
            detail=f"Request body exceeds {limit} bytes.",
        )

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise HTTPException(
                status_code=413,
                detail=f"Request body exceeds {limit} bytes.",
            )
    return bytes(body)


@router.post(
    "/api/sensor/push",
    response_model=PushResponse,
    summary="Accept a reading from the greenhouse controller and broadcast it.",
)
async def push_reading(
    request: Request,
    broadcaster: Broadcaster = Depends(get_broadcaster),
    settings: Settings = Depends(get_settings),
) -> PushResponse:
    remote_host = request.client.host if request.client else "unknown"
    body = await _read_limited_body(request, settings.max_request_body_bytes)
    if not body:
        logger.warning("Empty request received from producer", extra={"remote_host": remote_host})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body is empty.",
        )

    try:
        payload = SensorPushPayload.model_validate_json(body)
    except ValidationError as exc:
        logger.warning(
            "Invalid JSON received: %s",
            truncate_for_log(sanitize_for_log(body)),
            extra={"remote_host": remote_host, "reason": f"{exc.error_count()} validation error(s)"},
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid JSON payload.",
        ) from exc

    logger.info(
        "Payload received: %s",
        truncate_for_log(sanitize_for_log(body)),
        extra={"remote_host": remote_host, "payload_bytes": len(body)},
    )
    reading = payload.to_reading()

    try:
        broadcaster.publish(reading)
    except ReadingSerializationError as exc:
        logger.error(
            "Reading could not be serialized",
            extra={"reading_kind": reading.kind, "reason": str(exc)},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Reading could not be serialized.",
        ) from exc

    logger.info("Reading accepted: %s", describe_reading(reading))
    return PushResponse()


@router.get(
    "/api/sensor/latest",
    response_model=ReadingMessage,
    response_model_by_alias=True,
    summary="Return the most recent reading, or 204 when none has arrived yet.",
    responses={status.HTTP_204_NO_CONTENT: {"description": "No reading available yet."}},
)
async def latest_reading(
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> Response:
    reading = broadcaster.latest()
    if reading is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(content=encode_reading(reading), media_type="application/json")


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
