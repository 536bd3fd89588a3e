from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"
_MAX_BODY_ENV = "MAX_REQUEST_BODY_BYTES"
_QUEUE_SIZE_ENV = "SUBSCRIBER_QUEUE_SIZE"
_SEND_TIMEOUT_ENV = "SUBSCRIBER_SEND_TIMEOUT"


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    log_level: str
    max_request_body_bytes: int
    subscriber_queue_size: int
    subscriber_send_timeout: float


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_positive_int(_PORT_ENV, 8080),
        log_level=_read_log_level("INFO"),
        max_request_body_bytes=_read_positive_int(_MAX_BODY_ENV, 8 * 1024),
        subscriber_queue_size=_read_positive_int(_QUEUE_SIZE_ENV, 32),
        subscriber_send_timeout=_read_positive_float(_SEND_TIMEOUT_ENV, 5.0),
    )
