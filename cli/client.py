from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional

import httpx
import typer
from websockets.exceptions import ConnectionClosed
from websockets.sync.client import connect

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP and WebSocket client for the relay service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def push_reading(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._client.post("/api/sensor/push", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def get_latest(self) -> Optional[Dict[str, Any]]:
        """Return the latest reading, or ``None`` when the service has none yet."""
        try:
            response = self._client.get("/api/sensor/latest")
            if response.status_code == 204:
                return None
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def stream_readings(self) -> Iterator[Dict[str, Any]]:
        """Yield readings from the live stream until the server closes it."""
        with connect(self._config.ws_url, open_timeout=self._config.timeout) as websocket:
            try:
                for message in websocket:
                    yield json.loads(message)
            except ConnectionClosed as exc:
                typer.secho(f"Stream closed: {exc}", fg=typer.colors.YELLOW, err=True)

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
