from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_reading
from settings import get_settings

TIMESTAMP_FORMAT = "%d/%m/%Y %H:%M:%S"


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for running and interacting with the sensor relay service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Relay base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for the service to respond.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (defaults to HOST env)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (defaults to PORT env)."),
) -> None:
    """Run the relay HTTP and WebSocket server."""
    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    typer.echo(f"Serving on {bind_host}:{bind_port} (ws at /ws, push at /api/sensor/push)")
    uvicorn.run("app.main:app", host=bind_host, port=bind_port, log_config=None)


def _payload_from_options(
    kind: str,
    timestamp: Optional[str],
    temperature: Optional[float],
    air_humidity: Optional[float],
    luminosity: Optional[int],
    soil_moisture: Optional[int],
    soil_raw: Optional[int],
    pump_status: Optional[str],
    light_status: Optional[str],
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "tipo": kind,
        "data_hora": timestamp or datetime.now().strftime(TIMESTAMP_FORMAT),
        "temperatura": temperature,
        "umidade_ar": air_humidity,
        "luminosidade": luminosity,
        "umidade_solo": soil_moisture,
        "solo_bruto": soil_raw,
        "status_bomba": pump_status,
        "status_luz": light_status,
    }
    return {key: value for key, value in payload.items() if value is not None}


@app.command("push")
def push_command(
    ctx: typer.Context,
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, readable=True, help="JSON payload to send as-is."
    ),
    kind: str = typer.Option("leituras", "--kind", help="Reading kind tag."),
    timestamp: Optional[str] = typer.Option(None, "--timestamp", help="Producer timestamp (defaults to now)."),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Temperature in °C."),
    air_humidity: Optional[float] = typer.Option(None, "--air-humidity", help="Air humidity in %."),
    luminosity: Optional[int] = typer.Option(None, "--luminosity", help="Luminosity 0-100."),
    soil_moisture: Optional[int] = typer.Option(None, "--soil-moisture", help="Calibrated soil moisture in %."),
    soil_raw: Optional[int] = typer.Option(None, "--soil-raw", help="Raw soil sensor ADC value."),
    pump_status: Optional[str] = typer.Option(None, "--pump-status", help="Pump status text."),
    light_status: Optional[str] = typer.Option(None, "--light-status", help="Light status text."),
) -> None:
    """Send a reading to the relay as the producer would."""
    state = _get_state(ctx)
    if file is not None:
        try:
            payload = json.loads(file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise typer.BadParameter(f"{file} is not valid JSON: {exc}") from exc
    else:
        payload = _payload_from_options(
            kind,
            timestamp,
            temperature,
            air_humidity,
            luminosity,
            soil_moisture,
            soil_raw,
            pump_status,
            light_status,
        )

    response = state.client.push_reading(payload)
    typer.secho(f"Reading accepted. status={response.get('status')}", fg=typer.colors.GREEN)


@app.command("latest")
def latest_command(ctx: typer.Context) -> None:
    """Fetch the most recent reading."""
    state = _get_state(ctx)
    payload = state.client.get_latest()
    if payload is None:
        typer.echo("No reading available yet.")
        return
    render_reading(payload)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    count: int = typer.Option(0, "--count", "-n", min=0, help="Stop after this many readings (0 = forever)."),
) -> None:
    """Print readings from the live stream as they arrive."""
    state = _get_state(ctx)
    typer.echo(f"Watching {state.config.ws_url} ...")
    received = 0
    for payload in state.client.stream_readings():
        received += 1
        typer.echo()
        render_reading(payload, heading=f"Reading #{received}")
        if count and received >= count:
            break
