from __future__ import annotations

from typing import Any, Dict, Iterable

import typer

_FIELDS = (
    ("kind", "tipo", ""),
    ("timestamp", "data_hora", ""),
    ("temperature", "temperatura", "°C"),
    ("air_humidity", "umidade_ar", "%"),
    ("luminosity", "luminosidade", "%"),
    ("soil_moisture", "umidade_solo", "%"),
    ("soil_raw", "solo_bruto", ""),
    ("pump_status", "status_bomba", ""),
    ("light_status", "status_luz", ""),
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _with_unit(value: Any, unit: str) -> Any:
    if value is None:
        return "not received"
    return f"{value}{unit}" if unit else value


def render_reading(payload: Dict[str, Any], heading: str = "Latest Reading") -> None:
    echo_heading(heading)
    echo_key_values(
        (label, _with_unit(payload.get(key), unit)) for label, key, unit in _FIELDS
    )
