"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class SensorReading:
    """One snapshot of the greenhouse sensors as reported by the producer.

    Every field is carried as-is: no unit conversion, range checks or
    interpretation happen once a reading has been built.
    """

    kind: str
    timestamp: str
    pump_status: str
    light_status: str
    temperature: Optional[float] = None
    air_humidity: Optional[float] = None
    luminosity: Optional[int] = None
    soil_moisture: Optional[int] = None
    soil_raw: Optional[int] = None
