"""Pydantic schemas for the HTTP and WebSocket layers."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.records import SensorReading

MISSING_TEXT = "dado não recebido"


class SensorPushPayload(BaseModel):
    """Inbound payload posted by the greenhouse controller.

    Every field is optional so partial payloads are accepted. Older bridge
    firmware reports the raw soil ADC value as ``umidade_solo_bruto``.
    Validation is strict: numbers must be JSON numbers and NaN or Infinity
    tokens are rejected.
    """

    model_config = ConfigDict(extra="ignore", strict=True, allow_inf_nan=False)

    kind: Optional[str] = Field(default=None, alias="tipo")
    timestamp: Optional[str] = Field(default=None, alias="data_hora")
    temperature: Optional[float] = Field(default=None, alias="temperatura")
    air_humidity: Optional[float] = Field(default=None, alias="umidade_ar")
    luminosity: Optional[int] = Field(default=None, alias="luminosidade")
    soil_moisture: Optional[int] = Field(default=None, alias="umidade_solo")
    soil_raw: Optional[int] = Field(default=None, alias="solo_bruto")
    soil_raw_legacy: Optional[int] = Field(default=None, alias="umidade_solo_bruto")
    pump_status: Optional[str] = Field(default=None, alias="status_bomba")
    light_status: Optional[str] = Field(default=None, alias="status_luz")

    def to_reading(self) -> SensorReading:
        """Normalize the payload into the canonical reading."""
        soil_raw = self.soil_raw
        if soil_raw is None and self.soil_raw_legacy is not None and self.soil_raw_legacy > 0:
            soil_raw = self.soil_raw_legacy

        return SensorReading(
            kind=self.kind or MISSING_TEXT,
            timestamp=self.timestamp or MISSING_TEXT,
            pump_status=self.pump_status or MISSING_TEXT,
            light_status=self.light_status or MISSING_TEXT,
            temperature=self.temperature,
            air_humidity=self.air_humidity,
            luminosity=self.luminosity,
            soil_moisture=self.soil_moisture,
            soil_raw=soil_raw,
        )


class ReadingMessage(BaseModel):
    """Wire representation shared by the latest-reading endpoint and the live stream."""

    kind: str = Field(serialization_alias="tipo")
    timestamp: str = Field(serialization_alias="data_hora")
    temperature: Optional[float] = Field(default=None, serialization_alias="temperatura")
    air_humidity: Optional[float] = Field(default=None, serialization_alias="umidade_ar")
    luminosity: Optional[int] = Field(default=None, serialization_alias="luminosidade")
    soil_moisture: Optional[int] = Field(default=None, serialization_alias="umidade_solo")
    soil_raw: Optional[int] = Field(default=None, serialization_alias="solo_bruto")
    pump_status: str = Field(serialization_alias="status_bomba")
    light_status: str = Field(serialization_alias="status_luz")

    @classmethod
    def from_reading(cls, reading: SensorReading) -> "ReadingMessage":
        return cls(
            kind=reading.kind,
            timestamp=reading.timestamp,
            temperature=reading.temperature,
            air_humidity=reading.air_humidity,
            luminosity=reading.luminosity,
            soil_moisture=reading.soil_moisture,
            soil_raw=reading.soil_raw,
            pump_status=reading.pump_status,
            light_status=reading.light_status,
        )


class PushResponse(BaseModel):
    """Acknowledgement returned to the producer after a reading is accepted."""

    status: str = "received"
    message: str = "Reading accepted."


def encode_reading(reading: SensorReading) -> str:
    """Serialize a reading into the JSON text sent to every subscriber."""
    return ReadingMessage.from_reading(reading).model_dump_json(by_alias=True)
