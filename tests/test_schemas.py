"""Tests for producer payload decoding and the wire representation."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from app.schemas import MISSING_TEXT, SensorPushPayload, encode_reading


def test_full_payload_maps_onto_reading() -> None:
    payload = SensorPushPayload.model_validate_json(
        json.dumps(
            {
                "tipo": "leituras",
                "data_hora": "05/03/2024 14:22:10",
                "temperatura": 22.3,
                "umidade_ar": 58.5,
                "luminosidade": 73,
                "umidade_solo": 41,
                "solo_bruto": 2875,
                "status_bomba": "Bomba desativada",
                "status_luz": "Luz ligada",
            }
        )
    )

    reading = payload.to_reading()

    assert reading.kind == "leituras"
    assert reading.timestamp == "05/03/2024 14:22:10"
    assert reading.temperature == 22.3
    assert reading.air_humidity == 58.5
    assert reading.luminosity == 73
    assert reading.soil_moisture == 41
    assert reading.soil_raw == 2875
    assert reading.pump_status == "Bomba desativada"
    assert reading.light_status == "Luz ligada"


def test_missing_fields_get_placeholders_and_none() -> None:
    reading = SensorPushPayload.model_validate_json("{}").to_reading()

    assert reading.kind == MISSING_TEXT
    assert reading.timestamp == MISSING_TEXT
    assert reading.pump_status == MISSING_TEXT
    assert reading.light_status == MISSING_TEXT
    assert reading.temperature is None
    assert reading.soil_raw is None


def test_empty_strings_are_treated_as_missing() -> None:
    reading = SensorPushPayload.model_validate({"tipo": "", "status_luz": ""}).to_reading()

    assert reading.kind == MISSING_TEXT
    assert reading.light_status == MISSING_TEXT


def test_legacy_raw_soil_key_is_normalized() -> None:
    reading = SensorPushPayload.model_validate({"umidade_solo_bruto": 3012}).to_reading()

    assert reading.soil_raw == 3012


def test_canonical_raw_soil_key_wins_over_legacy() -> None:
    reading = SensorPushPayload.model_validate(
        {"solo_bruto": 1500, "umidade_solo_bruto": 3012}
    ).to_reading()

    assert reading.soil_raw == 1500


@pytest.mark.parametrize("legacy_value", [0, -4])
def test_non_positive_legacy_value_is_ignored(legacy_value: int) -> None:
    reading = SensorPushPayload.model_validate({"umidade_solo_bruto": legacy_value}).to_reading()

    assert reading.soil_raw is None


def test_unknown_keys_are_ignored() -> None:
    reading = SensorPushPayload.model_validate({"tipo": "leituras", "firmware": "1.2"}).to_reading()

    assert reading.kind == "leituras"


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[1, 2, 3]",
        '{"temperatura": "hot"}',
        '{"luminosidade": 55.5}',
        '{"tipo": 7}',
        '{"temperatura": NaN}',
        '{"umidade_ar": Infinity}',
        '{"temperatura": "22.3"}',
        '{"luminosidade": "55"}',
        '{"luminosidade": 55.0}',
    ],
)
def test_malformed_payloads_are_rejected(raw: str) -> None:
    with pytest.raises(ValidationError):
        SensorPushPayload.model_validate_json(raw)


def test_encoded_reading_uses_wire_keys_and_nulls() -> None:
    reading = SensorPushPayload.model_validate(
        {"tipo": "leituras", "data_hora": "x", "temperatura": 19.8}
    ).to_reading()

    decoded = json.loads(encode_reading(reading))

    assert decoded == {
        "tipo": "leituras",
        "data_hora": "x",
        "temperatura": 19.8,
        "umidade_ar": None,
        "luminosidade": None,
        "umidade_solo": None,
        "solo_bruto": None,
        "status_bomba": MISSING_TEXT,
        "status_luz": MISSING_TEXT,
    }


def test_integer_is_accepted_for_float_fields() -> None:
    reading = SensorPushPayload.model_validate_json('{"temperatura": 22, "umidade_ar": 60}').to_reading()

    assert reading.temperature == 22.0
    assert reading.air_humidity == 60.0
