"""Unit tests for the in-memory latest-reading store."""

from __future__ import annotations

import threading

from datastore.reading_store import ReadingStore, build_default_store
from models.records import SensorReading


def _reading(temperature: float) -> SensorReading:
    return SensorReading(
        kind="leituras",
        timestamp="01/01/2024 12:00:00",
        pump_status="Bomba desativada",
        light_status="Luz ligada",
        temperature=temperature,
    )


def test_get_returns_none_before_any_reading() -> None:
    store = ReadingStore()

    assert store.get() is None


def test_set_replaces_previous_reading_wholesale() -> None:
    store = ReadingStore()
    first = _reading(22.3)
    second = SensorReading(
        kind="leituras",
        timestamp="01/01/2024 12:01:00",
        pump_status="Bomba ativada",
        light_status="Luz desligada",
    )

    store.set(first)
    store.set(second)

    latest = store.get()
    assert latest is second
    assert latest.temperature is None


def test_last_write_wins_across_sequence() -> None:
    store = ReadingStore()
    readings = [_reading(float(value)) for value in range(10)]

    for reading in readings:
        store.set(reading)
        assert store.get() is reading


def test_concurrent_readers_only_see_complete_values() -> None:
    store = ReadingStore()
    readings = [_reading(float(value)) for value in range(50)]
    written = {id(reading) for reading in readings}
    observed: list[SensorReading | None] = []

    def writer() -> None:
        for reading in readings:
            store.set(reading)

    def reader() -> None:
        for _ in range(200):
            observed.append(store.get())

    threads = [threading.Thread(target=writer)] + [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for value in observed:
        assert value is None or id(value) in written


def test_default_store_is_cached() -> None:
    assert build_default_store() is build_default_store()
