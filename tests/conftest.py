from __future__ import annotations

from typing import Iterator

import pytest

from datastore.reading_store import build_default_store
from services.broadcaster import build_default_broadcaster
from services.registry import build_default_registry
from settings import get_settings


def _clear_default_components() -> None:
    for cache in (
        build_default_broadcaster,
        build_default_registry,
        build_default_store,
        get_settings,
    ):
        cache.cache_clear()


@pytest.fixture(autouse=True)
def fresh_components() -> Iterator[None]:
    _clear_default_components()
    yield
    _clear_default_components()
