from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router
from app.ws import router as ws_router
from datastore.reading_store import build_default_store
from logging_config import configure_logging
from services.broadcaster import build_default_broadcaster
from services.registry import build_default_registry


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    broadcaster = build_default_broadcaster()
    try:
        yield
    finally:
        broadcaster.shutdown()
        build_default_broadcaster.cache_clear()
        build_default_registry.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Sensor Relay",
        description="Relays greenhouse sensor readings to live WebSocket dashboards.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.include_router(router)
    app.include_router(ws_router)
    return app

app = create_app()
