"""edgestats server — main entry point.

This is the only file that knows about concrete implementations.
It wires together the core, storage, and API layers.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from edgestats.api.tracking import router as tracking_router
from edgestats.config import AppConfig, load_config
from edgestats.core.aggregator import StatsAggregator
from edgestats.core.recorder import HitRecorder
from edgestats.storage.base import KeyValueStore
from edgestats.storage.file_storage import FileKeyValueStore
from edgestats.storage.memory_store import InMemoryKeyValueStore

log = structlog.get_logger()

# Module-level singletons (set during startup)
_recorder: HitRecorder | None = None
_aggregator: StatsAggregator | None = None
_config: AppConfig | None = None


def get_recorder() -> HitRecorder:
    assert _recorder is not None, "Server not initialized"
    return _recorder


def get_aggregator() -> StatsAggregator:
    assert _aggregator is not None, "Server not initialized"
    return _aggregator


def get_config() -> AppConfig:
    assert _config is not None, "Server not initialized"
    return _config


def _setup_logging(config: AppConfig) -> None:
    """Configure structlog based on the logging config."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if config.logging.format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(config.logging.level.upper()),
        ),
    )


def build_store(config: AppConfig) -> KeyValueStore:
    """Create the key-value store selected by ``storage.backend``."""
    backend = config.storage.backend
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "file":
        return FileKeyValueStore(base_dir=config.storage.base_dir)
    raise ValueError(f"Unknown storage backend: {backend!r}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    global _recorder, _aggregator, _config

    _config = load_config()
    _setup_logging(_config)

    log.info("server_starting",
             env=_config.server.env,
             storage_backend=_config.storage.backend,
             list_limit=_config.tracking.list_limit)

    store = build_store(_config)
    _recorder = HitRecorder(store)
    _aggregator = StatsAggregator(store, list_limit=_config.tracking.list_limit)

    log.info("server_started",
             host=_config.server.host,
             port=_config.server.port)

    yield

    log.info("server_stopped")


app = FastAPI(
    title="edgestats",
    description="Cache-priming edge handler with per-route hit tracking",
    version="0.1.0",
    lifespan=lifespan,
    # Every path is a route identifier; no framework docs routes.
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.include_router(tracking_router)


def serve() -> None:
    """Run the app under uvicorn using the configured host and port."""
    config = load_config()
    uvicorn.run("edgestats.main:app", host=config.server.host, port=config.server.port)
