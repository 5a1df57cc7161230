"""Shared test fixtures."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

import edgestats.main as main_module
from edgestats.config import AppConfig
from edgestats.core.aggregator import StatsAggregator
from edgestats.core.recorder import HitRecorder
from edgestats.storage.base import StoreUnavailableError
from edgestats.storage.memory_store import InMemoryKeyValueStore


class FlakyStore(InMemoryKeyValueStore):
    """In-memory store whose operations can be made to fail one by one."""

    def __init__(self) -> None:
        super().__init__()
        self.failing: set[str] = set()
        self.deleted: list[str] = []

    def _check(self, op: str) -> None:
        if op in self.failing:
            raise StoreUnavailableError(f"{op} unavailable")

    async def get(self, key):
        self._check("get")
        return await super().get(key)

    async def put(self, key, value):
        self._check("put")
        await super().put(key, value)

    async def delete(self, key):
        self._check("delete")
        await super().delete(key)
        self.deleted.append(key)

    async def list_keys(self, limit):
        self._check("list_keys")
        return await super().list_keys(limit)


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture(autouse=True)
def _init_server(store):
    """Initialize server singletons for every test, using an in-memory store."""
    config = AppConfig()
    config.logging.level = "warning"

    # Patch module-level singletons
    main_module._config = config
    main_module._recorder = HitRecorder(store)
    main_module._aggregator = StatsAggregator(store, list_limit=config.tracking.list_limit)

    yield

    # Cleanup
    main_module._config = None
    main_module._recorder = None
    main_module._aggregator = None


@pytest.fixture
async def client():
    from edgestats.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
