"""Tests for HitRecorder."""

from __future__ import annotations

import asyncio
import json

import pytest

from edgestats.core.models import RouteStat
from edgestats.core.recorder import HitRecorder
from edgestats.storage.base import StoreUnavailableError
from edgestats.storage.memory_store import InMemoryKeyValueStore


async def test_first_hit_creates_record(store):
    recorder = HitRecorder(store)
    stat = await recorder.record_hit("alpha", now=1_000)

    assert stat == RouteStat(hits=1, last=1_000)
    assert json.loads(await store.get("alpha")) == {"hits": 1, "last": 1_000}


async def test_sequential_hits_count_every_hit():
    store = InMemoryKeyValueStore()
    recorder = HitRecorder(store)
    timestamps = [0, 10, 20, 35, 50]
    for ts in timestamps:
        stat = await recorder.record_hit("alpha", now=ts)

    assert stat.hits == len(timestamps)
    assert stat.last == 50
    assert RouteStat.from_json(await store.get("alpha")) == RouteStat(hits=5, last=50)


async def test_routes_are_tracked_independently(store):
    recorder = HitRecorder(store)
    await recorder.record_hit("alpha", now=1)
    await recorder.record_hit("alpha", now=2)
    await recorder.record_hit("beta", now=3)

    assert RouteStat.from_json(await store.get("alpha")).hits == 2
    assert RouteStat.from_json(await store.get("beta")) == RouteStat(hits=1, last=3)


async def test_out_of_order_hit_sets_last_to_its_own_time(store):
    recorder = HitRecorder(store)
    await recorder.record_hit("alpha", now=100)
    stat = await recorder.record_hit("alpha", now=90)

    assert stat == RouteStat(hits=2, last=90)


async def test_corrupt_record_is_reset(store):
    await store.put("alpha", "{not json")
    recorder = HitRecorder(store)

    stat = await recorder.record_hit("alpha", now=5)

    assert stat == RouteStat(hits=1, last=5)
    assert RouteStat.from_json(await store.get("alpha")) == stat


async def test_get_failure_propagates(store):
    store.failing.add("get")
    with pytest.raises(StoreUnavailableError):
        await HitRecorder(store).record_hit("alpha", now=1)


async def test_put_failure_propagates(store):
    store.failing.add("put")
    with pytest.raises(StoreUnavailableError):
        await HitRecorder(store).record_hit("alpha", now=1)
    store.failing.clear()
    assert await store.get("alpha") is None


class BarrierStore(InMemoryKeyValueStore):
    """Holds every get until ``readers`` gets are in flight."""

    def __init__(self, readers: int) -> None:
        super().__init__()
        self._readers = readers
        self._arrived = 0
        self._release = asyncio.Event()

    async def get(self, key):
        value = await super().get(key)
        self._arrived += 1
        if self._arrived >= self._readers:
            self._release.set()
        await self._release.wait()
        return value


async def test_concurrent_hits_can_lose_updates():
    """Both hits read the same base record, so one increment is lost."""
    store = BarrierStore(readers=2)
    recorder = HitRecorder(store)

    results = await asyncio.gather(
        recorder.record_hit("alpha", now=10),
        recorder.record_hit("alpha", now=20),
    )

    assert [r.hits for r in results] == [1, 1]
    assert RouteStat.from_json(await store.get("alpha")).hits == 1
