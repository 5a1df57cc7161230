"""Hit recorder — loads, increments, and stores a route's hit counter.

This is the write side of the tracking core. It depends on the KeyValueStore
protocol, not on a concrete store.

The load/increment/store sequence is not atomic. Two concurrent hits on the
same route may both read the same record, and the later write wins, so the
stored ``hits`` can undercount. Counters are approximate by design.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from edgestats.core.models import RouteStat
from edgestats.storage.base import RecordDecodeError

if TYPE_CHECKING:
    from edgestats.storage.base import KeyValueStore

log = structlog.get_logger()


class HitRecorder:
    """Records one hit per call against the route's stored record."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    async def _load(self, route_id: str, now: int) -> RouteStat:
        raw = await self._store.get(route_id)
        if raw is None:
            return RouteStat(hits=0, last=now)
        try:
            return RouteStat.from_json(raw)
        except RecordDecodeError:
            log.warning("corrupt_record_reset", route=route_id, exc_info=True)
            return RouteStat(hits=0, last=now)

    async def record_hit(self, route_id: str, now: int) -> RouteStat:
        """Count a hit on ``route_id`` at ``now`` (epoch ms) and return the new record.

        Store failures propagate as StoreUnavailableError.
        """
        current = await self._load(route_id, now)
        updated = RouteStat(hits=current.hits + 1, last=now)
        await self._store.put(route_id, updated.to_json())
        log.debug("hit_recorded", route=route_id, hits=updated.hits)
        return updated
