"""Stats aggregation over a trailing time window.

Enumerates stored routes, keeps the ones hit within the window, and deletes
the rest. Deletion only ever happens here, as a side effect of a stats read;
a stale route that no stats read visits stays in the store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from edgestats.core.models import AggregateResult, RouteStat
from edgestats.core.window import is_live
from edgestats.storage.base import RecordDecodeError, StoreError

if TYPE_CHECKING:
    from edgestats.storage.base import KeyValueStore

log = structlog.get_logger()

# Maximum number of keys listed per aggregation.
DEFAULT_LIST_LIMIT = 1000


class StatsAggregator:
    """Computes AggregateResult snapshots and lazily evicts stale routes.

    At most ``list_limit`` keys are examined per call. Routes beyond the limit
    are left out of the aggregate without error, and are not pruned either.
    """

    def __init__(self, store: KeyValueStore, list_limit: int = DEFAULT_LIST_LIMIT) -> None:
        if list_limit < 1:
            raise ValueError("list_limit must be at least 1")
        self._store = store
        self._list_limit = list_limit

    @property
    def list_limit(self) -> int:
        return self._list_limit

    async def _prune(self, route_id: str, stat: RouteStat, now: int) -> None:
        """Delete a stale route. Failures are logged, never raised."""
        try:
            await self._store.delete(route_id)
        except StoreError:
            log.warning("stale_route_prune_failed", route=route_id, exc_info=True)
            return
        log.debug("stale_route_pruned", route=route_id, age_ms=now - stat.last)

    async def compute_aggregate(self, window_ms: int, now: int) -> AggregateResult:
        """Aggregate routes hit within ``window_ms`` of ``now`` (epoch ms).

        List and get failures propagate as StoreUnavailableError.
        """
        if window_ms < 0:
            raise ValueError("window_ms must be non-negative")

        keys = await self._store.list_keys(self._list_limit)
        if len(keys) >= self._list_limit:
            log.warning("key_listing_truncated", limit=self._list_limit)

        routes: dict[str, RouteStat] = {}
        for route_id in keys:
            raw = await self._store.get(route_id)
            if raw is None:
                # Deleted since listing.
                continue
            try:
                stat = RouteStat.from_json(raw)
            except RecordDecodeError:
                log.warning("corrupt_record_skipped", route=route_id, exc_info=True)
                continue

            if is_live(stat.last, now, window_ms):
                routes[route_id] = stat
            else:
                await self._prune(route_id, stat, now)

        result = AggregateResult(window_ms=window_ms, generated_at=now, routes=routes)
        log.info("aggregate_computed",
                 window_ms=window_ms,
                 keys_listed=len(keys),
                 routes_count=result.routes_count,
                 total_calls=result.total_calls)
        return result
