"""edgestats — core internal data models.

These are plain dataclasses with no framework dependencies.
Stored JSON values are converted to/from these at the store boundary.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from edgestats.core.window import iso_from_ms
from edgestats.storage.base import RecordDecodeError


def _is_count(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


@dataclass(frozen=True)
class RouteStat:
    """Per-route hit counter as stored under the route identifier."""
    hits: int
    last: int  # epoch milliseconds of the most recent hit

    def to_dict(self) -> dict:
        return {"hits": self.hits, "last": self.last}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json(cls, raw: str) -> RouteStat:
        """Decode a stored value, raising RecordDecodeError if it is malformed."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            raise RecordDecodeError("stored value is not valid JSON") from exc
        if not isinstance(data, dict):
            raise RecordDecodeError("stored value is not a JSON object")
        hits = data.get("hits")
        last = data.get("last")
        if not (_is_count(hits) and _is_count(last)):
            raise RecordDecodeError("hits and last must be non-negative integers")
        return cls(hits=hits, last=last)


@dataclass(frozen=True)
class AggregateResult:
    """Snapshot of live routes for one stats request. Never persisted."""
    window_ms: int
    generated_at: int
    routes: dict[str, RouteStat] = field(default_factory=dict)

    @property
    def total_calls(self) -> int:
        return sum(stat.hits for stat in self.routes.values())

    @property
    def routes_count(self) -> int:
        return len(self.routes)

    def to_dict(self) -> dict:
        """Return the JSON-serializable response shape."""
        return {
            "windowMs": self.window_ms,
            "totalCalls": self.total_calls,
            "routesCount": self.routes_count,
            "routes": {route: stat.to_dict() for route, stat in self.routes.items()},
            "generatedAt": iso_from_ms(self.generated_at),
        }
