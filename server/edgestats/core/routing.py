"""Request path classification. No framework dependencies."""

from __future__ import annotations

from dataclasses import dataclass

STATS_IDENTIFIER = "stats"

# Largest key, in UTF-8 bytes, accepted by the hosting KV platform.
MAX_ROUTE_LENGTH = 512


@dataclass(frozen=True)
class RouteTarget:
    kind: str  # "stats", "hit" or "help"
    route_id: str = ""


STATS = RouteTarget(kind="stats")
HELP = RouteTarget(kind="help")


def classify_path(
    path: str,
    stats_identifier: str = STATS_IDENTIFIER,
    max_route_length: int = MAX_ROUTE_LENGTH,
) -> RouteTarget:
    """Map a request path to the stats endpoint, a tracked route, or help.

    A single leading ``/`` is stripped. What remains is either empty or the
    stats identifier (stats), or an opaque route identifier. Identifiers made
    only of separators or longer than ``max_route_length`` bytes are not
    routable.
    """
    slug = path[1:] if path.startswith("/") else path
    if slug == "" or slug == stats_identifier:
        return STATS
    if not slug.strip("/"):
        return HELP
    if len(slug.encode("utf-8")) > max_route_length:
        return HELP
    return RouteTarget(kind="hit", route_id=slug)
