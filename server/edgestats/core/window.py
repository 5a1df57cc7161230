"""Time and window helpers shared by the recorder and the aggregator."""

from __future__ import annotations

import time
from datetime import datetime, timezone

# Default stats window: 5 minutes.
DEFAULT_WINDOW_MS = 5 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


def iso_from_ms(timestamp_ms: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC string with a ``Z`` suffix."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_window(raw: str | None, default: int = DEFAULT_WINDOW_MS) -> int:
    """Parse the ``window`` query parameter.

    Only plain ASCII digits are accepted; anything else, or zero, falls back
    to ``default``.
    """
    if raw is None:
        return default
    digits = raw.strip()
    if not (digits.isascii() and digits.isdigit()):
        return default
    value = int(digits)
    return value if value > 0 else default


def is_live(last: int, now: int, window_ms: int) -> bool:
    """A record is live iff its last hit is at most ``window_ms`` before ``now``."""
    return now - last <= window_ms
