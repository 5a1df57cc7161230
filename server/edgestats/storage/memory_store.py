"""In-process implementation of KeyValueStore."""

from __future__ import annotations

import asyncio


class InMemoryKeyValueStore:
    """KeyValueStore backed by a dict. Zero dependencies.

    The lock only guards individual operations; callers still see the same
    read-modify-write interleavings they would get from a remote store.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._lock = asyncio.Lock()
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        async with self._lock:
            self._data[key] = value

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._data.pop(key, None)

    async def list_keys(self, limit: int) -> list[str]:
        """Return up to ``limit`` keys in lexicographic order."""
        async with self._lock:
            return sorted(self._data)[:limit]
