"""Storage interface (port) for the route stats key-value store."""

from __future__ import annotations

from typing import Protocol


class StoreError(Exception):
    """Base class for key-value store failures."""


class StoreUnavailableError(StoreError):
    """A store operation failed or timed out."""


class RecordDecodeError(StoreError):
    """A stored value could not be decoded into a route record."""


class KeyValueStore(Protocol):
    """Port: string keys to opaque string values.

    Implementations may be eventually consistent. No operation is atomic with
    respect to any other, so a get followed by a put can interleave with other
    requests on the same key.
    """

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str) -> None: ...

    async def delete(self, key: str) -> None: ...

    async def list_keys(self, limit: int) -> list[str]: ...
