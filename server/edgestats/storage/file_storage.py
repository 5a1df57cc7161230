"""File-based implementation of KeyValueStore.

Stores each key as its own file:
- File name is the SHA-256 hex digest of the key plus a ``.json`` suffix,
  so any key fits within the filesystem's name length limit
- File content is a JSON envelope ``{"key": ..., "value": ...}`` holding the
  original key and the raw value

Writes go to a temporary file first and are moved into place, so a reader
never sees a half-written value.
"""

from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path

import structlog

from edgestats.storage.base import StoreUnavailableError

log = structlog.get_logger()

_SUFFIX = ".json"


def _decode_envelope(text: str) -> tuple[str, str]:
    """Return (key, value) from a stored envelope; ValueError if malformed."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("envelope is not a JSON object")
    key = data.get("key")
    value = data.get("value")
    if not (isinstance(key, str) and isinstance(value, str)):
        raise ValueError("envelope key and value must be strings")
    return key, value


class FileKeyValueStore:
    """KeyValueStore backed by one file per key in a single directory."""

    def __init__(self, base_dir: str | Path) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._base_dir / (digest + _SUFFIX)

    async def get(self, key: str) -> str | None:
        try:
            text = self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StoreUnavailableError(f"read failed for {key!r}") from exc
        try:
            _, value = _decode_envelope(text)
        except ValueError as exc:
            raise StoreUnavailableError(f"unreadable entry for {key!r}") from exc
        return value

    async def put(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_name(path.name + ".tmp")
        envelope = json.dumps({"key": key, "value": value}, separators=(",", ":"))
        try:
            tmp_path.write_text(envelope, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StoreUnavailableError(f"write failed for {key!r}") from exc
        log.debug("store_value_written", key=key, path=str(path))

    async def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StoreUnavailableError(f"delete failed for {key!r}") from exc

    async def list_keys(self, limit: int) -> list[str]:
        """Return up to ``limit`` keys in lexicographic order.

        Keys are read back from the file envelopes; unreadable files are
        logged and left out.
        """
        keys = []
        try:
            for entry in os.scandir(self._base_dir):
                if not (entry.is_file() and entry.name.endswith(_SUFFIX)):
                    continue
                try:
                    key, _ = _decode_envelope(Path(entry.path).read_text(encoding="utf-8"))
                except FileNotFoundError:
                    # Deleted since the directory scan.
                    continue
                except ValueError:
                    log.warning("store_entry_unreadable", path=entry.path)
                    continue
                keys.append(key)
        except OSError as exc:
            raise StoreUnavailableError("listing failed") from exc
        return sorted(keys)[:limit]
