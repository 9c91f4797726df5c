"""In-memory stand-ins for Redis and the JSON cache client."""

from __future__ import annotations

import fnmatch
import json
from collections.abc import AsyncIterator
from typing import Any


class MemoryCache:
    """Drop-in replacement for :class:`havbors.cache.CacheClient`."""

    def __init__(self) -> None:
        self.store: dict[str, Any] = {}
        self.ttls: dict[str, int | None] = {}
        self.deleted: list[str] = []

    @property
    def enabled(self) -> bool:
        return True

    async def get_json(self, key: str) -> Any:
        value = self.store.get(key)
        # Round-trip through JSON like the real client so callers get fresh copies.
        return None if value is None else json.loads(json.dumps(value, default=str))

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        self.store[key] = json.loads(json.dumps(value, default=str))
        self.ttls[key] = ttl

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.deleted.append(key)
            self.store.pop(key, None)
            self.ttls.pop(key, None)

    async def delete_pattern(self, pattern: str) -> None:
        for key in [key for key in self.store if fnmatch.fnmatch(key, pattern)]:
            await self.delete(key)


class InMemoryRedis:
    """Lightweight async Redis double used for cache client tests."""

    def __init__(self) -> None:
        self._store: dict[str, str] = {}
        self._ttl: dict[str, int | None] = {}

    async def ping(self) -> bool:  # pragma: no cover - mirror redis API
        return True

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> None:
        self._store[key] = value
        self._ttl[key] = ex

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self._store.pop(key, None)
            self._ttl.pop(key, None)

    async def scan_iter(self, match: str) -> AsyncIterator[str]:
        for key in list(self._store.keys()):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self) -> None:  # pragma: no cover - compatibility shim
        self._store.clear()
        self._ttl.clear()
