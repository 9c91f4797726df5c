"""Caching helpers shared across read-heavy services.

The :func:`cached` decorator wraps an async service method with a Redis
lookup keyed by the method arguments.  Services keep their domain logic free
of cache plumbing and simply declare how to build a key and how to turn a
result into JSON and back.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, Concatenate, ParamSpec, TypeVar, cast

from havbors.cache import CacheClient

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

CacheKeyBuilder = Callable[Concatenate["CacheableService", P], str | None]
CacheSerializer = Callable[[T], Any]
CacheDeserializer = Callable[[Any], T]
DecoratedCallable = Callable[Concatenate["CacheableService", P], Awaitable[T]]


class CacheableService:
    """Base class exposing ``_cache_get``/``_cache_set`` over an optional client."""

    def __init__(self, cache: CacheClient | None = None) -> None:
        self._cache = cache

    async def _cache_get(self, key: str) -> Any:
        if self._cache is None:
            return None
        return await self._cache.get_json(key)

    async def _cache_set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._cache is None or value is None:
            return
        await self._cache.set_json(key, value, ttl=ttl)


def cached(
    key_builder: CacheKeyBuilder[P],
    *,
    ttl: int | None = None,
    serializer: CacheSerializer[T] | None = None,
    deserializer: CacheDeserializer[T] | None = None,
) -> Callable[[DecoratedCallable], DecoratedCallable]:
    """Decorate an async service method with transparent caching.

    ``key_builder`` receives the same arguments as the method and may return
    ``None`` to bypass the cache for that call.  ``None`` results are never
    stored, so lookups that raise or find nothing always hit the database.
    """

    def decorator(func: DecoratedCallable) -> DecoratedCallable:
        @wraps(func)
        async def wrapper(
            self: "CacheableService", *args: P.args, **kwargs: P.kwargs
        ) -> T:
            cache_key = key_builder(self, *args, **kwargs)
            if cache_key:
                cached_value = await self._cache_get(cache_key)
                if cached_value is not None:
                    if deserializer is None:
                        return cast(T, cached_value)
                    try:
                        return deserializer(cached_value)
                    except ValueError as exc:
                        logger.warning(
                            "Discarding stale cache entry %s: %s", cache_key, exc
                        )

            result = await func(self, *args, **kwargs)

            if cache_key and result is not None:
                payload: Any = serializer(result) if serializer is not None else result
                await self._cache_set(cache_key, payload, ttl=ttl)

            return result

        return wrapper

    return decorator


__all__ = ["CacheableService", "cached"]
