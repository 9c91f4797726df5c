from __future__ import annotations

import asyncio
import json
import logging
import time
from hashlib import sha256
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from havbors.settings import get_settings

logger = logging.getLogger(__name__)

_FEED_PREFIX = "listings:feed"
_LISTING_DETAIL_PREFIX = "listings:detail"
_FAVORITE_LIST_PREFIX = "favorites:list"
_FOLDER_LIST_PREFIX = "favorites:folders"
_NOTIFICATION_LIST_PREFIX = "notifications:list"
_PROFILE_PREFIX = "profiles:detail"

_redis_client: Redis | None = None
_client_lock = asyncio.Lock()
_redis_disabled_until: float = 0.0


def feed_key(
    search_text: str,
    *,
    page: int,
    page_size: int,
    kind: str | None = None,
) -> str:
    parts = [
        search_text.strip().lower(),
        str(page),
        str(page_size),
        (kind or "").strip().lower(),
    ]
    digest = sha256("|".join(parts).encode("utf-8")).hexdigest()
    return f"{_FEED_PREFIX}:{digest}"


def listing_detail_key(kind: str, listing_id: str) -> str:
    return f"{_LISTING_DETAIL_PREFIX}:{kind}:{listing_id}"


def _user_segment(user_id: str) -> str:
    # Hex digest: never contains ':' or glob metacharacters.
    return sha256(user_id.encode("utf-8")).hexdigest()[:32]


def favorite_list_key(user_id: str, folder_id: int | None = None) -> str:
    folder_part = "all" if folder_id is None else str(folder_id)
    return f"{_FAVORITE_LIST_PREFIX}:{_user_segment(user_id)}:{folder_part}"


def folder_list_key(user_id: str) -> str:
    return f"{_FOLDER_LIST_PREFIX}:{_user_segment(user_id)}"


def notification_list_key(user_id: str) -> str:
    return f"{_NOTIFICATION_LIST_PREFIX}:{user_id}"


def profile_key(user_id: str) -> str:
    return f"{_PROFILE_PREFIX}:{user_id}"


def _is_redis_connection_error(exc: BaseException) -> bool:
    """Return ``True`` when ``exc`` represents a Redis availability failure."""

    return isinstance(exc, (RedisConnectionError, RedisTimeoutError, OSError))


async def get_redis() -> Redis | None:
    """Get the shared Redis client, returning ``None`` while Redis is unreachable.

    A failed connection disables caching for ``REDIS_RETRY_BACKOFF_SECONDS`` so
    every request does not pay for a fresh connection timeout.
    """

    global _redis_client, _redis_disabled_until

    if _redis_disabled_until > time.monotonic():
        logger.debug("Redis connection disabled after previous failure; skipping attempt.")
        return None

    async with _client_lock:
        if _redis_client is not None:
            return _redis_client

        if _redis_disabled_until > time.monotonic():
            return None

        settings = get_settings()
        client = Redis.from_url(
            settings.redis_url, decode_responses=True, encoding="utf-8"
        )
        try:
            await client.ping()
        except Exception as exc:  # noqa: BLE001 - filtered below
            if not _is_redis_connection_error(exc):
                raise
            logger.warning(
                "Redis connection failed: %s. Caching disabled for %.0fs.",
                exc,
                settings.redis_retry_backoff_seconds,
            )
            _redis_disabled_until = (
                time.monotonic() + settings.redis_retry_backoff_seconds
            )
            await client.aclose()
            return None

        _redis_client = client
        logger.info("Redis connection established successfully")
        return _redis_client


class CacheClient:
    """JSON cache facade over Redis that degrades to a no-op without it."""

    def __init__(self, redis: Redis | None, *, default_ttl: int | None = None) -> None:
        self._redis = redis
        self._default_ttl = default_ttl or get_settings().cache_ttl_seconds

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    async def get_json(self, key: str) -> Any:
        if self._redis is None:
            return None
        try:
            payload = await self._redis.get(key)
        except Exception as exc:  # noqa: BLE001 - filtered below
            if _is_redis_connection_error(exc):
                logger.debug("Redis get failed for key %s: %s", key, exc)
                return None
            raise
        if payload is None:
            return None
        try:
            return json.loads(payload)
        except json.JSONDecodeError:
            logger.debug("Discarding undecodable cache payload for key %s", key)
            return None

    async def set_json(self, key: str, value: Any, ttl: int | None = None) -> None:
        if self._redis is None:
            return
        encoded = json.dumps(value, default=str)
        try:
            await self._redis.set(key, encoded, ex=ttl or self._default_ttl)
        except Exception as exc:  # noqa: BLE001 - filtered below
            if _is_redis_connection_error(exc):
                logger.debug("Redis set failed for key %s: %s", key, exc)
                return
            raise

    async def delete(self, *keys: str) -> None:
        if self._redis is None or not keys:
            return
        try:
            await self._redis.delete(*keys)
        except Exception as exc:  # noqa: BLE001 - filtered below
            if _is_redis_connection_error(exc):
                logger.debug("Redis delete failed: %s", exc)
                return
            raise

    async def delete_pattern(self, pattern: str) -> None:
        if self._redis is None:
            return
        try:
            async for key in self._redis.scan_iter(match=pattern):
                await self._redis.delete(key)
        except Exception as exc:  # noqa: BLE001 - filtered below
            if _is_redis_connection_error(exc):
                logger.debug("Redis delete_pattern failed for %s: %s", pattern, exc)
                return
            raise


async def get_cache_client() -> CacheClient:
    redis = await get_redis()
    return CacheClient(redis)


async def close_redis() -> None:
    """Close the global Redis connection gracefully."""

    global _redis_client, _redis_disabled_until
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    _redis_disabled_until = 0.0


async def invalidate_user_favorites(cache: CacheClient, user_id: str) -> None:
    """Drop every favorites and folder entry cached for ``user_id``."""

    await cache.delete(folder_list_key(user_id))
    await cache.delete_pattern(f"{_FAVORITE_LIST_PREFIX}:{_user_segment(user_id)}:*")


__all__ = [
    "CacheClient",
    "close_redis",
    "favorite_list_key",
    "feed_key",
    "folder_list_key",
    "get_cache_client",
    "get_redis",
    "invalidate_user_favorites",
    "listing_detail_key",
    "notification_list_key",
    "profile_key",
]
