"""CacheClient behaviour against an in-memory Redis double."""

from __future__ import annotations

import json

import pytest

from havbors.cache import (
    CacheClient,
    favorite_list_key,
    feed_key,
    folder_list_key,
    invalidate_user_favorites,
    listing_detail_key,
    notification_list_key,
    profile_key,
)
from tests.havbors.support.doubles import InMemoryRedis


class _BrokenRedis(InMemoryRedis):
    async def get(self, key: str) -> str | None:
        raise ConnectionError("redis went away")


@pytest.mark.asyncio
async def test_cache_client_round_trip() -> None:
    """CacheClient should round-trip JSON payloads and honour TTL settings."""

    fake_redis = InMemoryRedis()
    cache = CacheClient(fake_redis)

    await cache.set_json("demo", {"value": 42}, ttl=120)
    assert json.loads(fake_redis._store["demo"]) == {"value": 42}
    assert fake_redis._ttl["demo"] == 120
    assert await cache.get_json("demo") == {"value": 42}

    await cache.delete("demo")
    assert await cache.get_json("demo") is None


@pytest.mark.asyncio
async def test_default_ttl_applies_when_none_given() -> None:
    fake_redis = InMemoryRedis()
    cache = CacheClient(fake_redis, default_ttl=45)

    await cache.set_json("demo", [1, 2])

    assert fake_redis._ttl["demo"] == 45


@pytest.mark.asyncio
async def test_disabled_client_is_a_no_op() -> None:
    cache = CacheClient(None)

    await cache.set_json("demo", {"value": 1})
    await cache.delete_pattern("*")

    assert cache.enabled is False
    assert await cache.get_json("demo") is None


@pytest.mark.asyncio
async def test_connection_errors_degrade_to_cache_miss() -> None:
    cache = CacheClient(_BrokenRedis())

    assert await cache.get_json("demo") is None


@pytest.mark.asyncio
async def test_invalidate_user_favorites_leaves_other_users() -> None:
    fake_redis = InMemoryRedis()
    cache = CacheClient(fake_redis)
    for key in (
        favorite_list_key("anna"),
        favorite_list_key("anna", 3),
        folder_list_key("anna"),
        favorite_list_key("bjorn"),
    ):
        await cache.set_json(key, {"cached": True})

    await invalidate_user_favorites(cache, "anna")

    assert sorted(fake_redis._store) == [favorite_list_key("bjorn")]


@pytest.mark.asyncio
async def test_invalidate_user_favorites_ignores_separators_and_globs_in_user_id() -> None:
    fake_redis = InMemoryRedis()
    cache = CacheClient(fake_redis)
    neighbours = [favorite_list_key("anna:x"), favorite_list_key("anna"), favorite_list_key("bjorn")]
    for key in [favorite_list_key("*"), favorite_list_key("ann[a]"), *neighbours]:
        await cache.set_json(key, {"cached": True})

    await invalidate_user_favorites(cache, "*")
    await invalidate_user_favorites(cache, "ann[a]")

    assert sorted(fake_redis._store) == sorted(neighbours)


def test_key_builders_normalize_input() -> None:
    assert feed_key("  Garn ", page=0, page_size=20) == feed_key("garn", page=0, page_size=20)
    assert feed_key("garn", page=0, page_size=20) != feed_key("garn", page=1, page_size=20)
    assert feed_key("garn", page=0, page_size=20, kind="job").startswith("listings:feed:")
    assert listing_detail_key("vessel", "v-1") == "listings:detail:vessel:v-1"
    assert favorite_list_key("anna").startswith("favorites:list:")
    assert favorite_list_key("anna").endswith(":all")
    assert favorite_list_key("anna", 7).endswith(":7")
    assert folder_list_key("anna").startswith("favorites:folders:")
    assert "anna" not in folder_list_key("anna")
    assert notification_list_key("anna") == "notifications:list:anna"
    assert profile_key("anna") == "profiles:detail:anna"
