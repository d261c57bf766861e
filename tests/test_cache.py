"""Tests for the in-memory TTL cache."""

import asyncio

from health_rating.services.cache import InMemoryCache, generate_key
from tests.conftest import FakeClock


def test_set_and_get_roundtrip(cache: InMemoryCache) -> None:
    cache.set("key", {"value": 1}, ttl_seconds=60)

    assert cache.get("key") == {"value": 1}
    assert "key" in cache


def test_entry_expires_after_ttl(cache: InMemoryCache, clock: FakeClock) -> None:
    cache.set("key", "value", ttl_seconds=60)

    clock.advance(seconds=60)
    assert cache.get("key") == "value"

    clock.advance(seconds=1)
    assert cache.get("key") is None
    assert "key" not in cache


def test_empty_key_is_ignored(cache: InMemoryCache) -> None:
    cache.set(None, "value")
    cache.set("", "value")

    assert len(cache) == 0
    assert cache.get(None) is None


def test_full_cache_evicts_least_recently_used(clock: FakeClock) -> None:
    cache = InMemoryCache(max_size=10, clock=clock)
    for index in range(10):
        cache.set(f"k{index}", index)
        clock.advance(seconds=1)
    cache.get("k0")
    clock.advance(seconds=1)

    cache.set("k10", 10)

    assert len(cache) == 9
    assert "k0" in cache
    assert "k1" not in cache
    assert "k2" not in cache
    assert "k10" in cache
    assert cache.get_stats().evictions == 2


def test_small_cache_evicts_at_least_one(clock: FakeClock) -> None:
    cache = InMemoryCache(max_size=3, clock=clock)
    for index in range(3):
        cache.set(f"k{index}", index)
        clock.advance(seconds=1)

    cache.set("k3", 3)

    assert len(cache) == 3
    assert "k0" not in cache


def test_overwriting_existing_key_does_not_evict(clock: FakeClock) -> None:
    cache = InMemoryCache(max_size=2, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)

    cache.set("a", 3)

    assert len(cache) == 2
    assert cache.get("a") == 3


def test_delete_prefix_and_clear(cache: InMemoryCache) -> None:
    cache.set("healthRating:1", 1)
    cache.set("healthRating:2", 2)
    cache.set("other:1", 3)

    assert cache.delete_prefix("healthRating:") == 2
    assert len(cache) == 1

    cache.clear()
    assert len(cache) == 0


def test_sweep_expired_removes_only_expired(
    cache: InMemoryCache, clock: FakeClock
) -> None:
    cache.set("short", 1, ttl_seconds=10)
    cache.set("long", 2, ttl_seconds=100)
    clock.advance(seconds=20)

    assert cache.sweep_expired() == 1
    assert "short" not in cache
    assert "long" in cache
    assert cache.get_stats().hits == 0


def test_stats_report_usage(cache: InMemoryCache, clock: FakeClock) -> None:
    cache.set("a", 1, ttl_seconds=10)
    cache.set("b", 2, ttl_seconds=100)
    cache.get("a")
    cache.get("missing")
    clock.advance(seconds=20)

    stats = cache.get_stats()

    assert stats.total_entries == 2
    assert stats.active_entries == 1
    assert stats.expired_entries == 1
    assert stats.average_age_seconds == 20
    assert stats.max_size == 100
    assert stats.hits == 1
    assert stats.misses == 1
    assert len(cache) == 2


def test_generate_key_sanitizes_and_sorts() -> None:
    key = generate_key(
        "health-Rating!",
        {"na me": "Choc<script>", "n": {"a": 1, "b": True}, "x": None},
    )

    assert key == 'healthRating:{"n":{"a":1,"b":true},"name":"Chocscript"}'


def test_generate_key_ignores_param_order() -> None:
    first = generate_key("m", {"a": 1, "b": [1.5, "x"]})
    second = generate_key("m", {"b": [1.5, "x"], "a": 1})

    assert first == second


def test_generate_key_drops_non_finite_numbers() -> None:
    assert generate_key("m", {"a": float("nan"), "b": 2.0}) == 'm:{"b":2.0}'


def test_entries_expire_proactively_inside_event_loop() -> None:
    async def scenario() -> bool:
        cache = InMemoryCache()
        cache.set("key", "value", ttl_seconds=0.01)
        await asyncio.sleep(0.05)
        return "key" in cache

    assert asyncio.run(scenario()) is False


def test_generate_key_keeps_numeric_text_distinct() -> None:
    assert generate_key("m", {"v": "5.0"}) == 'm:{"v":"5.0"}'
    assert generate_key("m", {"v": "5.0"}) != generate_key("m", {"v": "50"})
    assert generate_key("m", {"v": "1.5e3"}) == 'm:{"v":"1.5e3"}'
