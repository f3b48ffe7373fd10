from __future__ import annotations

import pytest

from wallet_core.config.schema import CacheConfig
from wallet_core.services.cache import CacheTier, TtlCache


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def clock() -> _Clock:
    return _Clock()


def _loader(values: list):
    calls = {"count": 0}

    def load():
        calls["count"] += 1
        return values[calls["count"] - 1]

    return load, calls


def test_value_is_served_until_tier_ttl_expires(clock: _Clock) -> None:
    cache = TtlCache(CacheConfig(short_ttl_s=2.0), clock=clock)
    load, calls = _loader([10, 11])

    assert cache.get_or_set(CacheTier.SHORT, "height", load) == 10
    clock.now += 1.5
    assert cache.get_or_set(CacheTier.SHORT, "height", load) == 10
    clock.now += 1.0
    assert cache.get_or_set(CacheTier.SHORT, "height", load) == 11
    assert calls["count"] == 2


def test_tiers_are_independent(clock: _Clock) -> None:
    cache = TtlCache(CacheConfig(short_ttl_s=1.0, long_ttl_s=100.0), clock=clock)

    cache.get_or_set(CacheTier.SHORT, "k", lambda: "short")
    cache.get_or_set(CacheTier.LONG, "k", lambda: "long")
    clock.now += 5

    assert cache.get_or_set(CacheTier.LONG, "k", lambda: "reloaded") == "long"
    assert cache.get_or_set(CacheTier.SHORT, "k", lambda: "reloaded") == "reloaded"


def test_none_is_not_cached(clock: _Clock) -> None:
    cache = TtlCache(clock=clock)
    load, calls = _loader([None, 5])

    assert cache.get_or_set(CacheTier.SHORT, "nonce", load) is None
    assert cache.get_or_set(CacheTier.SHORT, "nonce", load) == 5
    assert calls["count"] == 2


def test_disabled_cache_always_loads(clock: _Clock) -> None:
    cache = TtlCache(CacheConfig(enabled=False), clock=clock)
    load, calls = _loader([1, 2])

    assert cache.get_or_set(CacheTier.LONG, "tokens", load) == 1
    assert cache.get_or_set(CacheTier.LONG, "tokens", load) == 2
    assert cache.size(CacheTier.LONG) == 0


def test_loader_errors_propagate_and_are_not_stored(clock: _Clock) -> None:
    cache = TtlCache(clock=clock)

    def boom():
        raise RuntimeError("node down")

    with pytest.raises(RuntimeError):
        cache.get_or_set(CacheTier.SHORT, "fees", boom)
    assert cache.size(CacheTier.SHORT) == 0


def test_store_is_bounded(clock: _Clock) -> None:
    cache = TtlCache(CacheConfig(max_entries=2), clock=clock)

    for key in ("a", "b", "c"):
        cache.get_or_set(CacheTier.LONG, key, lambda key=key: key)

    assert cache.size(CacheTier.LONG) == 2
    assert cache.get_or_set(CacheTier.LONG, "a", lambda: "again") == "again"


def test_clear_drops_entries(clock: _Clock) -> None:
    cache = TtlCache(clock=clock)
    cache.get_or_set(CacheTier.SHORT, "x", lambda: 1)

    cache.clear()

    assert cache.size(CacheTier.SHORT) == 0
