"""Process-local TTL cache for slow-changing node reads.

Invalidation is time based only, so only reads that tolerate a stale answer
for the tier TTL go through it. Anything a transaction submission changes
(nonces, balances, transfer feeds) is read straight from the node.
"""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Hashable
from enum import Enum
from typing import Tuple, TypeVar

from ..config.schema import CacheConfig
from ..metrics.node import record_cache_observation

T = TypeVar("T")

__all__ = ["CacheTier", "TtlCache"]


class CacheTier(str, Enum):
    """TTL classes for node data.

    SHORT: near real-time values such as chain height and mempool fees.
    LONG: values that practically never change, e.g. token metadata.
    """

    SHORT = "short"
    LONG = "long"


def _monotonic() -> float:
    return time.monotonic()


class _CacheStore:
    def __init__(self, maxsize: int = 256) -> None:
        self._store: "OrderedDict[Hashable, Tuple[float, object]]" = OrderedDict()
        self._lock = threading.Lock()
        self._maxsize = max(1, int(maxsize))

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def get(self, key: Hashable, now: float) -> Tuple[bool, object | None]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False, None
            expires_at, value = entry
            if expires_at <= now:
                self._store.pop(key, None)
                return False, None
            self._store.move_to_end(key)
            return True, value

    def set(self, key: Hashable, value: object, expires_at: float) -> None:
        with self._lock:
            self._store[key] = (expires_at, value)
            self._store.move_to_end(key)
            while len(self._store) > self._maxsize:
                self._store.popitem(last=False)


class TtlCache:
    """Tiered TTL cache. One LRU-bounded store per tier."""

    def __init__(
        self,
        config: CacheConfig | None = None,
        *,
        clock: Callable[[], float] = _monotonic,
    ) -> None:
        self._config = config or CacheConfig()
        self._clock = clock
        self._ttls = {
            CacheTier.SHORT: self._config.short_ttl_s,
            CacheTier.LONG: self._config.long_ttl_s,
        }
        self._stores = {tier: _CacheStore(self._config.max_entries) for tier in CacheTier}

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    def ttl_for(self, tier: CacheTier) -> float:
        return self._ttls[tier]

    def clear(self) -> None:
        """Drop all cached entries."""

        for store in self._stores.values():
            store.clear()

    def size(self, tier: CacheTier) -> int:
        return len(self._stores[tier])

    def get_or_set(self, tier: CacheTier, key: Hashable, loader: Callable[[], T]) -> T:
        """Return the cached value for ``key`` or compute it using ``loader``.

        Loader exceptions propagate and nothing is stored. ``None`` results
        are not cached either.
        """

        if not self.enabled:
            return loader()
        store = self._stores[tier]
        hit, cached = store.get(key, self._clock())
        record_cache_observation(tier.value, hit)
        if hit:
            return cached  # type: ignore[return-value]
        value = loader()
        ttl = self._ttls[tier]
        if value is not None and ttl > 0:
            store.set(key, value, self._clock() + ttl)
        return value
