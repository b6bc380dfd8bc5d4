"""In-process key/value cache with per-entry expiration.

Expired entries are removed two ways:

* **lazily** -- :meth:`TTLCache.get` deletes an expired entry it runs into,
  so a read never returns stale data;
* **by sweep** -- :meth:`TTLCache.cleanup` drops every expired entry and is
  meant to be driven by a :class:`~storefront.cache.sweeper.CacheSweeper`,
  bounding the memory held by entries nobody reads again.

There is no capacity bound. An entry is expired once ``now >= expires_at``;
a zero or negative TTL therefore stores an entry that is already expired
and can never be read back.

All mutations, including the lazy eviction inside ``get``, run under a
single re-entrant lock, so one instance may be shared between threads.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar, overload

from storefront.cache.base import CacheKey, KeyLike, key_name
from storefront.output import debug

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCache:
    """Thread-safe in-memory TTL cache.

    Construct one at startup and hand it to the services that need it;
    pair it with a sweeper for long-running processes.

    Args:
        clock: Monotonic time source in seconds. Tests inject a fake one.

    Example::

        cache = TTLCache()
        cache.set("rates-usd", rates, CacheTTL.CRYPTO_RATES)
        rates = cache.get("rates-usd")  # None once 30 s have passed
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def set(self, key: KeyLike, value: Any, ttl_ms: float) -> None:
        """Insert or overwrite *key*, expiring *ttl_ms* milliseconds from now."""
        expires_at = self._clock() + ttl_ms / 1000.0
        with self._lock:
            self._store[key_name(key)] = CacheEntry(value=value, expires_at=expires_at)

    @overload
    def get(self, key: CacheKey[T], default: Optional[T] = None) -> Optional[T]: ...

    @overload
    def get(self, key: str, default: Any = None) -> Any: ...

    def get(self, key: KeyLike, default: Any = None) -> Any:
        """Return the live value for *key*, or *default* if absent or expired.

        An expired entry found here is deleted before returning.
        """
        name = key_name(key)
        with self._lock:
            entry = self._store.get(name)
            if entry is None:
                self._misses += 1
                return default
            if self._clock() >= entry.expires_at:
                del self._store[name]
                self._misses += 1
                self._evictions += 1
                return default
            self._hits += 1
            return entry.value

    def get_or_set(self, key: KeyLike, factory: Callable[[], Any], ttl_ms: float) -> Any:
        """Return the cached value for *key*, computing and storing it on a miss.

        A stored ``None`` counts as a hit. *factory* runs outside the lock,
        so two threads missing at once may both compute the value; the later
        ``set`` wins.
        """
        value = self.get(key, _MISSING)
        if value is not _MISSING:
            return value
        debug(f"Cache miss: {key_name(key)}")
        value = factory()
        self.set(key, value, ttl_ms)
        return value

    def delete(self, key: KeyLike) -> None:
        """Remove *key*. Absent keys are ignored."""
        with self._lock:
            self._store.pop(key_name(key), None)

    def cleanup(self) -> int:
        """Remove every expired entry and return how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._store.items() if now >= e.expires_at]
            for k in expired:
                del self._store[k]
            self._evictions += len(expired)
        return len(expired)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._store.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size``, ``hits``, ``misses`` and ``evictions`` counters."""
        with self._lock:
            return {
                "backend": "memory",
                "size": len(self._store),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }

    def __contains__(self, key: KeyLike) -> bool:
        with self._lock:
            entry = self._store.get(key_name(key))
            return entry is not None and self._clock() < entry.expires_at

    def __len__(self) -> int:
        # Expired entries count until evicted.
        with self._lock:
            return len(self._store)
