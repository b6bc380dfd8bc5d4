"""Disk-backed TTL cache with the same contract as :class:`~storefront.cache.TTLCache`.

Each CLI invocation is a fresh process, so an in-memory cache would never
see a hit there. :class:`DiskTTLCache` persists entries with
:mod:`diskcache` instead, letting consecutive ``storefront get`` calls
share cached catalog responses.

Expiry is delegated to diskcache: reads never return an entry past its
expire time, and :meth:`DiskTTLCache.cleanup` calls
:meth:`diskcache.Cache.expire` to drop them from disk. The store is opened
with ``cull_limit=0`` so writes never cull expired rows on their own; as
with the in-memory store, the sweep is the one place bulk removal happens.
Unlike the in-memory store, an expired row is not deleted by the read that
skips it; it stays on disk until the next cleanup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import diskcache

from storefront.cache.base import KeyLike, key_name


class DiskTTLCache:
    """Persistent TTL cache stored under ``<directory>/entries``.

    Args:
        directory: Root directory for the cache; usually
            :func:`~storefront.config.get_cache_dir`.

    Example::

        cache = DiskTTLCache(get_cache_dir())
        cache.set("products-active", products, CacheTTL.PRODUCTS)
        cache.close()
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory) / "entries"
        self._cache = diskcache.Cache(str(self._directory), cull_limit=0)
        self._cache.stats(enable=True)

    @property
    def directory(self) -> Path:
        return self._directory

    def set(self, key: KeyLike, value: Any, ttl_ms: float) -> None:
        """Insert or overwrite *key*. Non-positive TTLs store an unreadable entry."""
        self._cache.set(key_name(key), value, expire=ttl_ms / 1000.0)

    def get(self, key: KeyLike, default: Optional[Any] = None) -> Any:
        """Return the live value for *key*, or *default* if absent or expired."""
        return self._cache.get(key_name(key), default=default)

    def delete(self, key: KeyLike) -> None:
        """Remove *key*. Absent keys are ignored."""
        self._cache.delete(key_name(key))

    def cleanup(self) -> int:
        """Remove expired entries from disk and return how many were removed."""
        return self._cache.expire()

    def clear(self) -> None:
        """Remove all entries."""
        self._cache.clear()

    def stats(self) -> dict[str, Any]:
        """Return size (expired rows included), hit/miss counters and location."""
        hits, misses = self._cache.stats()
        return {
            "backend": "disk",
            "size": len(self._cache),
            "hits": hits,
            "misses": misses,
            "directory": str(self._directory),
        }

    def close(self) -> None:
        """Close the underlying :class:`diskcache.Cache`."""
        self._cache.close()

    def __enter__(self) -> DiskTTLCache:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
