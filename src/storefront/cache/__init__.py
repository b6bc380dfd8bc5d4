"""Expiring key/value caches for storefront services.

:class:`TTLCache` keeps entries in process memory and evicts them lazily on
read; :class:`CacheSweeper` / :class:`AsyncCacheSweeper` purge the entries
nobody reads again. :class:`DiskTTLCache` offers the same contract on disk
via :mod:`diskcache` for short-lived processes such as the CLI.

:class:`CacheTTL` holds the storefront's TTL conventions (currency rates,
product catalog, promo codes) in milliseconds.
"""

from storefront.cache.base import CacheKey, CacheStore, CacheTTL, TTLClass
from storefront.cache.disk import DiskTTLCache
from storefront.cache.memory import TTLCache
from storefront.cache.sweeper import AsyncCacheSweeper, CacheSweeper, sweep_once

__all__ = [
    "AsyncCacheSweeper",
    "CacheKey",
    "CacheStore",
    "CacheSweeper",
    "CacheTTL",
    "DiskTTLCache",
    "TTLCache",
    "TTLClass",
    "sweep_once",
]
