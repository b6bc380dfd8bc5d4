"""Shared cache vocabulary: typed keys, TTL classes and the store protocol."""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Optional, Protocol, TypeVar, Union

T = TypeVar("T")


class CacheKey(Generic[T]):
    """A string cache key tagged with the type of value stored under it.

    The store itself is type-agnostic; the tag only exists so that a call
    site reading ``cache.get(PRODUCTS_KEY)`` gets a ``list[Product] | None``
    from the type checker instead of ``Any``.

    Example::

        ACTIVE_PRODUCTS: CacheKey[list[dict]] = CacheKey("products-active")
        cache.set(ACTIVE_PRODUCTS, products, CacheTTL.PRODUCTS)
    """

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"CacheKey({self.name!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CacheKey) and other.name == self.name

    def __hash__(self) -> int:
        return hash(self.name)


KeyLike = Union[str, CacheKey[Any]]


def key_name(key: KeyLike) -> str:
    """Return the plain string form of *key*."""
    return key.name if isinstance(key, CacheKey) else key


class CacheTTL:
    """Storefront TTL conventions, in milliseconds.

    These are a policy of the callers; the cache accepts any TTL. They are
    the defaults of :class:`~storefront.models.CacheTTLConfig`, which is what
    callers holding a config should read (``config.cache.ttl.ttl_ms(...)``).
    """

    CRYPTO_RATES = 30 * 1000
    PRODUCTS = 5 * 60 * 1000
    PROMO_CODES = 60 * 1000


class TTLClass(str, Enum):
    """Names of the TTL classes, matching the ``cache.ttl.*`` config keys."""

    CRYPTO_RATES = "crypto_rates"
    PRODUCTS = "products"
    PROMO_CODES = "promo_codes"


class CacheStore(Protocol):
    """Operations shared by :class:`~storefront.cache.TTLCache` and
    :class:`~storefront.cache.DiskTTLCache`."""

    def set(self, key: KeyLike, value: Any, ttl_ms: float) -> None: ...

    def get(self, key: KeyLike, default: Optional[Any] = None) -> Any: ...

    def delete(self, key: KeyLike) -> None: ...

    def cleanup(self) -> int: ...

    def clear(self) -> None: ...
