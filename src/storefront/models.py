"""Pydantic models for storefront configuration.

Everything persisted in the user's config directory is declared here and
validated with Pydantic v2. The root model is :class:`GlobalConfig`; the
nested sections map one-to-one onto the ``config set`` dot-notation keys
(``cache.ttl.products``, ``request.max_retries``, ``errors.locale``...).
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from storefront.cache.base import CacheTTL, TTLClass


class CacheTTLConfig(BaseModel):
    """Named TTL classes, in milliseconds.

    These are a policy of the cache's callers; the cache itself accepts any
    TTL. Defaults match the storefront's conventions: volatile currency
    rates for 30 seconds, the product catalog for 5 minutes, promo codes
    for 1 minute.
    """

    crypto_rates: int = Field(default=CacheTTL.CRYPTO_RATES, description="Currency/crypto rate TTL (ms)")
    products: int = Field(default=CacheTTL.PRODUCTS, description="Product catalog TTL (ms)")
    promo_codes: int = Field(default=CacheTTL.PROMO_CODES, description="Promo code TTL (ms)")

    def ttl_ms(self, ttl_class: TTLClass | str) -> int:
        """Return the configured TTL for *ttl_class* (e.g. ``"products"``)."""
        return getattr(self, TTLClass(ttl_class).value)


class CacheConfig(BaseModel):
    """Response cache settings used by the HTTP clients and the CLI."""

    enabled: bool = Field(default=True, description="Enable GET response caching")
    sweep_interval_seconds: int = Field(
        default=300, gt=0, description="Interval between expired-entry sweeps"
    )
    ttl: CacheTTLConfig = Field(default_factory=CacheTTLConfig)


class RequestConfig(BaseModel):
    """HTTP request settings for the storefront API."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(default=3, ge=0, description="Max retry attempts")
    csrf_token: Optional[str] = Field(
        default=None, description="Static CSRF token sent on state-changing requests"
    )
    csrf_endpoint: str = Field(
        default="/api/csrf-token",
        description="Endpoint returning {\"token\": ...} when no token is configured",
    )


class ErrorConfig(BaseModel):
    """Error normalization settings."""

    locale: str = Field(default="en", description="Locale for normalized error messages")


class OutputConfig(BaseModel):
    """Output formatting preferences."""

    format: str = Field(default="auto", description="Output format: auto, json, plain, rich")


class GlobalConfig(BaseModel):
    """Top-level configuration stored in ``config.json``.

    Loaded by :func:`~storefront.config.load_global_config` and persisted by
    :func:`~storefront.config.save_global_config`. Environment variables and
    CLI flags are layered on top by :func:`~storefront.config.resolve_config`.
    """

    base_url: Optional[str] = Field(
        default=None, description="Storefront API base URL, e.g. https://shop.example.com"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    errors: ErrorConfig = Field(default_factory=ErrorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
