"""Request plumbing shared by the sync and async storefront clients."""

from __future__ import annotations

import hashlib
import json
from typing import Any, Literal, Optional

import httpx

from storefront.cache.base import CacheStore
from storefront.models import GlobalConfig

STATE_CHANGING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})
CSRF_HEADER = "x-csrf-token"

# Cached bodies are stored decoded; replaying these headers would make
# httpx try to decode them a second time.
_UNCACHED_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})

UnauthorizedBehavior = Literal["raise", "none"]


def make_cache_key(method: str, url: str, params: Optional[dict[str, Any]]) -> str:
    """Hash ``METHOD|URL|sorted params`` into a stable cache key."""
    parts = [method.upper(), url]
    if params:
        parts.append(json.dumps(params, sort_keys=True, default=str))
    raw = "|".join(parts)
    return "http:" + hashlib.sha256(raw.encode()).hexdigest()


def snapshot_response(response: httpx.Response) -> dict[str, Any]:
    """Serialise a response into a picklable dict for the cache."""
    return {
        "status_code": response.status_code,
        "headers": {
            k: v for k, v in response.headers.items() if k.lower() not in _UNCACHED_HEADERS
        },
        "content": response.content,
    }


def restore_response(snapshot: dict[str, Any], method: str, url: str) -> httpx.Response:
    """Rebuild an :class:`httpx.Response` from :func:`snapshot_response` output."""
    return httpx.Response(
        status_code=snapshot["status_code"],
        headers=snapshot.get("headers", {}),
        content=snapshot.get("content", b""),
        request=httpx.Request(method=method, url=url),
    )


def extract_csrf_token(response: httpx.Response) -> Optional[str]:
    """Pull ``token`` out of a CSRF endpoint response, or ``None``."""
    if not response.is_success:
        return None
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("token"):
        return str(data["token"])
    return None


class BaseClient:
    """State and helpers common to :class:`SyncClient` and :class:`AsyncClient`.

    Args:
        config: Resolved configuration (base URL, request and cache
            settings, error locale).
        cache: Optional store used for read-through caching of GET
            requests that pass ``cache_ttl_ms``.
        locale: Overrides ``config.errors.locale`` for normalized errors.
    """

    def __init__(
        self,
        config: GlobalConfig,
        cache: Optional[CacheStore] = None,
        locale: Optional[str] = None,
    ) -> None:
        self._config = config
        self._cache = cache
        self._locale = locale or config.errors.locale
        self._csrf_token: Optional[str] = config.request.csrf_token

    @property
    def locale(self) -> str:
        return self._locale

    def _full_url(self, path: str) -> str:
        base = (self._config.base_url or "").rstrip("/")
        return f"{base}{path}" if base else path

    def _cache_enabled(self, method: str, cache_ttl_ms: Optional[float], bypass: bool) -> bool:
        return (
            self._cache is not None
            and self._config.cache.enabled
            and cache_ttl_ms is not None
            and not bypass
            and method == "GET"
        )

    def _build_kwargs(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: Optional[dict[str, Any]],
        json_body: Any,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "method": method,
            "url": path,
            "headers": headers,
            "params": params,
        }
        if json_body is not None:
            kwargs["json"] = json_body
        return kwargs
