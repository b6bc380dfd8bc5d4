"""Asynchronous storefront API client -- mirrors :class:`~storefront.client.sync_client.SyncClient`.

:class:`AsyncClient` wraps :class:`httpx.AsyncClient` with the same
read-through caching, CSRF handling, retry and error normalization, using
``await`` and :func:`asyncio.sleep` so it can run inside an event loop
alongside an :class:`~storefront.cache.AsyncCacheSweeper`.

The in-memory :class:`~storefront.cache.TTLCache` is called directly on the
loop. Any other store (e.g. :class:`~storefront.cache.DiskTTLCache`, which
does SQLite I/O) is called through :func:`asyncio.to_thread`.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from storefront.cache.base import CacheStore
from storefront.cache.memory import TTLCache
from storefront.client.base import (
    CSRF_HEADER,
    STATE_CHANGING_METHODS,
    BaseClient,
    UnauthorizedBehavior,
    extract_csrf_token,
    make_cache_key,
    restore_response,
    snapshot_response,
)
from storefront.client.errors import araise_for_status, connection_error
from storefront.client.response import extract_response_data
from storefront.exceptions import AuthError
from storefront.models import GlobalConfig
from storefront.output import debug


class AsyncClient(BaseClient):
    """Non-blocking HTTP client for the storefront API.

    Must be used as an async context manager.

    Example::

        async with AsyncClient(config, cache=cache) as client:
            rates = await client.get_json("/api/rates", cache_ttl_ms=CacheTTL.CRYPTO_RATES)
    """

    def __init__(
        self,
        config: GlobalConfig,
        cache: Optional[CacheStore] = None,
        locale: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(config, cache=cache, locale=locale)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> AsyncClient:
        request_config = self._config.request
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url or "",
            timeout=request_config.timeout,
            verify=request_config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        cache_ttl_ms: Optional[float] = None,
        bypass_cache: bool = False,
    ) -> httpx.Response:
        """Send a request and return the 2xx response.

        Behaves like :meth:`SyncClient.request
        <storefront.client.sync_client.SyncClient.request>`.
        """
        method = method.upper()
        merged_headers: dict[str, str] = {"Accept": "application/json"}
        merged_headers.update(headers or {})

        if method in STATE_CHANGING_METHODS and CSRF_HEADER not in merged_headers:
            token = await self._get_csrf_token()
            if token:
                merged_headers[CSRF_HEADER] = token

        url = self._full_url(path)
        use_cache = self._cache_enabled(method, cache_ttl_ms, bypass_cache)
        cache_key = make_cache_key(method, url, params)

        if use_cache:
            assert self._cache is not None
            cached = await self._cache_get(cache_key)
            if cached is not None:
                debug(f"Cache hit: {method} {path}")
                return restore_response(cached, method, url)
            debug(f"Cache miss: {method} {path}")

        response = await self._execute_with_retry(
            self._build_kwargs(method, path, merged_headers, params, json_body)
        )

        if use_cache and response.is_success:
            assert self._cache is not None and cache_ttl_ms is not None
            await self._cache_set(cache_key, snapshot_response(response), cache_ttl_ms)

        return await araise_for_status(response, self._locale)

    async def get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        on_unauthorized: UnauthorizedBehavior = "raise",
        cache_ttl_ms: Optional[float] = None,
        bypass_cache: bool = False,
    ) -> Any:
        """GET *path* and return the decoded body; see :meth:`SyncClient.get_json
        <storefront.client.sync_client.SyncClient.get_json>`."""
        try:
            response = await self.request(
                "GET",
                path,
                params=params,
                cache_ttl_ms=cache_ttl_ms,
                bypass_cache=bypass_cache,
            )
        except AuthError as exc:
            if exc.status == 401 and on_unauthorized == "none":
                return None
            raise
        return extract_response_data(response)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def _cache_get(self, key: str) -> Any:
        assert self._cache is not None
        if isinstance(self._cache, TTLCache):
            return self._cache.get(key)
        return await asyncio.to_thread(self._cache.get, key)

    async def _cache_set(self, key: str, value: Any, ttl_ms: float) -> None:
        assert self._cache is not None
        if isinstance(self._cache, TTLCache):
            self._cache.set(key, value, ttl_ms)
            return
        await asyncio.to_thread(self._cache.set, key, value, ttl_ms)

    async def _get_csrf_token(self) -> Optional[str]:
        if self._csrf_token:
            return self._csrf_token
        assert self._client is not None, "Client not initialised -- use as async context manager"
        try:
            response = await self._client.get(
                self._config.request.csrf_endpoint,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            debug(f"CSRF token fetch failed: {exc}")
            return None
        self._csrf_token = extract_csrf_token(response)
        return self._csrf_token

    async def _execute_with_retry(self, kwargs: dict[str, Any]) -> httpx.Response:
        assert self._client is not None, "Client not initialised -- use as async context manager"

        max_retries = self._config.request.max_retries
        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(**kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    await asyncio.sleep(delay)
                    continue
                raise connection_error(self._locale) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                await asyncio.sleep(delay)
                continue
            return response

        raise AssertionError("unreachable")  # pragma: no cover
