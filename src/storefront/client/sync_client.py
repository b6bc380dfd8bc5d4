"""Synchronous storefront API client with caching, CSRF, retry and error normalization.

:class:`SyncClient` wraps :class:`httpx.Client` and layers on:

- **Read-through caching** -- GET requests that pass ``cache_ttl_ms`` are
  served from a :class:`~storefront.cache.CacheStore` while fresh. Only 2xx
  responses are stored. ``bypass_cache=True`` skips both the lookup and the
  store, like the storefront's ``?_t=`` cache-busting parameter.
- **CSRF tokens** -- POST, PUT, PATCH and DELETE carry an ``x-csrf-token``
  header, taken from config or fetched once from the CSRF endpoint.
- **Retry with backoff** -- 5xx responses and network errors are retried
  with exponential delay (1 s, 2 s, 4 s, ...).
- **Error normalization** -- any non-2xx response raises the
  :class:`~storefront.exceptions.HTTPError` built by
  :func:`~storefront.client.errors.normalize_error`; the raw response never
  reaches the caller.

See Also:
    :class:`~storefront.client.async_client.AsyncClient` for the
    non-blocking equivalent.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx

from storefront.cache.base import CacheStore
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
from storefront.client.errors import connection_error, raise_for_status
from storefront.client.response import extract_response_data
from storefront.exceptions import AuthError
from storefront.models import GlobalConfig
from storefront.output import debug


class SyncClient(BaseClient):
    """Blocking HTTP client for the storefront API.

    Must be used as a context manager so the underlying transport is
    opened and closed.

    Args:
        config: Resolved configuration.
        cache: Optional store for GET responses.
        locale: Overrides ``config.errors.locale``.
        transport: Optional custom :mod:`httpx` transport (tests pass an
            :class:`httpx.MockTransport`).

    Example::

        with SyncClient(config, cache=cache) as client:
            products = client.get_json("/api/products", cache_ttl_ms=CacheTTL.PRODUCTS)
    """

    def __init__(
        self,
        config: GlobalConfig,
        cache: Optional[CacheStore] = None,
        locale: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        super().__init__(config, cache=cache, locale=locale)
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> SyncClient:
        request_config = self._config.request
        self._client = httpx.Client(
            base_url=self._config.base_url or "",
            timeout=request_config.timeout,
            verify=request_config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
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

        Args:
            method: HTTP method.
            path: URL path appended to the configured base URL.
            params: Query parameters.
            json_body: JSON-serialisable request body.
            headers: Extra request headers.
            cache_ttl_ms: When set on a GET, cache the response for this
                many milliseconds and serve it from cache while fresh.
            bypass_cache: Skip the cache entirely for this call.

        Raises:
            HTTPError: The normalized error for any non-2xx response.
            ConnectionError_: On network errors after all retries.
        """
        method = method.upper()
        merged_headers: dict[str, str] = {"Accept": "application/json"}
        merged_headers.update(headers or {})

        if method in STATE_CHANGING_METHODS and CSRF_HEADER not in merged_headers:
            token = self._get_csrf_token()
            if token:
                merged_headers[CSRF_HEADER] = token

        url = self._full_url(path)
        use_cache = self._cache_enabled(method, cache_ttl_ms, bypass_cache)
        cache_key = make_cache_key(method, url, params)

        if use_cache:
            assert self._cache is not None
            cached = self._cache.get(cache_key)
            if cached is not None:
                debug(f"Cache hit: {method} {path}")
                return restore_response(cached, method, url)
            debug(f"Cache miss: {method} {path}")

        response = self._execute_with_retry(
            self._build_kwargs(method, path, merged_headers, params, json_body)
        )

        if use_cache and response.is_success:
            assert self._cache is not None and cache_ttl_ms is not None
            self._cache.set(cache_key, snapshot_response(response), cache_ttl_ms)

        return raise_for_status(response, self._locale)

    def get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        on_unauthorized: UnauthorizedBehavior = "raise",
        cache_ttl_ms: Optional[float] = None,
        bypass_cache: bool = False,
    ) -> Any:
        """GET *path* and return the decoded body.

        With ``on_unauthorized="none"`` a 401 returns ``None`` instead of
        raising, for pages that render differently for anonymous visitors.
        """
        try:
            response = self.request(
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

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _get_csrf_token(self) -> Optional[str]:
        """Return the configured token, fetching it once if none is known."""
        if self._csrf_token:
            return self._csrf_token
        assert self._client is not None, "Client not initialised -- use as context manager"
        try:
            response = self._client.get(
                self._config.request.csrf_endpoint,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            debug(f"CSRF token fetch failed: {exc}")
            return None
        self._csrf_token = extract_csrf_token(response)
        if self._csrf_token is None:
            debug(f"No CSRF token from {self._config.request.csrf_endpoint} (HTTP {response.status_code})")
        return self._csrf_token

    def _execute_with_retry(self, kwargs: dict[str, Any]) -> httpx.Response:
        """Send the request, retrying 5xx responses and network errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._config.request.max_retries
        for attempt in range(max_retries + 1):
            try:
                response = self._client.request(**kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise connection_error(self._locale) from exc

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                debug(
                    f"Server error {response.status_code}, retrying in {delay}s "
                    f"(attempt {attempt + 1}/{max_retries})"
                )
                time.sleep(delay)
                continue
            return response

        raise AssertionError("unreachable")  # pragma: no cover
