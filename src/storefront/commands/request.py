"""``storefront get`` and ``storefront normalize``."""

from __future__ import annotations

from typing import Optional

import typer

from storefront.cache.base import TTLClass
from storefront.commands import exit_on_error, resolve_from_context
from storefront.exceptions import InvalidUsageError
from storefront.output import debug, format_response


def _parse_params(pairs: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise InvalidUsageError(f"Expected key=value, got: {pair}")
        params[key] = value
    return params


def get_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="API path, e.g. /api/products."),
    param: list[str] = typer.Option(
        [], "--param", "-P", help="Query parameter as key=value (repeatable)."
    ),
    ttl_ms: Optional[int] = typer.Option(
        None, "--ttl-ms", help="Cache TTL in ms; overrides --ttl-class."
    ),
    ttl_class: TTLClass = typer.Option(
        TTLClass.PRODUCTS, "--ttl-class", help="Configured TTL class (cache.ttl.*) to cache under."
    ),
    no_cache: bool = typer.Option(
        False, "--no-cache", help="Bypass the response cache."
    ),
) -> None:
    """Fetch PATH from the storefront API and print the JSON body.

    Responses are cached on disk between invocations. Failures print the
    normalized error and exit with the matching code (3 for 401/403, 4 for
    404, 5 for server errors).

    Example::

        storefront get /api/products
        storefront get /api/products -P category=pumps --no-cache
        storefront get /api/rates --ttl-class crypto_rates
    """
    from storefront.cache import DiskTTLCache
    from storefront.client import SyncClient
    from storefront.client.response import format_api_response
    from storefront.config import get_cache_dir

    with exit_on_error():
        config = resolve_from_context(ctx)
        if not config.base_url:
            raise InvalidUsageError(
                "No base URL configured; pass --base-url or run "
                "'storefront config set base_url https://...'"
            )
        params = _parse_params(param)
        effective_ttl = ttl_ms if ttl_ms is not None else config.cache.ttl.ttl_ms(ttl_class)

        cache = DiskTTLCache(get_cache_dir()) if config.cache.enabled else None
        try:
            with SyncClient(config, cache=cache) as client:
                response = client.get(
                    path,
                    params=params or None,
                    cache_ttl_ms=effective_ttl,
                    bypass_cache=no_cache,
                )
                format_api_response(response)
        finally:
            if cache is not None:
                debug(f"Cache: {cache.stats()}")
                cache.close()


def normalize_command(
    ctx: typer.Context,
    status: int = typer.Argument(help="HTTP status code."),
    body: Optional[str] = typer.Option(
        None, "--body", "-b", help="Raw response body."
    ),
) -> None:
    """Show the user-facing error produced for STATUS and BODY.

    Example::

        storefront normalize 404
        storefront --locale ru normalize 400 --body '{"message": "Custom failure"}'
    """
    from storefront.client.errors import normalize_error

    with exit_on_error():
        config = resolve_from_context(ctx)
        err = normalize_error(status, body, config.errors.locale)
        format_response({"type": type(err).__name__, **err.to_dict()})
