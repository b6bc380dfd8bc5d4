"""HTTP layer for the storefront API.

Provides the error normalizer (:func:`normalize_error` and its
:mod:`httpx` helpers) and two clients built on it:

    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`.
    :class:`AsyncClient` -- non-blocking client backed by :class:`httpx.AsyncClient`.

Both read GET responses through an optional cache, attach CSRF tokens to
state-changing requests, retry server and network failures, and raise
:class:`~storefront.exceptions.HTTPError` for anything that is not 2xx.

Example::

    from storefront.client import SyncClient

    with SyncClient(config) as client:
        profile = client.get_json("/api/profile", on_unauthorized="none")
"""

from storefront.client.async_client import AsyncClient
from storefront.client.errors import (
    anormalize_response,
    araise_for_status,
    normalize_error,
    normalize_response,
    raise_for_status,
)
from storefront.client.sync_client import SyncClient

__all__ = [
    "AsyncClient",
    "SyncClient",
    "anormalize_response",
    "araise_for_status",
    "normalize_error",
    "normalize_response",
    "raise_for_status",
]
