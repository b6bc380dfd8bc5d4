"""Turn failed HTTP responses into one localized, user-facing error.

The storefront backend fails in several shapes: JSON bodies such as
``{"success": false, "message": "Товар не найден"}``, HTML error pages from
the proxy, empty bodies from auth middleware. :func:`normalize_error`
collapses all of them into an :class:`~storefront.exceptions.HTTPError`
with a display-ready ``message`` and the original ``status``.

Resolution order, first match wins:

1. An empty (or whitespace-only) body goes straight to step 3.
2. A JSON object body with a non-empty ``message`` field supplies the
   message verbatim.
3. Otherwise the status code picks a fixed localized message (400, 401,
   403, 404, 429, any 5xx), with a generic default for the rest.

Normalization never raises. A body that cannot be read or parsed is
treated like an empty one.
"""

from __future__ import annotations

import json
from typing import Any, Optional, Union

import httpx

from storefront.client.messages import DEFAULT_LOCALE, get_message
from storefront.exceptions import (
    AuthError,
    BadRequestError,
    ConnectionError_,
    HTTPError,
    NotFoundError,
    RateLimitError,
    ServerError,
)

Body = Union[str, bytes, None]

_STATUS_KINDS: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    429: "too_many_requests",
}


def status_message(status: Optional[int], locale: str = DEFAULT_LOCALE) -> str:
    """Return the fixed localized message for *status*."""
    if status in _STATUS_KINDS:
        return get_message(_STATUS_KINDS[status], locale)
    if status is not None and status >= 500:
        return get_message("server_error", locale)
    return get_message("default", locale)


def error_class_for_status(status: Optional[int]) -> type[HTTPError]:
    """Return the :class:`HTTPError` subclass callers may catch for *status*."""
    if status == 400:
        return BadRequestError
    if status in (401, 403):
        return AuthError
    if status == 404:
        return NotFoundError
    if status == 429:
        return RateLimitError
    if status is not None and status >= 500:
        return ServerError
    return HTTPError


def _body_text(body: Body) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def message_from_body(body: Body) -> Optional[str]:
    """Extract the ``message`` field from a JSON object body, if there is one."""
    text = _body_text(body)
    if not text.strip():
        return None
    try:
        data: Any = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    message = data.get("message")
    if message is None or isinstance(message, (dict, list)):
        return None
    if not isinstance(message, str):
        message = str(message)
    return message if message.strip() else None


def normalize_error(
    status: Optional[int],
    body: Body = None,
    locale: str = DEFAULT_LOCALE,
) -> HTTPError:
    """Build the normalized error for a failed response.

    Args:
        status: HTTP status code of the failed response.
        body: Raw response body (text or bytes), possibly empty.
        locale: Locale for the status-based fallback messages.

    Returns:
        An :class:`HTTPError` (or subclass) carrying ``message`` and
        ``status``. The caller decides whether to raise it.
    """
    message = message_from_body(body) or status_message(status, locale)
    return error_class_for_status(status)(message, status=status)


def normalize_response(response: httpx.Response, locale: str = DEFAULT_LOCALE) -> HTTPError:
    """Read *response*'s body and return its normalized error."""
    try:
        response.read()
        body: Body = response.content
    except Exception:
        body = None
    return normalize_error(response.status_code, body, locale)


async def anormalize_response(
    response: httpx.Response, locale: str = DEFAULT_LOCALE
) -> HTTPError:
    """Async variant of :func:`normalize_response` for streamed responses."""
    try:
        await response.aread()
        body: Body = response.content
    except Exception:
        body = None
    return normalize_error(response.status_code, body, locale)


def raise_for_status(response: httpx.Response, locale: str = DEFAULT_LOCALE) -> httpx.Response:
    """Return *response* if it is 2xx, otherwise raise its normalized error."""
    if response.is_success:
        return response
    raise normalize_response(response, locale)


async def araise_for_status(
    response: httpx.Response, locale: str = DEFAULT_LOCALE
) -> httpx.Response:
    """Async variant of :func:`raise_for_status`."""
    if response.is_success:
        return response
    raise await anormalize_response(response, locale)


def connection_error(locale: str = DEFAULT_LOCALE) -> ConnectionError_:
    """Normalized error for a request that never got a response."""
    return ConnectionError_(get_message("connection", locale), status=None)
