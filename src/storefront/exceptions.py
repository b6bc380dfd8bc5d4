"""Exception hierarchy for storefront.

All exceptions inherit from :class:`StorefrontError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`storefront.exit_codes`. The CLI entry point in
:func:`storefront.app.main` catches ``StorefrontError`` and exits with the
matching code.

Failed HTTP calls surface as :class:`HTTPError` (also exported as
:data:`NormalizedHttpError`), built by
:func:`storefront.client.errors.normalize_error`. Its ``message`` is already
localized and safe to show to a user; its ``status`` is the original HTTP
status code. Callers branch on ``status`` or on one of the subclasses.

Subclass hierarchy::

    StorefrontError (exit 1)
    +-- InvalidUsageError       (exit 2)
    +-- ConfigError             (exit 1)
    +-- HTTPError               (exit 1)
        +-- BadRequestError     (exit 2)  400
        +-- AuthError           (exit 3)  401, 403
        +-- NotFoundError       (exit 4)  404
        +-- RateLimitError      (exit 5)  429
        +-- ServerError         (exit 5)  5xx
        +-- ConnectionError_    (exit 6)  no response
"""

from __future__ import annotations

from typing import Any, Optional

from storefront.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class StorefrontError(Exception):
    """Base exception for all storefront errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`storefront.exit_codes`.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(StorefrontError):
    """Raised for invalid CLI arguments or malformed caller input."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(StorefrontError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE


class HTTPError(StorefrontError):
    """A failed HTTP call, normalized into a localized message and a status.

    This is the only error type UI-facing code needs to handle after a
    request: the message is ready for display and ``status`` allows
    conditional behaviour such as redirecting to the login page on 401.

    Args:
        message: Localized, user-facing message.
        status: Original HTTP status code, or ``None`` when no response
            was received.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        exit_code: int | None = None,
    ):
        super().__init__(message, exit_code=exit_code)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        """Return ``{"message": ..., "status": ...}`` for JSON output."""
        return {"message": self.message, "status": self.status}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, status={self.status!r})"


NormalizedHttpError = HTTPError


class BadRequestError(HTTPError):
    """The storefront rejected the request as malformed (HTTP 400)."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(HTTPError):
    """Authorization is required (401) or access was denied (403)."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(HTTPError):
    """The storefront returned HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class RateLimitError(HTTPError):
    """The storefront rate limiter rejected the request (HTTP 429)."""

    exit_code = EXIT_SERVER_ERROR


class ServerError(HTTPError):
    """The storefront returned an HTTP 5xx error."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(HTTPError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``. ``status`` is always ``None``.
    """

    exit_code = EXIT_CONNECTION_ERROR
