"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the
corresponding :class:`~storefront.exceptions.StorefrontError` subclass, so
shell wrappers can tell a rejected login from a dead server without
parsing stderr.

Example::

    $ storefront get /api/profile
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the storefront answered 401
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or the storefront rejected the request as malformed (HTTP 400)."""

EXIT_AUTH_FAILURE = 3
"""Authorization is required or access was denied (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The storefront failed or throttled the request (HTTP 5xx / 429)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
