"""storefront -- caching and error-normalization core for the storefront API.

The two pieces with real invariants behind the equipment storefront:

* :mod:`storefront.cache` -- in-process TTL cache with lazy eviction and a
  cancellable periodic sweep, plus a disk-backed variant.
* :mod:`storefront.client` -- a response error normalizer that turns any
  failed HTTP response into one localized error with its status, and the
  sync/async API clients built on it.

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic configuration models.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting and diagnostics with Rich support.
"""

__version__ = "0.1.0"
