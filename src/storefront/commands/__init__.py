"""Built-in CLI sub-commands for storefront.

* :mod:`~storefront.commands.request` -- ``get`` and ``normalize``.
* :mod:`~storefront.commands.cache` -- inspect and purge the disk cache.
* :mod:`~storefront.commands.config` -- view and modify global settings.

The helpers below are shared by every command module.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from storefront.exceptions import StorefrontError
from storefront.models import GlobalConfig
from storefront.output import error


def resolve_from_context(ctx: typer.Context) -> GlobalConfig:
    """Resolve the effective config using the root callback's flags."""
    from storefront.config import resolve_config

    obj = ctx.obj or {}
    return resolve_config(cli_base_url=obj.get("base_url"), cli_locale=obj.get("locale"))


@contextmanager
def exit_on_error() -> Iterator[None]:
    """Print a :class:`StorefrontError` and exit with its code."""
    try:
        yield
    except StorefrontError as exc:
        error(exc.message)
        raise typer.Exit(code=exc.exit_code) from None
