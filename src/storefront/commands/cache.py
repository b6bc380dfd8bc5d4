"""Cache commands -- inspect and purge the CLI's disk cache."""

from __future__ import annotations

import typer

from storefront.output import print_table, success


cache_app = typer.Typer(no_args_is_help=True)


def _open_cache():
    from storefront.cache import DiskTTLCache
    from storefront.config import get_cache_dir

    return DiskTTLCache(get_cache_dir())


@cache_app.command("stats")
def cache_stats() -> None:
    """Show entry count, hit/miss counters and the cache directory."""
    with _open_cache() as cache:
        stats = cache.stats()
    print_table(
        ["key", "value"],
        [[k, str(v)] for k, v in stats.items()],
        title="Response cache",
    )


@cache_app.command("cleanup")
def cache_cleanup() -> None:
    """Remove expired entries."""
    with _open_cache() as cache:
        removed = cache.cleanup()
    success(f"Removed {removed} expired entries.")


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove all entries."""
    with _open_cache() as cache:
        cache.clear()
    success("Cache cleared.")
