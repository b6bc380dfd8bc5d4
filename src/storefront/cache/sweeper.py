"""Background tasks that periodically purge expired cache entries.

Lazy eviction only removes entries that get read again. Anything written
and never read (a one-off promo code lookup, a product that left the
catalog) stays in memory until something sweeps it. The sweepers here
call :meth:`~storefront.cache.TTLCache.cleanup` on a fixed interval and
are owned by whoever owns the cache: start them at application startup,
stop them at shutdown.

:class:`CacheSweeper` runs in a daemon thread for synchronous apps;
:class:`AsyncCacheSweeper` runs as an :class:`asyncio.Task` inside an
event loop. Both stop immediately when asked rather than sleeping out the
current interval.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from typing import TYPE_CHECKING, Optional

from storefront.cache.base import CacheStore
from storefront.exceptions import InvalidUsageError
from storefront.output import debug, warning

if TYPE_CHECKING:
    from storefront.models import CacheConfig

DEFAULT_SWEEP_INTERVAL = 5 * 60


def sweep_once(cache: CacheStore) -> int:
    """Run one cleanup pass, reporting failures instead of raising them.

    Returns:
        The number of entries removed, or ``0`` if the cleanup failed.
    """
    try:
        removed = cache.cleanup()
    except Exception as exc:
        warning(f"Cache sweep failed: {exc}")
        return 0
    if removed:
        debug(f"Cache sweep removed {removed} expired entries")
    return removed


def _check_interval(interval_seconds: float) -> float:
    if interval_seconds <= 0:
        raise InvalidUsageError(
            f"Sweep interval must be positive, got {interval_seconds}"
        )
    return interval_seconds


class CacheSweeper:
    """Thread-based periodic sweeper.

    Args:
        cache: The store to sweep.
        interval_seconds: Delay between sweeps.

    Example::

        cache = TTLCache()
        with CacheSweeper(cache, interval_seconds=300):
            serve_forever(cache)
    """

    def __init__(self, cache: CacheStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL) -> None:
        self._cache = cache
        self._interval = _check_interval(interval_seconds)
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(cls, cache: CacheStore, config: CacheConfig) -> CacheSweeper:
        """Build a sweeper using ``cache.sweep_interval_seconds`` from *config*."""
        return cls(cache, interval_seconds=config.sweep_interval_seconds)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sweeper thread. Calling it while running is a no-op.

        If an earlier :meth:`stop` timed out, the old thread is joined first
        so only one sweeper thread ever exists.
        """
        if self.is_running:
            if not self._stop_event.is_set():
                return
            assert self._thread is not None
            self._thread.join()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="storefront-cache-sweeper",
            daemon=True,
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the thread to exit and wait up to *timeout* seconds for it.

        The thread stays referenced (and :attr:`is_running` true) until it has
        actually exited.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            sweep_once(self._cache)

    def __enter__(self) -> CacheSweeper:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


class AsyncCacheSweeper:
    """asyncio-based periodic sweeper.

    :meth:`start` must be called from inside a running event loop.

    Example::

        async with AsyncCacheSweeper(cache):
            await serve(cache)
    """

    def __init__(self, cache: CacheStore, interval_seconds: float = DEFAULT_SWEEP_INTERVAL) -> None:
        self._cache = cache
        self._interval = _check_interval(interval_seconds)
        self._task: Optional[asyncio.Task[None]] = None

    @classmethod
    def from_config(cls, cache: CacheStore, config: CacheConfig) -> AsyncCacheSweeper:
        return cls(cache, interval_seconds=config.sweep_interval_seconds)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the sweep task on the running loop. No-op while running."""
        if self.is_running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(), name="storefront-cache-sweeper")

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            sweep_once(self._cache)

    async def __aenter__(self) -> AsyncCacheSweeper:
        self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.stop()
