# src/liveport/application/services/cache_sweeper.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Background expiry sweep for the result cache.

Runs :meth:`ResultCachePort.sweep_expired` every ``interval_s`` seconds on
the running event loop until stopped. Stale entries are also evicted lazily
by ``lookup``; the sweep only keeps memory bounded for ports nobody asks
about any more.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from liveport.application.interfaces.result_cache_port import ResultCachePort

logger = logging.getLogger(__name__)

__all__ = ["CacheSweeper"]


class CacheSweeper:
    """Periodic ``sweep_expired`` task bound to one cache."""

    def __init__(self, cache: ResultCachePort, *, interval_s: float = 60.0) -> None:
        """Initialize the sweeper.

        Args:
            cache: Cache to sweep.
            interval_s: Seconds between sweeps.

        Raises:
            ValueError: If ``interval_s`` is not positive.
        """
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._cache = cache
        self._interval_s = float(interval_s)
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_s(self) -> float:
        return self._interval_s

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start sweeping on the running loop (no-op if already running).

        Raises:
            RuntimeError: If called outside a running event loop.
        """
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="liveport-cache-sweeper"
        )
        logger.debug("sweeper.started", extra={"extra": {"interval_s": self._interval_s}})

    async def stop(self) -> None:
        """Cancel the sweep task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.debug("sweeper.stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval_s)
            try:
                removed = self._cache.sweep_expired()
            except Exception:
                logger.exception("sweeper.sweep_failed")
                continue
            if removed:
                logger.debug("sweeper.swept", extra={"extra": {"removed": removed}})
