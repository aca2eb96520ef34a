# src/liveport/application/services/port_monitor.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Port Monitor (public surface).

Purpose:
    Single object handed to UI/state layers. It owns one result cache, one
    probe sequencer and the batch/status services built on them, so separate
    instances (e.g. one per test) never share verdicts.

Surface:
    * ``check_port`` / ``batch_check_ports`` / ``check_project_ports``
    * ``clear_cache`` / ``sweep_expired`` / ``get_cache_stats``
    * ``find_available_port``
    * ``set_checking_enabled`` (master switch)
    * ``start_sweeper`` / ``stop_sweeper`` / ``aclose``

Layer:
    application/services
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from types import TracebackType
from typing import Any

from liveport.application.interfaces.result_cache_port import ResultCachePort
from liveport.application.services.batch_scheduler import DEFAULT_CONCURRENCY, BatchScheduler
from liveport.application.services.cache_sweeper import CacheSweeper
from liveport.application.services.port_allocation import find_available_port
from liveport.application.services.probe_sequencer import ProbeSequencer
from liveport.application.services.status_resolver import StatusResolver
from liveport.domain.entities.cache_entry import CacheStats
from liveport.domain.entities.project_port_query import ProjectPortQuery
from liveport.domain.exceptions.ports import validate_port

logger = logging.getLogger(__name__)

__all__ = ["PortMonitor"]


class PortMonitor:
    """Cached, batched liveness checks for local ports."""

    def __init__(
        self,
        cache: ResultCachePort,
        sequencer: ProbeSequencer,
        *,
        default_concurrency: int = DEFAULT_CONCURRENCY,
        fallback_ports: Sequence[int] = (),
        checking_enabled: bool = True,
        sweep_interval_s: float = 60.0,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        """Initialize the monitor.

        Args:
            cache: Verdict cache owned by this monitor.
            sequencer: Probe runner used on cache misses.
            default_concurrency: Batch group size when callers pass none.
            fallback_ports: Candidates for :meth:`find_available_port`.
            checking_enabled: Initial state of the master switch.
            sweep_interval_s: Interval used by :meth:`start_sweeper` by default.
            on_close: Optional async hook run by :meth:`aclose` (e.g. closing
                an owned HTTP client).
        """
        self._cache = cache
        self._sequencer = sequencer
        self._scheduler = BatchScheduler(cache, sequencer, default_concurrency=default_concurrency)
        self._resolver = StatusResolver(self._scheduler)
        self._fallback_ports: tuple[int, ...] = tuple(validate_port(p) for p in fallback_ports)
        self._checking_enabled = bool(checking_enabled)
        self._sweep_interval_s = float(sweep_interval_s)
        self._sweeper: CacheSweeper | None = None
        self._on_close = on_close
        self._closed = False

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def cache(self) -> ResultCachePort:
        return self._cache

    @property
    def sequencer(self) -> ProbeSequencer:
        return self._sequencer

    @property
    def scheduler(self) -> BatchScheduler:
        return self._scheduler

    @property
    def fallback_ports(self) -> tuple[int, ...]:
        return self._fallback_ports

    @property
    def checking_enabled(self) -> bool:
        return self._checking_enabled

    @property
    def closed(self) -> bool:
        return self._closed

    def set_checking_enabled(self, enabled: bool) -> None:
        """Turn probing on or off.

        While off, every check reports ``False`` without probing or touching
        the cache.
        """
        self._checking_enabled = bool(enabled)
        logger.info("monitor.checking_toggled", extra={"extra": {"enabled": self._checking_enabled}})

    # ------------------------------------------------------------------ #
    # Checks
    # ------------------------------------------------------------------ #
    async def check_port(self, port: int, *, skip_cache: bool = False) -> bool:
        """Return whether anything is serving on ``port``.

        Args:
            port: Port to check.
            skip_cache: Force a fresh probe (the result is still cached).
        """
        validate_port(port)
        if not self._checking_enabled:
            return False
        return await self._scheduler.check(port, skip_cache=skip_cache)

    async def batch_check_ports(
        self,
        ports: Iterable[int],
        concurrency_limit: int | None = None,
    ) -> dict[int, bool]:
        """Return one verdict per distinct port, probing at most ``concurrency_limit`` at once."""
        self._scheduler.resolve_limit(concurrency_limit)
        if not self._checking_enabled:
            return {validate_port(p): False for p in ports}
        return await self._scheduler.batch_check(ports, concurrency_limit)

    async def check_project_ports(
        self,
        projects: Iterable[ProjectPortQuery | Any],
        concurrency_limit: int | None = None,
    ) -> dict[str, bool]:
        """Return ``project_id -> running`` for every project record."""
        self._scheduler.resolve_limit(concurrency_limit)
        if not self._checking_enabled:
            return {ProjectPortQuery.from_record(p).project_id: False for p in projects}
        return await self._resolver.resolve(projects, concurrency_limit=concurrency_limit)

    async def find_available_port(
        self,
        preferred: int | None,
        fallbacks: Sequence[int] | None = None,
    ) -> int | None:
        """Return ``preferred`` if nothing serves on it, else the first free fallback.

        Args:
            preferred: Port the caller would like to use.
            fallbacks: Candidates to try next; defaults to the configured list.

        Returns:
            A free port, or ``None`` if ``preferred`` is unset or all are taken.
        """
        candidates = self._fallback_ports if fallbacks is None else tuple(fallbacks)
        return await find_available_port(preferred, candidates, is_serving=self.check_port)

    # ------------------------------------------------------------------ #
    # Cache management
    # ------------------------------------------------------------------ #
    def clear_cache(self) -> None:
        """Forget every verdict so the next check of any port re-probes."""
        self._cache.invalidate_all()

    def sweep_expired(self) -> int:
        """Drop expired entries now; return how many were removed."""
        return self._cache.sweep_expired()

    def get_cache_stats(self) -> CacheStats:
        """Return size, hit rate and per-port ages (debugging only)."""
        return self._cache.stats()

    def start_sweeper(self, interval_s: float | None = None) -> None:
        """Start the periodic expiry sweep on the running event loop."""
        if self._sweeper is not None and self._sweeper.running:
            return
        self._sweeper = CacheSweeper(
            self._cache,
            interval_s=self._sweep_interval_s if interval_s is None else interval_s,
        )
        self._sweeper.start()

    async def stop_sweeper(self) -> None:
        if self._sweeper is not None:
            await self._sweeper.stop()
            self._sweeper = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #
    async def aclose(self) -> None:
        """Stop the sweeper, drop cached verdicts and run the close hook (idempotent)."""
        if self._closed:
            return
        self._closed = True
        try:
            await self.stop_sweeper()
        finally:
            self._cache.invalidate_all()
            if self._on_close is not None:
                try:
                    await self._on_close()
                except Exception:
                    logger.exception("monitor.close_hook_failed")

    async def __aenter__(self) -> PortMonitor:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
