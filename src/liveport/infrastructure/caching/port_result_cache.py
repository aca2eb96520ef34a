# src/liveport/infrastructure/caching/port_result_cache.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Port Result Cache (in-memory).

Synopsis:
    Implements :class:`ResultCachePort` with a plain dict of immutable
    :class:`CacheEntry` records keyed by port.

Design:
    * Asymmetric TTL: successes are trusted for ``ttl_available_s``,
      failures only for ``ttl_unavailable_s``. A dead dev server is cheap to
      re-check and may come back at any moment.
    * ``record`` builds a new entry and swaps it in under a lock; readers
      never observe a half-applied update.
    * ``failure_streak`` grows by one per recorded failure up to
      ``max_failure_streak`` and resets on success. It is informational
      only and does not stretch the TTL.
    * Methods are synchronous and contain no suspension points, so within
      one event loop each call runs to completion before another task can
      touch the same key.
    * Time is read from an injectable monotonic clock.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from contextlib import suppress

from liveport.application.interfaces.result_cache_port import ResultCachePort
from liveport.domain.entities.cache_entry import CacheEntry, CacheEntrySnapshot, CacheStats
from liveport.infrastructure.observability.metrics import (
    get_cache_evictions_total,
    get_cache_lookups_total,
    get_probe_results_total,
)

__all__ = [
    "PortResultCache",
    "TTL_AVAILABLE_S",
    "TTL_UNAVAILABLE_S",
    "MAX_FAILURE_STREAK",
]

#: A verdict of "serving" stays trusted this long.
TTL_AVAILABLE_S = 30.0

#: A verdict of "not serving" stays trusted this long.
TTL_UNAVAILABLE_S = 5.0

#: Cap for the consecutive-failure counter.
MAX_FAILURE_STREAK = 3


class PortResultCache(ResultCachePort):
    """In-memory port → verdict cache with asymmetric expiry."""

    def __init__(
        self,
        *,
        ttl_available_s: float = TTL_AVAILABLE_S,
        ttl_unavailable_s: float = TTL_UNAVAILABLE_S,
        max_failure_streak: int = MAX_FAILURE_STREAK,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_available_s: Freshness window for successful verdicts.
            ttl_unavailable_s: Freshness window for failed verdicts.
            max_failure_streak: Upper bound for ``failure_streak``.
            clock: Monotonic time source in seconds.

        Raises:
            ValueError: If a TTL is not positive, successes are not trusted
                strictly longer than failures, or the streak cap is < 1.
        """
        if ttl_available_s <= 0 or ttl_unavailable_s <= 0:
            raise ValueError("TTLs must be > 0")
        if ttl_available_s <= ttl_unavailable_s:
            raise ValueError("ttl_available_s must be greater than ttl_unavailable_s")
        if max_failure_streak < 1:
            raise ValueError("max_failure_streak must be >= 1")

        self._ttl_available_s = float(ttl_available_s)
        self._ttl_unavailable_s = float(ttl_unavailable_s)
        self._max_failure_streak = int(max_failure_streak)
        self._clock = clock
        self._entries: dict[int, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #
    @property
    def ttl_available_s(self) -> float:
        return self._ttl_available_s

    @property
    def ttl_unavailable_s(self) -> float:
        return self._ttl_unavailable_s

    @property
    def max_failure_streak(self) -> int:
        return self._max_failure_streak

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, port: object) -> bool:
        return port in self._entries

    # ------------------------------------------------------------------ #
    # ResultCachePort implementation
    # ------------------------------------------------------------------ #
    def lookup(self, port: int) -> bool | None:
        """Return the cached verdict for ``port`` if still fresh.

        A stale entry is evicted on the way out.

        Args:
            port: Port to look up.

        Returns:
            The cached verdict, or ``None`` when absent or expired.
        """
        evicted = False
        with self._lock:
            entry = self._entries.get(port)
            if entry is not None and self._is_fresh(entry, self._clock()):
                self._hits += 1
                verdict: bool | None = entry.available
            else:
                if entry is not None:
                    del self._entries[port]
                    evicted = True
                self._misses += 1
                verdict = None

        with suppress(Exception):
            get_cache_lookups_total().labels(hit="true" if verdict is not None else "false").inc()
            if evicted:
                get_cache_evictions_total().labels(reason="stale").inc()
        return verdict

    def record(self, port: int, available: bool) -> CacheEntry:
        """Store a fresh verdict for ``port``.

        Args:
            port: Probed port.
            available: Verdict produced by the probe.

        Returns:
            The entry now held for ``port``.
        """
        available = bool(available)
        with self._lock:
            previous = self._entries.get(port)
            if available:
                streak = 0
            else:
                prior = previous.failure_streak if previous is not None else 0
                streak = min(prior + 1, self._max_failure_streak)
            entry = CacheEntry(available=available, timestamp=self._clock(), failure_streak=streak)
            self._entries[port] = entry

        with suppress(Exception):
            get_probe_results_total().labels(available="true" if available else "false").inc()
        return entry

    def invalidate(self, port: int) -> bool:
        with self._lock:
            removed = self._entries.pop(port, None) is not None
        if removed:
            with suppress(Exception):
                get_cache_evictions_total().labels(reason="invalidate").inc()
        return removed

    def invalidate_all(self) -> None:
        """Drop every entry; the next lookup for any port misses."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if count:
            with suppress(Exception):
                get_cache_evictions_total().labels(reason="invalidate").inc(count)

    def sweep_expired(self) -> int:
        """Remove every entry whose freshness window has elapsed.

        Uses the same ``age >= TTL`` boundary as :meth:`lookup`.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            stale = [p for p, e in self._entries.items() if not self._is_fresh(e, now)]
            for port in stale:
                del self._entries[port]
        if stale:
            with suppress(Exception):
                get_cache_evictions_total().labels(reason="sweep").inc(len(stale))
        return len(stale)

    def stats(self) -> CacheStats:
        """Return size, hit/miss counters and per-entry ages."""
        with self._lock:
            now = self._clock()
            snapshots = tuple(
                CacheEntrySnapshot(
                    port=port,
                    available=entry.available,
                    age_s=entry.age(now),
                    failure_streak=entry.failure_streak,
                )
                for port, entry in sorted(self._entries.items())
            )
            return CacheStats(
                size=len(snapshots),
                hits=self._hits,
                misses=self._misses,
                entries=snapshots,
            )

    # ------------------------------------------------------------------ #
    # Extras
    # ------------------------------------------------------------------ #
    def entry(self, port: int) -> CacheEntry | None:
        """Return the raw entry for ``port`` regardless of freshness."""
        with self._lock:
            return self._entries.get(port)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return entry.is_fresh(
            now,
            ttl_available_s=self._ttl_available_s,
            ttl_unavailable_s=self._ttl_unavailable_s,
        )
