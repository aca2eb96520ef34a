# src/liveport/application/interfaces/result_cache_port.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Application Interface: Result Cache Port.

Synopsis:
    Minimal verdict-cache behavior used by the batch scheduler. Enables
    swapping the in-memory cache for a fake or another store.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol

from liveport.domain.entities.cache_entry import CacheEntry, CacheStats


class ResultCachePort(Protocol):
    """Port → last verdict store with asymmetric TTL semantics.

    Implementations must make ``record`` atomic with respect to ``lookup`` on
    the same key: a reader sees either the previous entry or the new one.
    """

    def lookup(self, port: int) -> bool | None:
        """Return the fresh verdict for ``port`` or ``None`` (evicting stale entries)."""

    def record(self, port: int, available: bool) -> CacheEntry:
        """Store a new verdict for ``port`` and return the stored entry."""

    def invalidate(self, port: int) -> bool:
        """Drop the entry for ``port``; return whether one existed."""

    def invalidate_all(self) -> None:
        """Drop every entry."""

    def sweep_expired(self) -> int:
        """Drop every entry past its freshness window; return how many."""

    def stats(self) -> CacheStats:
        """Return a point-in-time view of the cache."""
