# src/liveport/domain/entities/cache_entry.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Cache Entry Entities.

Purpose:
    Immutable records held by the result cache, plus the read-only snapshot
    shapes returned by the statistics surface (no I/O).

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """Last verdict produced for one port.

    Attributes:
        available:
            Whether the last probe found something serving on the port.
        timestamp:
            Monotonic clock reading taken when the verdict was produced (not
            when it was requested).
        failure_streak:
            Consecutive failed verdicts, capped by the owning cache. Reset to
            ``0`` whenever a success is recorded. Advisory only: it does not
            change the entry's TTL or retry eligibility.

    Raises:
        ValueError:
            If ``failure_streak`` is negative, or non-zero on a success.
    """

    available: bool
    timestamp: float
    failure_streak: int = 0

    def __post_init__(self) -> None:
        """Validate invariants for the CacheEntry entity."""
        if self.failure_streak < 0:
            raise ValueError("failure_streak must be >= 0")
        if self.available and self.failure_streak != 0:
            raise ValueError("failure_streak must be 0 for an available entry")

    def age(self, now: float) -> float:
        """Return seconds elapsed since the verdict was produced."""
        return now - self.timestamp

    def is_fresh(self, now: float, *, ttl_available_s: float, ttl_unavailable_s: float) -> bool:
        """Return True while ``age < TTL(available)``."""
        ttl = ttl_available_s if self.available else ttl_unavailable_s
        return self.age(now) < ttl


@dataclass(frozen=True, slots=True)
class CacheEntrySnapshot:
    """Debug view of one cache entry."""

    port: int
    available: bool
    age_s: float
    failure_streak: int


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time view of the result cache.

    Attributes:
        size: Number of entries currently held (fresh or not yet swept).
        hits: Lookups answered from a fresh entry.
        misses: Lookups that found nothing usable.
        entries: One snapshot per held entry, ordered by port.
    """

    size: int
    hits: int = 0
    misses: int = 0
    entries: tuple[CacheEntrySnapshot, ...] = field(default_factory=tuple)

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups served from cache (``0.0`` before any lookup)."""
        total = self.hits + self.misses
        return self.hits / total if total else 0.0
