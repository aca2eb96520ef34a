from __future__ import annotations

import pytest

from liveport.domain.entities.cache_entry import CacheEntry, CacheEntrySnapshot, CacheStats


def test_freshness_uses_ttl_for_verdict() -> None:
    up = CacheEntry(available=True, timestamp=100.0)
    down = CacheEntry(available=False, timestamp=100.0, failure_streak=1)

    assert up.is_fresh(129.9, ttl_available_s=30.0, ttl_unavailable_s=5.0)
    assert not up.is_fresh(130.0, ttl_available_s=30.0, ttl_unavailable_s=5.0)
    assert down.is_fresh(104.9, ttl_available_s=30.0, ttl_unavailable_s=5.0)
    assert not down.is_fresh(105.0, ttl_available_s=30.0, ttl_unavailable_s=5.0)
    assert up.age(112.5) == pytest.approx(12.5)


def test_invariants() -> None:
    with pytest.raises(ValueError, match=">= 0"):
        CacheEntry(available=False, timestamp=0.0, failure_streak=-1)
    with pytest.raises(ValueError, match="available entry"):
        CacheEntry(available=True, timestamp=0.0, failure_streak=2)


def test_entry_is_immutable() -> None:
    entry = CacheEntry(available=True, timestamp=1.0)
    with pytest.raises(AttributeError):
        entry.available = False  # type: ignore[misc]


def test_stats_hit_rate() -> None:
    assert CacheStats(size=0).hit_rate == 0.0
    stats = CacheStats(
        size=1,
        hits=3,
        misses=1,
        entries=(CacheEntrySnapshot(port=3000, available=True, age_s=1.0, failure_streak=0),),
    )
    assert stats.hit_rate == pytest.approx(0.75)
