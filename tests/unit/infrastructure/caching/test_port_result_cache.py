from __future__ import annotations

import prometheus_client as prom
import pytest
from fixtures.probe_testkit import FakeClock

from liveport.infrastructure.caching.port_result_cache import PortResultCache


@pytest.fixture
def cache(clock: FakeClock) -> PortResultCache:
    return PortResultCache(clock=clock)


def test_lookup_returns_recorded_verdict_within_ttl(
    cache: PortResultCache, clock: FakeClock
) -> None:
    cache.record(3005, True)
    cache.record(3999, False)

    clock.advance(4.9)
    assert cache.lookup(3005) is True
    assert cache.lookup(3999) is False


def test_failure_expires_at_ttl_and_is_evicted(cache: PortResultCache, clock: FakeClock) -> None:
    cache.record(3999, False)
    clock.advance(5.0)

    assert cache.lookup(3999) is None
    assert 3999 not in cache


def test_success_is_trusted_longer_than_failure(cache: PortResultCache, clock: FakeClock) -> None:
    recorded_at = clock.now
    cache.record(3000, True)
    cache.record(3001, False)

    clock.now = recorded_at + 6.0
    assert cache.lookup(3000) is True
    assert cache.lookup(3001) is None

    clock.now = recorded_at + 29.5
    assert cache.lookup(3000) is True
    clock.now = recorded_at + 30.0
    assert cache.lookup(3000) is None


def test_unknown_port_misses(cache: PortResultCache) -> None:
    assert cache.lookup(4242) is None
    stats = cache.stats()
    assert (stats.hits, stats.misses) == (0, 1)


def test_failure_streak_is_capped_and_reset_by_success(cache: PortResultCache) -> None:
    streaks = [cache.record(3999, False).failure_streak for _ in range(6)]
    assert streaks == [1, 2, 3, 3, 3, 3]

    assert cache.record(3999, True).failure_streak == 0
    assert cache.record(3999, False).failure_streak == 1


def test_record_replaces_timestamp(cache: PortResultCache, clock: FakeClock) -> None:
    cache.record(3000, False)
    clock.advance(4.0)
    entry = cache.record(3000, False)

    assert entry.timestamp == clock.now
    clock.advance(4.0)
    assert cache.lookup(3000) is False


def test_lookup_after_record_sees_the_new_verdict(cache: PortResultCache) -> None:
    cache.record(3000, True)
    cache.record(3000, False)
    assert cache.lookup(3000) is False
    assert cache.entry(3000) is not None
    assert cache.entry(3000).failure_streak == 1  # type: ignore[union-attr]


def test_invalidate_and_invalidate_all(cache: PortResultCache) -> None:
    for port in (3000, 3001, 3002):
        cache.record(port, True)

    assert cache.invalidate(3000) is True
    assert cache.invalidate(3000) is False
    assert len(cache) == 2

    cache.invalidate_all()
    assert len(cache) == 0
    assert cache.lookup(3001) is None


def test_sweep_removes_only_expired(cache: PortResultCache, clock: FakeClock) -> None:
    cache.record(3000, True)
    cache.record(3001, False)
    cache.record(3002, False)
    clock.advance(5.0)
    cache.record(3002, False)

    assert cache.sweep_expired() == 1
    assert sorted(s.port for s in cache.stats().entries) == [3000, 3002]

    clock.advance(30.0)
    assert cache.sweep_expired() == 2
    assert len(cache) == 0


def test_stats_report_ages_and_hit_rate(cache: PortResultCache, clock: FakeClock) -> None:
    cache.record(3001, False)
    cache.record(3000, True)
    clock.advance(2.5)
    cache.lookup(3000)
    cache.lookup(3000)
    cache.lookup(4000)

    stats = cache.stats()
    assert stats.size == 2
    assert [e.port for e in stats.entries] == [3000, 3001]
    assert stats.entries[0].age_s == pytest.approx(2.5)
    assert stats.entries[1].failure_streak == 1
    assert stats.hit_rate == pytest.approx(2 / 3)


def test_lookup_metrics_are_recorded(cache: PortResultCache) -> None:
    cache.record(3000, True)
    cache.lookup(3000)
    cache.lookup(3001)

    registry = prom.REGISTRY
    assert registry.get_sample_value("liveport_cache_lookups_total", {"hit": "true"}) == 1.0
    assert registry.get_sample_value("liveport_cache_lookups_total", {"hit": "false"}) == 1.0
    assert registry.get_sample_value("liveport_probe_results_total", {"available": "true"}) == 1.0


@pytest.mark.parametrize(
    "kwargs",
    [
        {"ttl_available_s": 5.0, "ttl_unavailable_s": 5.0},
        {"ttl_available_s": 0.0},
        {"max_failure_streak": 0},
    ],
)
def test_invalid_configuration(kwargs: dict[str, float]) -> None:
    with pytest.raises(ValueError):
        PortResultCache(**kwargs)  # type: ignore[arg-type]
