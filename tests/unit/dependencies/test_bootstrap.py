from __future__ import annotations

import httpx
import pytest
import respx

from liveport.config.settings import Settings
from liveport.dependencies.core.bootstrap import bootstrap, build_port_monitor
from liveport.domain.services.probe_strategies import ProbeStrategy
from liveport.infrastructure.caching.port_result_cache import PortResultCache
from liveport.infrastructure.observability.probe_events import CompositeProbeEventSink


def test_build_applies_settings() -> None:
    settings = Settings(
        probe_timeout_s=0.75,
        cache_ttl_available_s=20.0,
        cache_ttl_unavailable_s=2.0,
        batch_concurrency=3,
        fallback_ports_raw="4000,4001",
    )
    monitor = build_port_monitor(settings)

    cache = monitor.cache
    assert isinstance(cache, PortResultCache)
    assert (cache.ttl_available_s, cache.ttl_unavailable_s) == (20.0, 2.0)
    assert monitor.sequencer.timeout_s == 0.75
    assert monitor.scheduler.default_concurrency == 3
    assert monitor.fallback_ports == (4000, 4001)
    assert isinstance(monitor.sequencer._sink, CompositeProbeEventSink)


@pytest.mark.asyncio
async def test_shared_http_client_probes_and_is_left_open() -> None:
    settings = Settings(probe_host="127.0.0.1")
    async with httpx.AsyncClient() as http:
        monitor = build_port_monitor(
            settings, http=http, strategies=(ProbeStrategy("head-root", "HEAD"),)
        )
        with respx.mock() as router:
            route = router.head("http://127.0.0.1:3005/").mock(return_value=httpx.Response(200))
            assert await monitor.check_port(3005) is True
            assert route.call_count == 1

        await monitor.aclose()
        assert http.is_closed is False


@pytest.mark.asyncio
async def test_refused_port_walks_every_strategy() -> None:
    monitor = build_port_monitor(Settings())
    with respx.mock() as router:
        get_root = router.get("http://localhost:3999/").mock(
            side_effect=httpx.ConnectError("refused")
        )
        head_root = router.head("http://localhost:3999/").mock(
            side_effect=httpx.ConnectError("refused")
        )
        favicon = router.head("http://localhost:3999/favicon.ico").mock(
            side_effect=httpx.ConnectError("refused")
        )

        assert await monitor.check_port(3999) is False

    assert (get_root.call_count, head_root.call_count, favicon.call_count) == (1, 1, 1)
    await monitor.aclose()


@pytest.mark.asyncio
async def test_bootstrap_context_closes_monitor() -> None:
    async with bootstrap(Settings(sweep_interval_s=5.0)) as monitor:
        assert monitor.closed is False
        assert monitor._sweeper is not None and monitor._sweeper.running

    assert monitor.closed is True
    assert monitor._sweeper is None
