# src/liveport/dependencies/core/bootstrap.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Core bootstrap for the port monitor.

Wires Settings, the httpx reachability client, the probe event sinks and the
result cache into a ready :class:`PortMonitor`. Nothing here is a global:
every call builds an independent monitor, and whoever builds it owns its
lifecycle.

Public surface:
    * :func:`build_port_monitor`: synchronous factory.
    * :func:`bootstrap`: async context manager that also configures logging
      and closes the monitor on exit.
"""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator, Callable, Sequence
from contextlib import asynccontextmanager

import httpx

from liveport.application.interfaces.probe_event_sink import ProbeEventSink
from liveport.application.interfaces.reachability_client import ReachabilityClient
from liveport.application.services.port_monitor import PortMonitor
from liveport.application.services.probe_sequencer import ProbeSequencer
from liveport.config.settings import Settings, get_settings
from liveport.domain.services.probe_strategies import DEFAULT_STRATEGIES, ProbeStrategy
from liveport.infrastructure.caching.port_result_cache import PortResultCache
from liveport.infrastructure.http.reachability_client import HttpxReachabilityClient
from liveport.infrastructure.logging.logger import configure_root_logging, get_json_logger
from liveport.infrastructure.observability.probe_events import default_probe_event_sink

logger = get_json_logger(__name__)

__all__ = ["build_port_monitor", "bootstrap"]


def build_port_monitor(
    settings: Settings | None = None,
    *,
    http: httpx.AsyncClient | None = None,
    reachability: ReachabilityClient | None = None,
    sink: ProbeEventSink | None = None,
    strategies: Sequence[ProbeStrategy] = DEFAULT_STRATEGIES,
    clock: Callable[[], float] = time.monotonic,
) -> PortMonitor:
    """Build a fully wired :class:`PortMonitor`.

    Args:
        settings: Configuration; defaults to :func:`get_settings`.
        http: Optional shared ``httpx.AsyncClient`` (not closed by the monitor).
        reachability: Optional network primitive; overrides ``http`` entirely.
        sink: Probe event sink; defaults to logging + Prometheus.
        strategies: Probe fallback order.
        clock: Monotonic time source for the result cache.

    Returns:
        PortMonitor: Independent monitor with its own cache.
    """
    settings = settings or get_settings()

    owned: HttpxReachabilityClient | None = None
    if reachability is None:
        owned = HttpxReachabilityClient(http)
        reachability = owned

    cache = PortResultCache(
        ttl_available_s=settings.cache_ttl_available_s,
        ttl_unavailable_s=settings.cache_ttl_unavailable_s,
        max_failure_streak=settings.max_failure_streak,
        clock=clock,
    )
    sequencer = ProbeSequencer(
        reachability,
        host=settings.probe_host,
        timeout_s=settings.probe_timeout_s,
        strategies=strategies,
        sink=sink if sink is not None else default_probe_event_sink(),
    )

    logger.debug(
        "bootstrap.port_monitor_built",
        extra={
            "extra": {
                "probe_host": settings.probe_host,
                "strategies": [s.name for s in sequencer.strategies],
                "owns_http_client": bool(owned and owned.owns_client),
            }
        },
    )
    return PortMonitor(
        cache,
        sequencer,
        default_concurrency=settings.batch_concurrency,
        fallback_ports=settings.fallback_ports,
        checking_enabled=settings.checking_enabled,
        sweep_interval_s=settings.sweep_interval_s,
        on_close=owned.aclose if owned is not None else None,
    )


@asynccontextmanager
async def bootstrap(
    settings: Settings | None = None,
    *,
    start_sweeper: bool = True,
) -> AsyncGenerator[PortMonitor, None]:
    """Configure logging, build a monitor and tear it down on exit.

    Args:
        settings: Configuration; defaults to :func:`get_settings`.
        start_sweeper: Whether to run the periodic expiry sweep.

    Yields:
        PortMonitor: Ready monitor.
    """
    settings = settings or get_settings()
    configure_root_logging(settings.effective_log_level)
    monitor = build_port_monitor(settings)
    logger.info("bootstrap.start")
    if start_sweeper:
        monitor.start_sweeper()
    try:
        yield monitor
    finally:
        await monitor.aclose()
        logger.info("bootstrap.stop")
