"""
liveport: cached, batched liveness checks for local development ports.

    from liveport import build_port_monitor

    monitor = build_port_monitor()
    running = await monitor.check_project_ports([{"id": "docs", "port": 3005}])
"""

from __future__ import annotations

from liveport.application.services.port_monitor import PortMonitor
from liveport.dependencies.core.bootstrap import bootstrap, build_port_monitor
from liveport.domain.entities.cache_entry import CacheEntry, CacheEntrySnapshot, CacheStats
from liveport.domain.entities.project_port_query import ProjectPortQuery
from liveport.domain.enums.probe_outcome import ProbeOutcome
from liveport.domain.services.probe_strategies import DEFAULT_STRATEGIES, ProbeStrategy

__all__ = [
    "PortMonitor",
    "bootstrap",
    "build_port_monitor",
    "CacheEntry",
    "CacheEntrySnapshot",
    "CacheStats",
    "ProjectPortQuery",
    "ProbeOutcome",
    "ProbeStrategy",
    "DEFAULT_STRATEGIES",
]
