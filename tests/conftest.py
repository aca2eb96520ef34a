# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import prometheus_client as prom
import pytest
from fixtures.probe_testkit import FakeClock, FakeReachabilityClient, RecordingSink
from prometheus_client import CollectorRegistry

from liveport.application.services.port_monitor import PortMonitor
from liveport.config.settings import Settings, get_settings
from liveport.dependencies.core.bootstrap import build_port_monitor


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Fresh Prometheus registry, no LIVEPORT_* env bleed, no cached Settings."""
    monkeypatch.setattr(prom, "REGISTRY", CollectorRegistry())
    for key in list(os.environ):
        if key.startswith("LIVEPORT_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def fake_client() -> FakeReachabilityClient:
    return FakeReachabilityClient()


@pytest.fixture
def settings() -> Settings:
    return Settings(probe_timeout_s=0.5)


@pytest.fixture
def make_monitor(
    settings: Settings,
    clock: FakeClock,
    sink: RecordingSink,
    fake_client: FakeReachabilityClient,
) -> Callable[..., PortMonitor]:
    """Factory building an isolated PortMonitor around the fakes."""

    def _make(**overrides: Any) -> PortMonitor:
        cfg = overrides.pop("settings", settings)
        kwargs: dict[str, Any] = {
            "reachability": fake_client,
            "sink": sink,
            "clock": clock,
        }
        kwargs.update(overrides)
        return build_port_monitor(cfg, **kwargs)

    return _make
