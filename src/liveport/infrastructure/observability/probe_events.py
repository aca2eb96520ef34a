# src/liveport/infrastructure/observability/probe_events.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Probe event sinks (logging, Prometheus, fan-out).

The probe sequencer reports each attempt as a :class:`ProbeEvent`. These
sinks turn events into JSON log lines and Prometheus samples. The default
wiring is ``CompositeProbeEventSink(LoggingProbeEventSink(), MetricsProbeEventSink())``.
"""

from __future__ import annotations

import logging
from contextlib import suppress

from liveport.application.interfaces.probe_event_sink import ProbeEvent, ProbeEventSink
from liveport.domain.enums.probe_outcome import ProbeOutcome
from liveport.infrastructure.logging.logger import get_json_logger
from liveport.infrastructure.observability.metrics import (
    get_probe_attempt_latency_seconds,
    get_probe_attempts_total,
)

__all__ = [
    "LoggingProbeEventSink",
    "MetricsProbeEventSink",
    "CompositeProbeEventSink",
    "default_probe_event_sink",
]


class LoggingProbeEventSink(ProbeEventSink):
    """Writes one structured log line per attempt.

    Successes and ordinary failures (refused, timeout) log at ``DEBUG`` so a
    polling UI does not flood the logs; unexpected outcomes log at ``WARNING``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or get_json_logger("liveport.probe")

    def emit(self, event: ProbeEvent) -> None:
        level = logging.WARNING if event.outcome is ProbeOutcome.UNEXPECTED else logging.DEBUG
        self._logger.log(
            level,
            "probe.attempt",
            extra={
                "extra": {
                    "port": event.port,
                    "strategy_index": event.strategy_index,
                    "strategy": event.strategy_name,
                    "outcome": event.outcome.value,
                    "latency_ms": round(event.latency_s * 1000.0, 3),
                    "detail": event.detail,
                }
            },
        )


class MetricsProbeEventSink(ProbeEventSink):
    """Records attempt counts and latencies in Prometheus."""

    def emit(self, event: ProbeEvent) -> None:
        labels = {"strategy": event.strategy_name, "outcome": event.outcome.value}
        get_probe_attempts_total().labels(**labels).inc()
        get_probe_attempt_latency_seconds().labels(**labels).observe(event.latency_s)


class CompositeProbeEventSink(ProbeEventSink):
    """Forwards each event to every child; one failing child does not stop the rest."""

    def __init__(self, *sinks: ProbeEventSink) -> None:
        self._sinks: tuple[ProbeEventSink, ...] = sinks

    @property
    def sinks(self) -> tuple[ProbeEventSink, ...]:
        return self._sinks

    def emit(self, event: ProbeEvent) -> None:
        for sink in self._sinks:
            with suppress(Exception):
                sink.emit(event)


def default_probe_event_sink() -> CompositeProbeEventSink:
    """Return the standard logging + metrics sink."""
    return CompositeProbeEventSink(LoggingProbeEventSink(), MetricsProbeEventSink())
