from __future__ import annotations

import logging

import prometheus_client as prom
import pytest
from fixtures.probe_testkit import RecordingSink

from liveport.application.interfaces.probe_event_sink import ProbeEvent
from liveport.domain.enums.probe_outcome import ProbeOutcome
from liveport.infrastructure.observability.probe_events import (
    CompositeProbeEventSink,
    LoggingProbeEventSink,
    MetricsProbeEventSink,
    default_probe_event_sink,
)


def _event(outcome: ProbeOutcome = ProbeOutcome.SUCCESS) -> ProbeEvent:
    return ProbeEvent(
        port=3005,
        strategy_index=0,
        strategy_name="get-root",
        outcome=outcome,
        latency_s=0.0125,
        detail="status=200",
    )


def test_logging_sink_levels(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="test.probe.sink")
    sink = LoggingProbeEventSink(logging.getLogger("test.probe.sink"))

    sink.emit(_event())
    sink.emit(_event(ProbeOutcome.UNEXPECTED))

    first, second = caplog.records[-2:]
    assert first.levelno == logging.DEBUG
    assert second.levelno == logging.WARNING
    assert first.getMessage() == "probe.attempt"
    assert first.extra["latency_ms"] == pytest.approx(12.5)  # type: ignore[attr-defined]
    assert first.extra["outcome"] == "success"  # type: ignore[attr-defined]


def test_metrics_sink_counts_attempts() -> None:
    MetricsProbeEventSink().emit(_event(ProbeOutcome.CONNECTION_ERROR))

    labels = {"strategy": "get-root", "outcome": "connection_error"}
    assert prom.REGISTRY.get_sample_value("liveport_probe_attempts_total", labels) == 1.0
    assert (
        prom.REGISTRY.get_sample_value("liveport_probe_attempt_latency_seconds_count", labels)
        == 1.0
    )


def test_composite_isolates_failing_children() -> None:
    class Exploding:
        def emit(self, event: ProbeEvent) -> None:
            raise RuntimeError("sink down")

    recorder = RecordingSink()
    composite = CompositeProbeEventSink(Exploding(), recorder)

    composite.emit(_event())

    assert len(recorder.events) == 1


def test_default_sink_wires_logging_and_metrics() -> None:
    sink = default_probe_event_sink()
    kinds = [type(s) for s in sink.sinks]
    assert kinds == [LoggingProbeEventSink, MetricsProbeEventSink]
