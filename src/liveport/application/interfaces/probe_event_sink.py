# src/liveport/application/interfaces/probe_event_sink.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Application Interface: Probe Event Sink.

Synopsis:
    Structured observability hook for probe attempts. The sequencer emits one
    :class:`ProbeEvent` per attempt; sinks turn them into logs, metrics, or an
    in-memory list for tests. Failure reasons only ever surface here.

Layer:
    application/interfaces
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from liveport.domain.enums.probe_outcome import ProbeOutcome


@dataclass(frozen=True, slots=True)
class ProbeEvent:
    """One finished probe attempt.

    Attributes:
        port: Probed port.
        strategy_index: Zero-based position of the strategy in the fallback order.
        strategy_name: Name of the strategy descriptor.
        outcome: How the attempt ended.
        latency_s: Wall time spent on the attempt.
        detail: Short diagnostic (exception type/message or status code).
    """

    port: int
    strategy_index: int
    strategy_name: str
    outcome: ProbeOutcome
    latency_s: float
    detail: str | None = None


class ProbeEventSink(Protocol):
    """Receiver for probe attempt events.

    Implementations should be cheap and must not block; exceptions they raise
    are suppressed by the emitter.
    """

    def emit(self, event: ProbeEvent) -> None:
        """Consume one event."""
