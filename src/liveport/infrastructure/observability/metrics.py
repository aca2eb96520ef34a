# src/liveport/infrastructure/observability/metrics.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for probing and caching (registry-aware, reload safe).

Every accessor returns a collector bound to the **current**
``prometheus_client.REGISTRY``:

- Repeated calls return the same object while the registry is unchanged.
- Swapping the default registry (tests do this) resets the local cache, so
  collectors are re-created on the new registry instead of raising
  duplicate-registration errors.

Example:
    get_probe_attempts_total().labels(strategy="get-root", outcome="success").inc()
    get_cache_lookups_total().labels(hit="true").inc()
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final, TypeVar

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

__all__ = [
    "get_probe_attempt_latency_seconds",
    "get_probe_attempts_total",
    "get_probe_results_total",
    "get_cache_lookups_total",
    "get_cache_evictions_total",
]

# Probe attempts are bounded by a few seconds; buckets stop at 10s.
_BUCKETS: Final[tuple[float, ...]] = (
    0.001,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.000,
    5.000,
    10.000,
)

_C = TypeVar("_C", Counter, Histogram)

_registry: prom.CollectorRegistry | None = None
_collectors: dict[str, Counter | Histogram] = {}
_lock = threading.RLock()


def _ensure_registry() -> None:
    """Drop cached collectors if the active registry changed."""
    global _registry
    with _lock:
        # Hold the registry itself; ids of collected registries can be reused.
        if _registry is not prom.REGISTRY:
            _collectors.clear()
            _registry = prom.REGISTRY


def _lookup_existing(name: str, kind: type[_C]) -> _C | None:
    """Return a collector already registered under ``name`` on the active registry."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            col = mapping.get(name)
            if isinstance(col, kind):
                return col
    return None


def _get_or_create(
    kind: type[_C],
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...],
    buckets: tuple[float, ...] | None = None,
) -> _C:
    """Get or create a registry-bound collector with stable identity.

    Strategy:
        1. Return from the module cache if present for the active registry.
        2. Reuse a collector the registry already holds under this name.
        3. Otherwise register a new one; on a duplicate race, retry step 2.

    Args:
        kind: ``Counter`` or ``Histogram``.
        name: Metric name (snake_case).
        help_text: Human-readable description.
        labelnames: Label names.
        buckets: Histogram buckets in seconds (histograms only).

    Returns:
        The collector bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _collectors.get(name)
        if isinstance(cached, kind):
            return cached

        existing = _lookup_existing(name, kind)
        if existing is not None:
            _collectors[name] = existing
            return existing

        try:
            if kind is Histogram:
                created = Histogram(
                    name,
                    help_text,
                    labelnames,
                    buckets=buckets or _BUCKETS,
                    registry=prom.REGISTRY,
                )
            else:
                created = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup_existing(name, kind)
                if again is not None:
                    _collectors[name] = again
                    return again
            _log.exception("Failed to register Prometheus collector %s", name)
            raise

        _collectors[name] = created
        return created  # type: ignore[return-value]


# ---------------------------------------------------------------------------
# Probe metrics


def get_probe_attempt_latency_seconds() -> Histogram:
    """Histogram of single probe attempt latency.

    Labels:
        strategy: Strategy descriptor name (e.g., ``get-root``).
        outcome: :class:`ProbeOutcome` value.
    """
    return _get_or_create(
        Histogram,
        "liveport_probe_attempt_latency_seconds",
        "Latency of a single port probe attempt (seconds).",
        labelnames=("strategy", "outcome"),
    )


def get_probe_attempts_total() -> Counter:
    """Counter of probe attempts by strategy and outcome."""
    return _get_or_create(
        Counter,
        "liveport_probe_attempts_total",
        "Port probe attempts by strategy and outcome.",
        labelnames=("strategy", "outcome"),
    )


def get_probe_results_total() -> Counter:
    """Counter of recorded verdicts (``available`` is ``true``/``false``)."""
    return _get_or_create(
        Counter,
        "liveport_probe_results_total",
        "Port verdicts recorded in the result cache.",
        labelnames=("available",),
    )


# ---------------------------------------------------------------------------
# Cache metrics


def get_cache_lookups_total() -> Counter:
    """Counter of result-cache lookups (``hit`` is ``true``/``false``)."""
    return _get_or_create(
        Counter,
        "liveport_cache_lookups_total",
        "Result cache lookups by hit/miss.",
        labelnames=("hit",),
    )


def get_cache_evictions_total() -> Counter:
    """Counter of evicted entries by reason (``stale``, ``sweep``, ``invalidate``)."""
    return _get_or_create(
        Counter,
        "liveport_cache_evictions_total",
        "Result cache entries removed, by reason.",
        labelnames=("reason",),
    )
