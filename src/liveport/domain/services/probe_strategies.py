# src/liveport/domain/services/probe_strategies.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Probe strategy descriptors.

Local development servers differ in what they answer: some reject a plain
``GET /`` but still serve ``/favicon.ico``. A probe therefore walks an ordered
list of lightweight request shapes and stops at the first one that gets any
HTTP response at all.

The list is plain data so the sequencer can iterate it generically and tests
can substitute their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = ["ProbeStrategy", "DEFAULT_STRATEGIES"]

_ALLOWED_METHODS: Final[frozenset[str]] = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass(frozen=True, slots=True)
class ProbeStrategy:
    """One named reachability request shape.

    Attributes:
        name: Stable identifier used in logs and metric labels.
        method: HTTP method (``GET``, ``HEAD`` or ``OPTIONS``).
        path: Absolute request path, starting with ``/``.
    """

    name: str
    method: str
    path: str = "/"

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("strategy name must be non-empty")
        method = self.method.upper()
        if method not in _ALLOWED_METHODS:
            raise ValueError(f"unsupported probe method {self.method!r}")
        object.__setattr__(self, "method", method)
        if not self.path.startswith("/"):
            raise ValueError("strategy path must start with '/'")


#: Fallback order used when none is injected.
DEFAULT_STRATEGIES: Final[tuple[ProbeStrategy, ...]] = (
    ProbeStrategy(name="get-root", method="GET", path="/"),
    ProbeStrategy(name="head-root", method="HEAD", path="/"),
    ProbeStrategy(name="head-favicon", method="HEAD", path="/favicon.ico"),
)
