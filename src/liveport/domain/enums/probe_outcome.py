# src/liveport/domain/enums/probe_outcome.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Outcome classification for a single probe attempt."""

from __future__ import annotations

from enum import Enum


class ProbeOutcome(str, Enum):
    """How one reachability attempt ended.

    Only ``SUCCESS`` counts as "serving"; every other member collapses to
    ``available = False`` at the public boundary and is visible only through
    the observability hook.
    """

    SUCCESS = "success"
    CONNECTION_ERROR = "connection_error"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"

    @property
    def is_success(self) -> bool:
        return self is ProbeOutcome.SUCCESS
