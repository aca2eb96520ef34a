# src/liveport/domain/exceptions/probe.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Transport-neutral probe failures.

Reachability clients translate their library-specific errors into these so
the probe sequencer can classify attempts without importing a transport.
None of them escape :meth:`ProbeSequencer.probe`.
"""

from __future__ import annotations

from liveport.domain.exceptions.base import DomainError


class ProbeConnectionError(DomainError):
    """Connection refused, reset, or name resolution failed."""

    code = "PROBE_CONNECTION_ERROR"


class ProbeTimeoutError(DomainError, TimeoutError):
    """The transport gave up waiting for the target."""

    code = "PROBE_TIMEOUT"
