# src/liveport/application/services/probe_run.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Correlation id shared by every log line of one batch run.

The batch scheduler binds a short id for the duration of a run; the JSON log
formatter reads it back, so probe attempts from concurrent tasks can be
grouped after the fact.
"""

from __future__ import annotations

from contextvars import ContextVar, Token

__all__ = ["set_probe_run_id", "reset_probe_run_id", "get_probe_run_id"]

_PROBE_RUN_ID_CTX: ContextVar[str | None] = ContextVar("liveport_probe_run_id", default=None)


def set_probe_run_id(run_id: str | None) -> Token[str | None]:
    """Bind (or clear, with ``None``) the correlation id for the current context.

    Returns:
        Token to hand to :func:`reset_probe_run_id` once the run is over.
    """
    return _PROBE_RUN_ID_CTX.set(run_id)


def reset_probe_run_id(token: Token[str | None]) -> None:
    """Restore the correlation id that was bound before :func:`set_probe_run_id`."""
    _PROBE_RUN_ID_CTX.reset(token)


def get_probe_run_id() -> str | None:
    return _PROBE_RUN_ID_CTX.get(None)
