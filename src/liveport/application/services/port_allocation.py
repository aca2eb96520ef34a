# src/liveport/application/services/port_allocation.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Preferred/fallback port selection.

A port is considered free when the liveness check reports nothing serving
on it. The preferred port wins if free; otherwise the fallback list is
walked in order.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

logger = logging.getLogger(__name__)

__all__ = ["find_available_port"]


async def find_available_port(
    preferred: int | None,
    fallbacks: Sequence[int],
    *,
    is_serving: Callable[[int], Awaitable[bool]],
) -> int | None:
    """Return the first port with nothing serving on it.

    Args:
        preferred: Port to try first. ``None`` (or ``0``) means the caller
            has no port at all, and ``None`` is returned without checking.
        fallbacks: Ports tried in order when the preferred one is taken.
        is_serving: Liveness check, typically ``PortMonitor.check_port``.

    Returns:
        The chosen port, or ``None`` when every candidate is taken.
    """
    if not preferred:
        return None

    if not await is_serving(preferred):
        return preferred

    for port in fallbacks:
        if port == preferred:
            continue
        if not await is_serving(port):
            logger.info(
                "port.fallback_selected",
                extra={"extra": {"preferred": preferred, "selected": port}},
            )
            return port

    logger.warning(
        "port.none_available",
        extra={"extra": {"preferred": preferred, "fallbacks": list(fallbacks)}},
    )
    return None
