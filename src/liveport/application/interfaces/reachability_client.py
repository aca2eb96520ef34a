# src/liveport/application/interfaces/reachability_client.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Application Interface: Reachability Client.

Synopsis:
    The single network primitive the probe sequencer depends on: issue one
    timeout-bounded HTTP request to ``host:port`` and report the status code.
    Enables swapping httpx, a fake, or any other transport.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol


class ReachabilityClient(Protocol):
    """Single-request HTTP reachability primitive.

    Implementations must raise on connection-level failure (refused, reset,
    DNS, timeout). Any HTTP response, whatever its status, is returned
    normally: reaching the server is all that matters here.
    """

    async def request(
        self,
        method: str,
        host: str,
        port: int,
        path: str = "/",
        *,
        timeout_s: float,
    ) -> int:
        """Issue one request and return its HTTP status code.

        Args:
            method: HTTP method.
            host: Target host.
            port: Target port.
            path: Absolute request path.
            timeout_s: Upper bound for the whole request in seconds.

        Returns:
            The response status code.
        """
