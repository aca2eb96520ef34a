# src/liveport/infrastructure/http/reachability_client.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""HTTPX Reachability Client.

Async, timeout-bounded single-request transport used by the probe
sequencer. It only cares whether *something* answered:

* Any HTTP response (including 4xx/5xx) returns its status code.
* ``httpx.TimeoutException`` maps to :class:`ProbeTimeoutError`.
* Every other ``httpx.TransportError`` maps to :class:`ProbeConnectionError`.
* Redirects are not followed. The status line and headers decide the
  outcome; the body is never read, so a slow or streamed body cannot turn
  an answered request into a timeout.
"""

from __future__ import annotations

from typing import Final

import httpx

from liveport.application.interfaces.reachability_client import ReachabilityClient
from liveport.domain.exceptions.probe import ProbeConnectionError, ProbeTimeoutError
from liveport.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

__all__ = ["HttpxReachabilityClient"]

_DEFAULT_TIMEOUT: Final[float] = 2.0

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Cache-Control": "no-cache",
    "User-Agent": "liveport-probe/1.0",
}


class HttpxReachabilityClient(ReachabilityClient):
    """``ReachabilityClient`` backed by ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient | None = None) -> None:
        """Initialize the client.

        Args:
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned (and closed) by this instance.
        """
        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=_DEFAULT_TIMEOUT,
            headers=_DEFAULT_HEADERS.copy(),
            follow_redirects=False,
        )
        if http is not None:
            for key, value in _DEFAULT_HEADERS.items():
                self._client.headers.setdefault(key, value)

    @property
    def owns_client(self) -> bool:
        return self._owns_client

    async def request(
        self,
        method: str,
        host: str,
        port: int,
        path: str = "/",
        *,
        timeout_s: float,
    ) -> int:
        """Issue one request and return the status code.

        Raises:
            ProbeTimeoutError: If httpx gives up waiting.
            ProbeConnectionError: On any other transport-level failure.
        """
        url = f"http://{host}:{port}{path}"
        try:
            async with self._client.stream(
                method,
                url,
                timeout=timeout_s,
                follow_redirects=False,
            ) as response:
                status = response.status_code
        except httpx.TimeoutException as exc:
            raise ProbeTimeoutError(
                f"{type(exc).__name__} for {method} {url}",
                details={"url": url, "method": method},
            ) from exc
        except httpx.TransportError as exc:
            raise ProbeConnectionError(
                f"{type(exc).__name__} for {method} {url}: {exc}",
                details={"url": url, "method": method},
            ) from exc
        return status

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
