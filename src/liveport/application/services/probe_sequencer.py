# src/liveport/application/services/probe_sequencer.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Probe Strategy Sequencer.

Purpose:
    Decide whether anything is serving on a local port by walking an ordered
    list of :class:`ProbeStrategy` descriptors. The first attempt that gets
    any HTTP response wins; the rest are skipped.

Design:
    * Attempts run strictly in declared order, one at a time.
    * Every attempt owns its own ``asyncio.timeout`` scope. Expiry cancels
      only that attempt's in-flight request and the loop moves on.
    * ``probe`` never raises for probe failures. Connection errors, timeouts,
      stray cancellations and unexpected exceptions all become ``False``;
      the reason is reported solely through the injected event sink.
    * Cancellation of the task running ``probe`` is propagated unchanged.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from contextlib import suppress

from liveport.application.interfaces.probe_event_sink import ProbeEvent, ProbeEventSink
from liveport.application.interfaces.reachability_client import ReachabilityClient
from liveport.domain.enums.probe_outcome import ProbeOutcome
from liveport.domain.exceptions.ports import validate_port
from liveport.domain.exceptions.probe import ProbeConnectionError
from liveport.domain.services.probe_strategies import DEFAULT_STRATEGIES, ProbeStrategy

logger = logging.getLogger(__name__)

__all__ = ["ProbeSequencer"]


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__


class ProbeSequencer:
    """Runs the fallback strategy list against a single port."""

    def __init__(
        self,
        client: ReachabilityClient,
        *,
        host: str = "localhost",
        timeout_s: float = 2.0,
        strategies: Sequence[ProbeStrategy] = DEFAULT_STRATEGIES,
        sink: ProbeEventSink | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        """Initialize the sequencer.

        Args:
            client: Network primitive used for each attempt.
            host: Host every port is probed on.
            timeout_s: Default per-attempt timeout in seconds.
            strategies: Fallback order; must not be empty.
            sink: Optional observability hook receiving one event per attempt.
            timer: Clock used to measure attempt latency.

        Raises:
            ValueError: If ``strategies`` is empty or ``timeout_s`` is not positive.
        """
        if not strategies:
            raise ValueError("at least one probe strategy is required")
        if timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        self._client = client
        self._host = host
        self._timeout_s = float(timeout_s)
        self._strategies: tuple[ProbeStrategy, ...] = tuple(strategies)
        self._sink = sink
        self._timer = timer

    @property
    def strategies(self) -> tuple[ProbeStrategy, ...]:
        return self._strategies

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    async def probe(self, port: int, *, timeout_s: float | None = None) -> bool:
        """Return whether anything answers on ``port``.

        Args:
            port: Target port.
            timeout_s: Per-attempt timeout override in seconds.

        Returns:
            ``True`` on the first successful attempt, ``False`` once every
            strategy has failed.

        Raises:
            InvalidPortError: If ``port`` is not a valid TCP port.
            ValueError: If ``timeout_s`` is given and not positive.
        """
        validate_port(port)
        bound = self._timeout_s if timeout_s is None else float(timeout_s)
        if bound <= 0:
            raise ValueError("timeout_s must be > 0")

        for index, strategy in enumerate(self._strategies):
            outcome = await self._attempt(port, index, strategy, bound)
            if outcome.is_success:
                logger.debug(
                    "probe.detected",
                    extra={"extra": {"port": port, "strategy": strategy.name}},
                )
                return True

        logger.debug(
            "probe.unreachable",
            extra={"extra": {"port": port, "attempts": len(self._strategies)}},
        )
        return False

    async def _attempt(
        self,
        port: int,
        index: int,
        strategy: ProbeStrategy,
        timeout_s: float,
    ) -> ProbeOutcome:
        """Run one strategy and classify how it ended."""
        start = self._timer()
        detail: str | None = None
        try:
            async with asyncio.timeout(timeout_s):
                status = await self._client.request(
                    strategy.method,
                    self._host,
                    port,
                    strategy.path,
                    timeout_s=timeout_s,
                )
            outcome = ProbeOutcome.SUCCESS
            detail = f"status={status}"
        except TimeoutError as exc:
            outcome = ProbeOutcome.TIMEOUT
            detail = _describe(exc)
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            outcome = ProbeOutcome.CANCELLED
            detail = _describe(exc)
        except (ProbeConnectionError, OSError) as exc:
            outcome = ProbeOutcome.CONNECTION_ERROR
            detail = _describe(exc)
        except Exception as exc:
            outcome = ProbeOutcome.UNEXPECTED
            detail = _describe(exc)
            logger.warning(
                "probe.attempt_unexpected_error",
                extra={"extra": {"port": port, "strategy": strategy.name, "error": detail}},
            )

        self._emit(
            ProbeEvent(
                port=port,
                strategy_index=index,
                strategy_name=strategy.name,
                outcome=outcome,
                latency_s=max(0.0, self._timer() - start),
                detail=detail,
            )
        )
        return outcome

    def _emit(self, event: ProbeEvent) -> None:
        if self._sink is None:
            return
        with suppress(Exception):
            self._sink.emit(event)
