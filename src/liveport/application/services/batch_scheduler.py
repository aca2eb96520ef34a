# src/liveport/application/services/batch_scheduler.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Batch Scheduler.

Purpose:
    Check many ports at once without ever having more than
    ``concurrency_limit`` probes in flight.

Design:
    * Ports are deduplicated (first occurrence wins) and split into
      consecutive groups of at most ``concurrency_limit``.
    * Each group runs one cache-then-probe task per port under
      ``asyncio.gather(..., return_exceptions=True)`` and fully settles
      before the next group starts. This is a strict barrier, not a sliding
      window.
    * A task that raises resolves to ``False`` for its port only.

Layer:
    application/services
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import Iterable

from liveport.application.interfaces.result_cache_port import ResultCachePort
from liveport.application.services.probe_run import reset_probe_run_id, set_probe_run_id
from liveport.application.services.probe_sequencer import ProbeSequencer
from liveport.domain.exceptions.ports import validate_port

logger = logging.getLogger(__name__)

__all__ = ["BatchScheduler", "DEFAULT_CONCURRENCY"]

DEFAULT_CONCURRENCY = 5


class BatchScheduler:
    """Drives cache lookups and probes for one or many ports."""

    def __init__(
        self,
        cache: ResultCachePort,
        sequencer: ProbeSequencer,
        *,
        default_concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        """Initialize the scheduler.

        Args:
            cache: Verdict cache consulted before every probe.
            sequencer: Probe runner used on cache misses.
            default_concurrency: Group size used when a call passes none.

        Raises:
            ValueError: If ``default_concurrency`` is not positive.
        """
        if default_concurrency < 1:
            raise ValueError("default_concurrency must be > 0")
        self._cache = cache
        self._sequencer = sequencer
        self._default_concurrency = default_concurrency

    @property
    def default_concurrency(self) -> int:
        return self._default_concurrency

    def resolve_limit(self, concurrency_limit: int | None) -> int:
        """Return the group size to use, rejecting anything but a positive int.

        Raises:
            ValueError: If ``concurrency_limit`` is given and not a positive integer.
        """
        limit = self._default_concurrency if concurrency_limit is None else concurrency_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValueError("concurrency_limit must be a positive integer")
        return limit

    async def check(self, port: int, *, skip_cache: bool = False) -> bool:
        """Return the verdict for a single port.

        Args:
            port: Port to check.
            skip_cache: Probe even when a fresh verdict is cached. The new
                verdict is still recorded.

        Returns:
            Cached verdict on a hit, otherwise the freshly probed one.
        """
        validate_port(port)
        if not skip_cache:
            cached = self._cache.lookup(port)
            if cached is not None:
                return cached

        available = await self._sequencer.probe(port)
        self._cache.record(port, available)
        return available

    async def batch_check(
        self,
        ports: Iterable[int],
        concurrency_limit: int | None = None,
    ) -> dict[int, bool]:
        """Check every port, at most ``concurrency_limit`` at a time.

        Args:
            ports: Ports to check; duplicates are checked once.
            concurrency_limit: Maximum simultaneous probes. Defaults to the
                scheduler's ``default_concurrency``.

        Returns:
            One verdict per distinct input port.

        Raises:
            ValueError: If ``concurrency_limit`` is not positive.
            InvalidPortError: If any port is invalid (checked before any probe).
        """
        limit = self.resolve_limit(concurrency_limit)

        unique = list(dict.fromkeys(validate_port(p) for p in ports))
        results: dict[int, bool] = {}
        if not unique:
            return results

        run_id = uuid.uuid4().hex[:12]
        token = set_probe_run_id(run_id)
        try:
            await self._run_groups(unique, limit, run_id, results)
        finally:
            reset_probe_run_id(token)
        return results

    async def _run_groups(
        self,
        unique: list[int],
        limit: int,
        run_id: str,
        results: dict[int, bool],
    ) -> None:
        """Run each group to completion before starting the next."""
        groups = [unique[i : i + limit] for i in range(0, len(unique), limit)]
        logger.debug(
            "batch.start",
            extra={
                "extra": {
                    "run_id": run_id,
                    "ports": len(unique),
                    "groups": len(groups),
                    "concurrency_limit": limit,
                }
            },
        )

        for group in groups:
            settled = await asyncio.gather(
                *(self.check(port) for port in group),
                return_exceptions=True,
            )
            for port, outcome in zip(group, settled, strict=True):
                if isinstance(outcome, bool):
                    results[port] = outcome
                    continue
                logger.warning(
                    "batch.task_failed",
                    extra={
                        "extra": {
                            "run_id": run_id,
                            "port": port,
                            "error": f"{type(outcome).__name__}: {outcome}",
                        }
                    },
                )
                results[port] = False

        logger.debug(
            "batch.done",
            extra={
                "extra": {
                    "run_id": run_id,
                    "available": sum(1 for v in results.values() if v),
                    "total": len(results),
                }
            },
        )
