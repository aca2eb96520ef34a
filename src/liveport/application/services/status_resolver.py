# src/liveport/application/services/status_resolver.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Status Resolver.

Maps project records onto "is it running?" verdicts with a single batch
call. Projects sharing a port cost one probe, not one per project; projects
without a port are reported as not running and never probed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from liveport.application.services.batch_scheduler import BatchScheduler
from liveport.domain.entities.project_port_query import ProjectPortQuery

logger = logging.getLogger(__name__)

__all__ = ["StatusResolver"]


class StatusResolver:
    """Projects port verdicts back onto project ids."""

    def __init__(self, scheduler: BatchScheduler) -> None:
        self._scheduler = scheduler

    async def resolve(
        self,
        queries: Iterable[ProjectPortQuery | Any],
        *,
        concurrency_limit: int | None = None,
    ) -> dict[str, bool]:
        """Return ``project_id -> running`` for every query.

        Args:
            queries: :class:`ProjectPortQuery` instances or raw project
                records (see :meth:`ProjectPortQuery.from_record`).
            concurrency_limit: Forwarded to the batch scheduler.

        Returns:
            One entry per distinct project id. A project listed twice keeps
            the last record's port.

        Raises:
            ValueError: If ``concurrency_limit`` is given and not a positive integer.
        """
        self._scheduler.resolve_limit(concurrency_limit)
        normalized = [ProjectPortQuery.from_record(q) for q in queries]
        ports = list(dict.fromkeys(q.port for q in normalized if q.port is not None))

        verdicts: dict[int, bool] = {}
        if ports:
            verdicts = await self._scheduler.batch_check(ports, concurrency_limit)

        resolved = {
            q.project_id: verdicts.get(q.port, False) if q.port is not None else False
            for q in normalized
        }
        logger.debug(
            "status.resolved",
            extra={
                "extra": {
                    "projects": len(resolved),
                    "ports_probed": len(ports),
                    "running": sorted(pid for pid, up in resolved.items() if up),
                }
            },
        )
        return resolved
