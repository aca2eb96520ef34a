# src/liveport/domain/entities/project_port_query.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Project Port Query Entity.

Purpose:
    Adapts an externally supplied project record into the ``(project_id,
    port)`` pair the status resolver works with.

Layer:
    domain/entities
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from liveport.domain.exceptions.ports import InvalidProjectQueryError, validate_port


@dataclass(frozen=True, slots=True)
class ProjectPortQuery:
    """A project id and the port it is expected to serve on, if any.

    Attributes:
        project_id:
            Non-empty identifier owned by the external project registry.
        port:
            Port the project serves on, or ``None`` when it has none
            configured. Queries without a port always resolve to "not
            running" and never trigger a probe.

    Raises:
        InvalidProjectQueryError:
            If ``project_id`` is empty.
        InvalidPortError:
            If ``port`` is set but is not a valid TCP port.
    """

    project_id: str
    port: int | None = None

    def __post_init__(self) -> None:
        """Validate invariants for the ProjectPortQuery entity."""
        if not isinstance(self.project_id, str) or not self.project_id:
            raise InvalidProjectQueryError(
                "project_id must be a non-empty string",
                details={"project_id": repr(self.project_id)},
            )
        if self.port is not None:
            validate_port(self.port)

    @classmethod
    def from_record(cls, record: Any) -> ProjectPortQuery:
        """Build a query from a registry record.

        Accepts a :class:`ProjectPortQuery`, a mapping, or any object. The id
        is read from ``project_id`` or ``id``; the port from ``port`` or
        ``local_port``. A falsy port (``None``/``0``) means "no port".

        Args:
            record: External project record.

        Returns:
            ProjectPortQuery: Normalized query.

        Raises:
            InvalidProjectQueryError: If no usable id can be found.
        """
        if isinstance(record, ProjectPortQuery):
            return record

        project_id = _read(record, "project_id") or _read(record, "id")
        port = _read(record, "port")
        if port is None:
            port = _read(record, "local_port")

        if project_id is None:
            raise InvalidProjectQueryError(
                "project record has no 'project_id' or 'id'",
                details={"record_type": type(record).__name__},
            )
        return cls(project_id=str(project_id), port=port or None)


def _read(record: Any, name: str) -> Any:
    """Return ``name`` from a mapping key or an attribute, ``None`` if absent."""
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)
