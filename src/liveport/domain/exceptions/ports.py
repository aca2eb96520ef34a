# src/liveport/domain/exceptions/ports.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Port-related domain exceptions."""

from __future__ import annotations

from typing import Any

from liveport.domain.exceptions.base import DomainError

MIN_PORT = 1
MAX_PORT = 65535


class InvalidPortError(DomainError, ValueError):
    """Raised when a value cannot identify a TCP port (``1..65535``)."""

    code = "INVALID_PORT"

    def __init__(self, port: Any) -> None:
        super().__init__(
            f"invalid port {port!r}; expected an integer in {MIN_PORT}..{MAX_PORT}",
            details={"port": repr(port)},
        )
        self.port = port


class InvalidProjectQueryError(DomainError, ValueError):
    """Raised when a project record cannot be adapted into a port query."""

    code = "INVALID_PROJECT_QUERY"


def validate_port(port: Any) -> int:
    """Return ``port`` if it is a valid TCP port number.

    ``bool`` is rejected even though it subclasses ``int``.

    Raises:
        InvalidPortError: If ``port`` is not an ``int`` in ``1..65535``.
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise InvalidPortError(port)
    if not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPortError(port)
    return port
