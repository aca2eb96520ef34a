# src/liveport/config/settings.py
# Copyright (c) Liveport.
# SPDX-License-Identifier: MIT
"""Liveport Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the port liveness monitor. Probe
    timeouts, cache TTL bands, batch fan-out and the fallback port list all
    come from here; components receive values through constructor injection
    rather than reading the environment themselves.

Design:
    - Pydantic v2 BaseSettings with ``LIVEPORT_`` prefix and ``extra='forbid'``.
    - Explicit field declarations with constrained types and ranges.
    - Cross-field validation: successes must be trusted longer than failures.
    - Singleton accessor ``get_settings()`` with LRU cache.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

_DEFAULT_FALLBACK_PORTS = "3007,3008,3009,3010,5174,5175,5176,5177"


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    PRODUCTION = "production"


# Root log level per environment when neither LIVEPORT_LOG_LEVEL nor LOG_LEVEL is set.
_DEFAULT_LOG_LEVELS: dict[Environment, str] = {
    Environment.DEVELOPMENT: "INFO",
    Environment.TEST: "WARNING",
    Environment.CI: "INFO",
    Environment.PRODUCTION: "WARNING",
}


class Settings(BaseSettings):
    """Typed configuration for the liveness monitor."""

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
    )

    # ---------------------------
    # Probing
    # ---------------------------
    probe_host: str = Field(
        default="localhost",
        min_length=1,
        description="Host every probed port is resolved against.",
    )
    probe_timeout_s: float = Field(
        default=2.0,
        ge=0.05,
        le=60.0,
        description="Timeout in seconds applied to each individual probe attempt.",
    )
    checking_enabled: bool = Field(
        default=True,
        description="Master switch; when false every check reports 'not running'.",
    )

    # ---------------------------
    # Result cache
    # ---------------------------
    cache_ttl_available_s: float = Field(
        default=30.0,
        gt=0.0,
        le=24 * 60 * 60,
        description="How long a successful verdict stays trusted.",
    )
    cache_ttl_unavailable_s: float = Field(
        default=5.0,
        gt=0.0,
        le=24 * 60 * 60,
        description="How long a failed verdict stays trusted.",
    )
    max_failure_streak: int = Field(
        default=3,
        ge=1,
        le=1000,
        description="Cap for the consecutive-failure counter kept per port.",
    )
    sweep_interval_s: float = Field(
        default=60.0,
        gt=0.0,
        le=24 * 60 * 60,
        description="Interval of the background expiry sweep, when started.",
    )

    # ---------------------------
    # Batching
    # ---------------------------
    batch_concurrency: int = Field(
        default=5,
        ge=1,
        le=256,
        description="Default maximum number of in-flight probes per batch group.",
    )

    # Raw env (comma-separated); parsed by the ``fallback_ports`` property.
    fallback_ports_raw: str = Field(
        default=_DEFAULT_FALLBACK_PORTS,
        description="Comma-separated ports tried when a preferred port is taken.",
        validation_alias="LIVEPORT_FALLBACK_PORTS",
    )

    # ---------------------------
    # Logging
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description=(
            "Override log level (e.g., 'DEBUG', 'INFO'). If not set, ``LOG_LEVEL`` and "
            "then the environment's default are used."
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="LIVEPORT_",
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _validate_ttls_and_ports(self) -> Settings:
        """Enforce the TTL ordering and check the fallback port list parses.

        Returns:
            Settings: The validated settings instance.

        Raises:
            ValueError: If the TTL ordering is violated or a fallback port is
                not a valid TCP port.
        """
        if self.cache_ttl_available_s <= self.cache_ttl_unavailable_s:
            raise ValueError(
                "cache_ttl_available_s must be strictly greater than cache_ttl_unavailable_s.",
            )
        _parse_ports(self.fallback_ports_raw)
        return self

    @property
    def fallback_ports(self) -> list[int]:
        """Return the parsed fallback ports (deduplicated, in declared order)."""
        return _parse_ports(self.fallback_ports_raw)

    @property
    def effective_log_level(self) -> str:
        """Root log level: ``log_level``, then ``LOG_LEVEL``, then the environment default."""
        explicit = self.log_level or os.getenv("LOG_LEVEL")
        if explicit:
            return explicit.upper()
        return _DEFAULT_LOG_LEVELS[self.environment]


def _parse_ports(raw: str | None) -> list[int]:
    """Parse a comma-separated port list.

    Raises:
        ValueError: If an element is not an integer in ``1..65535``.
    """
    ports: list[int] = []
    for item in (p.strip() for p in (raw or "").split(",")):
        if not item:
            continue
        try:
            port = int(item)
        except ValueError as exc:
            raise ValueError(f"fallback port {item!r} is not an integer") from exc
        if not 1 <= port <= 65535:
            raise ValueError(f"fallback port {port} is outside 1..65535")
        if port not in ports:
            ports.append(port)
    return ports


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()
    except ValidationError as exc:
        logger.exception("Invalid liveport configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "extra": {
                "environment": settings.environment.value,
                "log_level": settings.effective_log_level,
                "probe_host": settings.probe_host,
                "probe_timeout_s": settings.probe_timeout_s,
                "checking_enabled": settings.checking_enabled,
                "cache_ttl_available_s": settings.cache_ttl_available_s,
                "cache_ttl_unavailable_s": settings.cache_ttl_unavailable_s,
                "max_failure_streak": settings.max_failure_streak,
                "batch_concurrency": settings.batch_concurrency,
                "fallback_ports": settings.fallback_ports,
            }
        },
    )
    return settings
