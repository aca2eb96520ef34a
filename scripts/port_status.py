#!/usr/bin/env python3
"""
Port status check for local development servers.

Probes a list of ports (or ``project=port`` pairs) through the same cached,
batched monitor the UI uses and prints one line per target.

Usage (from the project root):

    python -m scripts.port_status 3000 3005 5173

    python -m scripts.port_status docs=3005 api=8000 scratch --concurrency 2

    LIVEPORT_PROBE_TIMEOUT_S=0.5 python -m scripts.port_status 3000 --json

Exit status is 0 when every target is running, 1 otherwise, and 2 on usage
errors.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import dataclass

from liveport.config.settings import get_settings
from liveport.dependencies.core.bootstrap import bootstrap
from liveport.domain.entities.project_port_query import ProjectPortQuery
from liveport.domain.exceptions.base import DomainError


@dataclass
class PortStatusConfig:
    """Parsed CLI options.

    Attributes:
        targets: Project queries; bare ports use the port as the project id.
        concurrency: Optional batch fan-out override.
        as_json: Emit a JSON object instead of text lines.
    """

    targets: list[ProjectPortQuery]
    concurrency: int | None = None
    as_json: bool = False


def _parse_target(raw: str) -> ProjectPortQuery:
    """Parse ``PORT``, ``NAME=PORT`` or a bare ``NAME`` (no port)."""
    name, sep, port = raw.partition("=")
    if not sep:
        if raw.isdigit():
            return ProjectPortQuery(project_id=raw, port=int(raw))
        return ProjectPortQuery(project_id=raw, port=None)
    if not port.isdigit():
        raise argparse.ArgumentTypeError(f"invalid port in {raw!r}")
    return ProjectPortQuery(project_id=name, port=int(port))


def parse_args(argv: list[str] | None = None) -> PortStatusConfig:
    parser = argparse.ArgumentParser(description="Check which local ports are serving.")
    parser.add_argument("targets", nargs="+", help="PORT, NAME=PORT, or NAME (no port).")
    parser.add_argument("--concurrency", type=int, default=None, help="Max probes in flight.")
    parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON.")
    ns = parser.parse_args(argv)

    try:
        targets = [_parse_target(t) for t in ns.targets]
    except (argparse.ArgumentTypeError, DomainError) as exc:
        parser.error(str(exc))
    if ns.concurrency is not None and ns.concurrency < 1:
        parser.error("--concurrency must be >= 1")
    return PortStatusConfig(targets=targets, concurrency=ns.concurrency, as_json=ns.as_json)


async def run(config: PortStatusConfig) -> int:
    async with bootstrap(get_settings(), start_sweeper=False) as monitor:
        results = await monitor.check_project_ports(config.targets, config.concurrency)

    if config.as_json:
        print(json.dumps(results, indent=2, sort_keys=True))
    else:
        for query in config.targets:
            state = "RUNNING" if results.get(query.project_id) else "STOPPED"
            port = query.port if query.port is not None else "-"
            print(f"{query.project_id:<24} {port!s:>6}  {state}")
    return 0 if all(results.values()) else 1


def main(argv: list[str] | None = None) -> int:
    config = parse_args(argv)
    return asyncio.run(run(config))


if __name__ == "__main__":
    sys.exit(main())
