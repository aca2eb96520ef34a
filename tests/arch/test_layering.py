# tests/arch/test_layering.py
"""Layering guardrail built on the grimp import graph.

    domain         → may depend only on domain
    application    → may depend on {domain, application}
    infrastructure → may depend on {domain, application, infrastructure}

``liveport.config`` and ``liveport.dependencies`` sit outside the matrix:
the composition root is allowed to import everything.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

import grimp
from grimp import ImportGraph

ROOT_PACKAGE: Final[str] = "liveport"

ALLOWED_DEPENDENCIES: Mapping[str, set[str]] = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "infrastructure": {"domain", "application", "infrastructure"},
}


def _layer_for_module(module_name: str) -> str | None:
    if not module_name.startswith(f"{ROOT_PACKAGE}."):
        return None
    top = module_name[len(ROOT_PACKAGE) + 1 :].split(".", 1)[0]
    return top if top in ALLOWED_DEPENDENCIES else None


def _find_layering_violations(graph: ImportGraph) -> list[str]:
    violations: set[str] = set()

    for importer in sorted(graph.modules):
        importer_layer = _layer_for_module(importer)
        if importer_layer is None:
            continue

        allowed = ALLOWED_DEPENDENCIES[importer_layer]
        for imported in graph.find_modules_directly_imported_by(importer):
            imported_layer = _layer_for_module(imported)
            if imported_layer is None or imported_layer in allowed:
                continue
            violations.add(f"{importer} ({importer_layer}) -> {imported} ({imported_layer})")

    return sorted(violations)


def test_layering_is_respected() -> None:
    violations = _find_layering_violations(grimp.build_graph(ROOT_PACKAGE))
    if violations:
        raise AssertionError("Layering violations detected:\n" + "\n".join(violations))
