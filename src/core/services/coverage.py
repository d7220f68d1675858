"""Manifest coverage: declared types per route vs. collected JSON-LD.

Responsabilidad:
- Construir el universo de rutas (manifest ∪ requeridas ∪ recolectadas),
  ordenado lexicográficamente.
- Emitir `coverage.missing_route`, `coverage.missing_type` y
  `coverage.unlisted_route` por ruta.

Nota:
- `is_unlisted_route` exige que la ruta no tenga entrada en el manifest; una
  entrada con lista vacía cuenta como declarada. El reality check es más
  amplio: `missing_from_manifest` aplica también a listas vacías.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from core.domain.json_ld import Node, found_types
from core.domain.models import (
    CollectedLike,
    CoverageResult,
    CoverageSummary,
    ManifestLike,
    Severity,
    ValidationIssue,
    collected_routes,
    manifest_routes,
)


def route_path(route: str) -> str:
    return f'routes["{route}"]'


def route_universe(*sources: Iterable[str]) -> list[str]:
    """Deduplicated, lexicographically sorted union of route keys."""

    routes: set[str] = set()
    for source in sources:
        routes.update(source)
    return sorted(routes)


def is_unlisted_route(route: str, expected: Mapping[str, Sequence[str]], nodes: Sequence[Node]) -> bool:
    """Route renders structured data but has no manifest entry at all.

    An entry with an empty type list counts as declared.
    """

    return bool(nodes) and route not in expected


def missing_types(expected_types: Sequence[str], found: Sequence[str]) -> list[str]:
    """Expected types absent from `found`, in declaration order."""

    present = set(found)
    return [type_name for type_name in expected_types if type_name not in present]


def compute_coverage(
    manifest: ManifestLike | None,
    collected: CollectedLike | None,
    required_routes: Iterable[str] | None = None,
    *,
    flag_unlisted: bool = True,
) -> CoverageResult:
    """Per-route coverage issues.

    `flag_unlisted=False` skips `coverage.unlisted_route`, for callers that
    have required routes but no manifest to compare against.
    """

    expected_by_route = manifest_routes(manifest)
    nodes_by_route = collected_routes(collected)
    required = set(required_routes or ())

    all_routes = route_universe(expected_by_route, required, nodes_by_route)
    issues_by_route: dict[str, list[ValidationIssue]] = {}
    missing_route_count = 0
    missing_type_count = 0
    unlisted_count = 0

    for route in all_routes:
        issues: list[ValidationIssue] = []
        expected_types = list(expected_by_route.get(route) or [])
        nodes = list(nodes_by_route.get(route) or [])

        if (route in required or expected_types) and not nodes:
            issues.append(
                ValidationIssue(
                    path=route_path(route),
                    message="No schema blocks found for route",
                    severity=Severity.ERROR,
                    rule_id="coverage.missing_route",
                )
            )
            missing_route_count += 1

        for type_name in missing_types(expected_types, found_types(nodes)):
            issues.append(
                ValidationIssue(
                    path=f"{route_path(route)}.types",
                    message=f"Missing expected schema type '{type_name}'",
                    severity=Severity.ERROR,
                    rule_id="coverage.missing_type",
                )
            )
            missing_type_count += 1

        if flag_unlisted and is_unlisted_route(route, expected_by_route, nodes):
            issues.append(
                ValidationIssue(
                    path=route_path(route),
                    message="Route has schema but is missing from manifest",
                    severity=Severity.WARN,
                    rule_id="coverage.unlisted_route",
                )
            )
            unlisted_count += 1

        if issues:
            issues_by_route[route] = issues

    return CoverageResult(
        all_routes=all_routes,
        issues_by_route=issues_by_route,
        summary=CoverageSummary(
            missing_routes=missing_route_count,
            missing_types=missing_type_count,
            unlisted_routes=unlisted_count,
        ),
    )
