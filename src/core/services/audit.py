"""Audit of a collected-data file, optionally against a manifest.

The audit merges, per route: base validation issues, coverage issues (when a
manifest or required routes are supplied) and ruleset issues. The route score
is always recomputed from the merged list.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from core.domain.json_ld import found_types
from core.domain.models import (
    AuditReport,
    AuditSummary,
    CollectedLike,
    CoverageSummary,
    ManifestLike,
    RouteReport,
    collected_routes,
    manifest_routes,
)
from core.rules import RulesetName, run_multiple_rulesets
from core.services.coverage import compute_coverage
from core.services.scoring import aggregate_score, count_severities, route_score
from core.services.validation import validate_nodes


def build_audit_report(
    collected: CollectedLike | None,
    *,
    manifest: ManifestLike | None = None,
    required_routes: Iterable[str] | None = None,
    recommended: bool = False,
    rulesets: Sequence[RulesetName | str] = (),
) -> AuditReport:
    nodes_by_route = collected_routes(collected)
    expected_by_route = manifest_routes(manifest)
    required = list(required_routes or ())
    coverage_enabled = manifest is not None or bool(required)

    coverage = None
    if coverage_enabled:
        coverage = compute_coverage(
            expected_by_route,
            nodes_by_route,
            required,
            flag_unlisted=manifest is not None,
        )
        routes = coverage.all_routes
    else:
        routes = sorted(nodes_by_route)

    reports: list[RouteReport] = []
    for route in routes:
        nodes = list(nodes_by_route.get(route) or [])
        issues = validate_nodes(nodes, recommended=recommended)
        if coverage is not None:
            issues.extend(coverage.issues_by_route.get(route, []))
        if rulesets and nodes:
            issues.extend(run_multiple_rulesets(rulesets, nodes).issues)

        errors, _ = count_severities(issues)
        reports.append(
            RouteReport(
                route=route,
                ok=errors == 0,
                score=route_score(issues),
                issues=issues,
                expected_types=list(expected_by_route.get(route) or []),
                found_types=found_types(nodes),
            )
        )

    coverage_summary = coverage.summary if coverage is not None and manifest is not None else None
    return _aggregate(reports, coverage_summary)


def build_ruleset_report(collected: CollectedLike | None, rulesets: Sequence[RulesetName | str]) -> AuditReport:
    """Solo rulesets, sin validación base ni cobertura (comando `lint`)."""

    reports: list[RouteReport] = []
    for route, nodes in sorted(collected_routes(collected).items()):
        issues = run_multiple_rulesets(rulesets, list(nodes)).issues if nodes else []
        errors, _ = count_severities(issues)
        reports.append(
            RouteReport(
                route=route,
                ok=errors == 0,
                score=route_score(issues),
                issues=issues,
                found_types=found_types(nodes),
            )
        )
    return _aggregate(reports, None)


def _aggregate(reports: list[RouteReport], coverage: CoverageSummary | None) -> AuditReport:
    total_errors = 0
    total_warnings = 0
    for report in reports:
        errors, warnings = count_severities(report.issues)
        total_errors += errors
        total_warnings += warnings

    return AuditReport(
        ok=total_errors == 0,
        summary=AuditSummary(
            routes=len(reports),
            errors=total_errors,
            warnings=total_warnings,
            score=aggregate_score(report.score for report in reports),
            coverage=coverage,
        ),
        routes=reports,
    )
