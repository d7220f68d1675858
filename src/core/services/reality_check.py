"""Reality check: manifest vs. page source vs. built output.

Every route in the three-way union is classified into exactly one
`RealityStatus` by walking `REALITY_RULES` top to bottom; the first matching
rule wins and contributes its issue. Base validation issues for the route's
nodes come first, then the classification issue.

The engine is pure: inputs are read-only snapshots, output is a fresh report
sorted by route.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence

from loguru import logger

from core.domain.json_ld import Node, found_types
from core.domain.models import (
    CollectedLike,
    ManifestLike,
    RealityCheckReport,
    RealityStatus,
    RealitySummary,
    RouteRealityReport,
    RouteSourceInfo,
    Severity,
    SourceScanResult,
    ValidationIssue,
    collected_routes,
    manifest_routes,
)
from core.rules import RulesetName, run_multiple_rulesets
from core.services.coverage import missing_types, route_path, route_universe
from core.services.scoring import aggregate_score, count_severities, route_score
from core.services.validation import validate_nodes


@dataclass(frozen=True)
class RouteFacts:
    """Everything the classifier knows about one route."""

    route: str
    expected_types: tuple[str, ...]
    source_has_component: bool
    nodes: tuple[Node, ...]
    found_types: tuple[str, ...]

    @property
    def html_has_schema(self) -> bool:
        return len(self.nodes) > 0

    @property
    def missing_types(self) -> list[str]:
        return missing_types(self.expected_types, self.found_types)


@dataclass(frozen=True)
class RealityRule:
    status: RealityStatus
    applies: Callable[[RouteFacts], bool]
    issue: Callable[[RouteFacts], ValidationIssue | None]


def _no_issue(_: RouteFacts) -> None:
    return None


def _missing_source_issue(facts: RouteFacts) -> ValidationIssue:
    return ValidationIssue(
        path=route_path(facts.route),
        message="Manifest expects schema but source file has no <Schema> component",
        severity=Severity.ERROR,
        rule_id="reality.missing_source_component",
    )


def _missing_html_issue(facts: RouteFacts) -> ValidationIssue:
    return ValidationIssue(
        path=route_path(facts.route),
        message="Source has <Schema> component but no JSON-LD found in built HTML. Did you build the app?",
        severity=Severity.ERROR,
        rule_id="reality.missing_html_output",
    )


def _unlisted_issue(facts: RouteFacts) -> ValidationIssue:
    return ValidationIssue(
        path=route_path(facts.route),
        message="Route has schema in HTML but is not listed in manifest",
        severity=Severity.WARN,
        rule_id="reality.unlisted_route",
    )


def _type_mismatch_issue(facts: RouteFacts) -> ValidationIssue:
    return ValidationIssue(
        path=f"{route_path(facts.route)}.types",
        message=f"Missing expected schema types: {', '.join(facts.missing_types)}",
        severity=Severity.ERROR,
        rule_id="reality.type_mismatch",
    )


# Order is priority: first match wins.
REALITY_RULES: tuple[RealityRule, ...] = (
    RealityRule(
        RealityStatus.MISSING_IN_SOURCE,
        lambda f: bool(f.expected_types) and not f.source_has_component,
        _missing_source_issue,
    ),
    RealityRule(
        RealityStatus.MISSING_IN_HTML,
        lambda f: f.source_has_component and not f.html_has_schema,
        _missing_html_issue,
    ),
    RealityRule(
        RealityStatus.MISSING_FROM_MANIFEST,
        lambda f: f.html_has_schema and not f.expected_types,
        _unlisted_issue,
    ),
    RealityRule(
        RealityStatus.TYPE_MISMATCH,
        lambda f: bool(f.expected_types) and f.html_has_schema and bool(f.missing_types),
        _type_mismatch_issue,
    ),
    RealityRule(RealityStatus.VALID, lambda f: True, _no_issue),
)

# Statuses whose issue already reports that the route rendered nothing.
_ABSENCE_STATUSES = frozenset({RealityStatus.MISSING_IN_SOURCE, RealityStatus.MISSING_IN_HTML})


def classify_route(
    route: str,
    expected_types: Sequence[str] | None,
    source_info: RouteSourceInfo | None,
    nodes: Sequence[Node],
) -> tuple[RealityStatus, ValidationIssue | None]:
    """Pure five-state classification.

    `expected_types=None` (no manifest entry) and an empty sequence are
    treated alike: a route that renders JSON-LD without declared types is
    `missing_from_manifest`.
    """

    facts = RouteFacts(
        route=route,
        expected_types=tuple(expected_types or ()),
        source_has_component=bool(source_info and source_info.has_component),
        nodes=tuple(nodes),
        found_types=tuple(found_types(nodes)),
    )
    for rule in REALITY_RULES:
        if rule.applies(facts):
            return rule.status, rule.issue(facts)
    raise AssertionError("REALITY_RULES must end with a catch-all rule")


def _source_index(source_usage: SourceScanResult | Iterable[RouteSourceInfo] | None) -> dict[str, RouteSourceInfo]:
    if source_usage is None:
        return {}
    entries = source_usage.routes if isinstance(source_usage, SourceScanResult) else source_usage
    index: dict[str, RouteSourceInfo] = {}
    for info in entries:
        # First record wins when two files map to the same route.
        index.setdefault(info.route, info)
    return index


def _summarize(reports: Sequence[RouteRealityReport]) -> tuple[bool, RealitySummary]:
    errors = 0
    warnings = 0
    by_status = {status: 0 for status in RealityStatus}
    for report in reports:
        route_errors, route_warnings = count_severities(report.issues)
        errors += route_errors
        warnings += route_warnings
        by_status[report.status] += 1

    summary = RealitySummary(
        routes=len(reports),
        errors=errors,
        warnings=warnings,
        score=aggregate_score(report.score for report in reports),
        valid_routes=by_status[RealityStatus.VALID],
        missing_in_html=by_status[RealityStatus.MISSING_IN_HTML],
        missing_in_source=by_status[RealityStatus.MISSING_IN_SOURCE],
        missing_from_manifest=by_status[RealityStatus.MISSING_FROM_MANIFEST],
        type_mismatches=by_status[RealityStatus.TYPE_MISMATCH],
    )
    return errors == 0, summary


def perform_reality_check(
    manifest: ManifestLike | None,
    source_usage: SourceScanResult | Iterable[RouteSourceInfo] | None,
    collected: CollectedLike | None,
    *,
    recommended: bool = False,
) -> RealityCheckReport:
    expected_by_route = manifest_routes(manifest)
    nodes_by_route = collected_routes(collected)
    sources = _source_index(source_usage)

    routes = route_universe(expected_by_route, sources, nodes_by_route)
    logger.debug("Reality check sobre {} rutas", len(routes))

    reports: list[RouteRealityReport] = []
    for route in routes:
        expected = expected_by_route.get(route)
        nodes = list(nodes_by_route.get(route) or [])
        source_info = sources.get(route)

        status, classification = classify_route(route, expected, source_info, nodes)

        issues = validate_nodes(nodes, recommended=recommended)
        if status in _ABSENCE_STATUSES:
            issues = [issue for issue in issues if issue.rule_id != "schema.empty"]
        if classification is not None:
            issues.append(classification)

        reports.append(
            RouteRealityReport(
                route=route,
                status=status,
                source_has_component=bool(source_info and source_info.has_component),
                html_has_schema=bool(nodes),
                expected_types=list(expected or []),
                found_types=found_types(nodes),
                issues=issues,
                score=route_score(issues),
            )
        )

    ok, summary = _summarize(reports)
    return RealityCheckReport(ok=ok, summary=summary, routes=reports)


def attach_ruleset_issues(
    report: RealityCheckReport,
    collected: CollectedLike | None,
    ruleset_names: Sequence[RulesetName | str],
) -> RealityCheckReport:
    """Return a copy of `report` with ruleset issues appended per route.

    Route scores are recomputed from the merged issue list.
    """

    if not ruleset_names:
        return report

    nodes_by_route = collected_routes(collected)
    updated: list[RouteRealityReport] = []
    for route_report in report.routes:
        nodes = list(nodes_by_route.get(route_report.route) or [])
        extra = run_multiple_rulesets(ruleset_names, nodes).issues if nodes else []
        if not extra:
            updated.append(route_report)
            continue
        merged = [*route_report.issues, *extra]
        updated.append(route_report.model_copy(update={"issues": merged, "score": route_score(merged)}))

    ok, summary = _summarize(updated)
    return RealityCheckReport(ok=ok, summary=summary, routes=updated)


def find_ghost_routes(
    manifest: ManifestLike | None,
    source_usage: SourceScanResult | Iterable[RouteSourceInfo] | None,
) -> list[str]:
    """Manifest routes whose page source never invokes the schema component."""

    sources = _source_index(source_usage)
    ghosts: list[str] = []
    for route in sorted(manifest_routes(manifest)):
        info = sources.get(route)
        if info is None or not info.has_usage:
            ghosts.append(route)
    return ghosts
