"""Plain-text renderings of reports (CI logs, non-TTY output).

Rich tables for interactive terminals live in `cli.ui_components`; these
helpers return strings so they can be written anywhere.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from core.domain.models import CoverageSummary, RealityCheckReport, Severity, SourceScanResult

MAX_PROBLEM_ROUTES = 10


@dataclass(frozen=True)
class SummaryStats:
    routes: int
    errors: int
    warnings: int
    score: int
    duration_ms: float
    coverage: CoverageSummary | None = None


def format_duration(duration_ms: float) -> str:
    if not math.isfinite(duration_ms) or duration_ms < 0:
        return "0ms"
    if duration_ms < 1000:
        return f"{math.floor(duration_ms + 0.5)}ms"
    seconds = duration_ms / 1000
    return f"{seconds:.1f}s" if seconds < 10 else f"{seconds:.0f}s"


def format_summary_line(label: str, stats: SummaryStats) -> str:
    parts = [
        f"Routes: {stats.routes}",
        f"Errors: {stats.errors}",
        f"Warnings: {stats.warnings}",
        f"Score: {stats.score}",
        f"Duration: {format_duration(stats.duration_ms)}",
    ]
    if stats.coverage is not None:
        parts.append(
            "Coverage: "
            f"missing_routes={stats.coverage.missing_routes} "
            f"missing_types={stats.coverage.missing_types} "
            f"unlisted_routes={stats.coverage.unlisted_routes}"
        )
    return f"{label} | {' | '.join(parts)}"


def format_reality_report(report: RealityCheckReport) -> str:
    summary = report.summary
    lines = [
        f"{'✅' if report.ok else '❌'} Schema Reality Check",
        f"   Routes: {summary.routes}",
        f"   Score: {summary.score}/100",
        f"   Errors: {summary.errors}",
        f"   Warnings: {summary.warnings}",
        "",
    ]

    if summary.valid_routes:
        lines.append(f"✅ Valid: {summary.valid_routes}")
    if summary.missing_in_source:
        lines.append(
            f"❌ Missing in source: {summary.missing_in_source} "
            "(manifest expects schema but no <Schema> component)"
        )
    if summary.missing_in_html:
        lines.append(
            f"❌ Missing in HTML: {summary.missing_in_html} (have component but not in built output)"
        )
    if summary.missing_from_manifest:
        lines.append(
            f"⚠️  Missing from manifest: {summary.missing_from_manifest} (have schema but not listed)"
        )
    if summary.type_mismatches:
        lines.append(f"❌ Type mismatches: {summary.type_mismatches} (wrong schema types)")

    problems = [route for route in report.routes if route.issues]
    if problems:
        lines.extend(["", "Problem routes:"])
        for route in problems[:MAX_PROBLEM_ROUTES]:
            lines.append(f"\n  {route.route}")
            for issue in route.issues:
                icon = "❌" if issue.severity is Severity.ERROR else "⚠️"
                lines.append(f"    {icon} {issue.message}")
        if len(problems) > MAX_PROBLEM_ROUTES:
            lines.append(f"\n  ... and {len(problems) - MAX_PROBLEM_ROUTES} more")

    return "\n".join(lines)


def format_source_scan_summary(result: SourceScanResult) -> str:
    lines = [
        "📁 Source scan complete",
        f"   Total page files: {result.total_files}",
        f"   ✅ With schema: {result.files_with_schema}",
        f"   ❌ Missing schema: {result.files_missing_schema}",
    ]
    if result.files_missing_schema:
        lines.extend(["", "Routes without Schema components:"])
        for info in result.routes:
            if info.has_component:
                continue
            reason = "no @schemasentry import" if not info.has_import else "no <Schema> usage"
            lines.append(f"   ❌ {info.route} ({reason})")
    return "\n".join(lines)
