"""GitHub Actions workflow commands (`::error` / `::warning`).

Formato: `::error title=Schema Sentry <label>::[<ruta>] <ruleId>: <mensaje> (<path>)`.
Los valores escapan `%`, CR y LF; las propiedades además `:` y `,`.
"""

from __future__ import annotations

import sys
from typing import Iterable, TextIO, Union

from core.domain.models import AuditReport, RealityCheckReport, Severity, ValidationIssue

ReportWithRoutes = Union[AuditReport, RealityCheckReport]


def escape_command_value(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_command_property(value: str) -> str:
    return escape_command_value(value).replace(":", "%3A").replace(",", "%2C")


def format_issue_message(route: str, issue: ValidationIssue) -> str:
    return f"[{route}] {issue.rule_id}: {issue.message} ({issue.path})"


def build_github_annotation_lines(report: ReportWithRoutes, command_label: str) -> list[str]:
    title = escape_command_property(f"Schema Sentry {command_label}")
    lines: list[str] = []
    for route in report.routes:
        for issue in route.issues:
            level = "error" if issue.severity is Severity.ERROR else "warning"
            message = escape_command_value(format_issue_message(route.route, issue))
            lines.append(f"::{level} title={title}::{message}")
    return lines


def emit_github_annotations(
    report: ReportWithRoutes,
    command_label: str,
    *,
    stream: TextIO | None = None,
) -> list[str]:
    lines = build_github_annotation_lines(report, command_label)
    _write_lines(lines, stream or sys.stderr)
    return lines


def _write_lines(lines: Iterable[str], stream: TextIO) -> None:
    for line in lines:
        stream.write(line + "\n")
    stream.flush()
