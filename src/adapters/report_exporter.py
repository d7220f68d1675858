"""Exportación HTML de reportes.

Por qué está en adapters:
- HTML es un detalle de infraestructura (Jinja2 + template).
- El Core solo conoce `AuditReport` y `RealityCheckReport`.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.models import (
    AuditReport,
    AuditSummary,
    CoverageSummary,
    RealityCheckReport,
    RealityStatus,
    RouteReport,
)
from core.services.scoring import count_severities

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def reality_as_audit(report: RealityCheckReport) -> AuditReport:
    """Proyecta el reality check sobre la forma de reporte por ruta.

    Una ruta es OK solo si su estado es `valid` y no tiene errores.
    """

    summary = report.summary
    routes = [
        RouteReport(
            route=route.route,
            ok=route.status is RealityStatus.VALID and count_severities(route.issues)[0] == 0,
            score=route.score,
            issues=route.issues,
            expected_types=route.expected_types,
            found_types=route.found_types,
        )
        for route in report.routes
    ]
    return AuditReport(
        ok=report.ok,
        summary=AuditSummary(
            routes=summary.routes,
            errors=summary.errors,
            warnings=summary.warnings,
            score=summary.score,
            coverage=CoverageSummary(
                missing_routes=summary.missing_in_source + summary.missing_in_html,
                missing_types=summary.type_mismatches,
                unlisted_routes=summary.missing_from_manifest,
            ),
        ),
        routes=routes,
    )


def render_report_html(
    report: AuditReport | RealityCheckReport,
    *,
    title: str,
    generated_at: datetime | None = None,
) -> str:
    """Renderiza un HTML autocontenido (autoescape activo)."""

    statuses: dict[str, str] = {}
    if isinstance(report, RealityCheckReport):
        statuses = {route.route: route.status.value for route in report.routes}
        report = reality_as_audit(report)

    stamp = (generated_at or datetime.now(timezone.utc)).isoformat(timespec="seconds")
    template = _get_env().get_template("report.html")
    return template.render(title=title, generated_at=stamp, report=report, statuses=statuses)


def export_report_html(
    *,
    report: AuditReport | RealityCheckReport,
    output_path: Path,
    title: str,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_report_html(report, title=title), encoding="utf-8")
    return output_path
