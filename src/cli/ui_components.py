"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import (
    AssertionReport,
    AuditReport,
    CollectResult,
    RealityCheckReport,
    RealityStatus,
    Severity,
    SourceScanResult,
    ValidationIssue,
)

_STATUS_STYLES = {
    RealityStatus.VALID: "green",
    RealityStatus.MISSING_IN_SOURCE: "red",
    RealityStatus.MISSING_IN_HTML: "red",
    RealityStatus.TYPE_MISMATCH: "red",
    RealityStatus.MISSING_FROM_MANIFEST: "yellow",
}


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("Schema Sentry", style="bold cyan")
    subtitle = Text("Manifest • Source • Built HTML", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _issue_text(issues: list[ValidationIssue]) -> Text:
    text = Text()
    for index, issue in enumerate(issues):
        if index:
            text.append("\n")
        style = "red" if issue.severity is Severity.ERROR else "yellow"
        text.append(issue.rule_id, style=style)
        text.append(f" {issue.message}")
    return text


def build_reality_table(report: RealityCheckReport) -> Table:
    table = Table(title="Reality Check")
    table.add_column("Route", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Expected", style="white")
    table.add_column("Found", style="white")
    table.add_column("Score", justify="right")
    table.add_column("Issues")

    for route in report.routes:
        table.add_row(
            Text(route.route, style="cyan"),
            Text(route.status.value, style=_STATUS_STYLES[route.status]),
            ", ".join(route.expected_types) or "-",
            ", ".join(route.found_types) or "-",
            str(route.score),
            _issue_text(route.issues),
        )
    return table


def build_audit_table(report: AuditReport) -> Table:
    table = Table(title="Schema Audit")
    table.add_column("Route", style="cyan", no_wrap=True)
    table.add_column("OK")
    table.add_column("Found", style="white")
    table.add_column("Score", justify="right")
    table.add_column("Issues")

    for route in report.routes:
        table.add_row(
            Text(route.route, style="cyan"),
            Text("yes", style="green") if route.ok else Text("no", style="red"),
            ", ".join(route.found_types) or "-",
            str(route.score),
            _issue_text(route.issues),
        )
    return table


def build_assertion_table(report: AssertionReport) -> Table:
    table = Table(title="Schema Assertions")
    table.add_column("Assertion", style="cyan")
    table.add_column("Status")
    table.add_column("Message")

    for result in report.results:
        table.add_row(
            Text(result.assertion_id, style="cyan"),
            Text("PASS", style="green") if result.passed else Text("FAIL", style="red"),
            result.message,
        )
    return table


def build_source_scan_table(result: SourceScanResult) -> Table:
    table = Table(title="Source Scan")
    table.add_column("Route", style="cyan", no_wrap=True)
    table.add_column("Import")
    table.add_column("<Schema>")
    table.add_column("Builders", style="dim")
    table.add_column("File", style="magenta")

    for info in result.routes:
        table.add_row(
            Text(info.route, style="cyan"),
            "yes" if info.has_import else "no",
            "yes" if info.has_usage else "no",
            ", ".join(info.imported_builders) or "-",
            Text(info.file_path, style="magenta"),
        )
    return table


def build_collect_panel(result: CollectResult, *, output: str | None = None) -> Panel:
    stats = result.stats
    body = Text()
    body.append(f"HTML files: {stats.html_files}\n")
    body.append(f"Routes with JSON-LD: {stats.routes}\n")
    body.append(f"Blocks: {stats.blocks}\n")
    if stats.invalid_blocks:
        body.append(f"Invalid blocks: {stats.invalid_blocks}\n", style="yellow")
    if result.missing_routes:
        body.append(f"Missing requested routes: {', '.join(result.missing_routes)}\n", style="red")
    if output:
        body.append(f"\nWritten to {output}", style="dim")
    return Panel(body, title=Text("Collect", style="bold green"), border_style="green")
