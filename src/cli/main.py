"""CLI principal (Typer).

Por qué Typer + Rich:
- Typer da subcomandos y validación de flags con poco código.
- Rich pinta tablas/paneles en stderr; stdout queda libre para el reporte
  (JSON/HTML) y se puede redirigir o encadenar en CI.

Códigos de salida:
- 0 si el reporte está OK (y sin ghost routes en `audit`, sin drift en
  `collect --check`, todas las aserciones en `test`); 1 en cualquier otro caso, incluidos errores de entrada.
"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from loguru import logger
from rich.console import Console

from adapters.annotations import ReportWithRoutes, emit_github_annotations
from adapters.github_bot import format_bot_comment, parse_pr_url, post_pr_comment, resolve_pr_url_from_event
from adapters.html_collector import collect_schema_data, normalize_route_filter
from adapters.json_exporter import export_json, render_json
from adapters.manifest_loader import load_assertion_config, load_manifest, load_schema_data
from adapters.report_exporter import export_report_html, render_report_html
from adapters.route_scanner import scan_routes
from adapters.source_scanner import scan_source_files
from cli.doctor import app as doctor_app
from cli.logging_setup import configure_logging
from cli.ui_components import (
    build_assertion_table,
    build_audit_table,
    build_collect_panel,
    build_reality_table,
    build_source_scan_table,
    print_banner,
)
from core.config import AppSettings, ProjectConfig, load_project_config, resolve_recommended, resolve_rulesets
from core.domain.json_ld import stable_stringify
from core.domain.models import Manifest, SchemaDataFile, SourceScanResult
from core.errors import BotError, InputError, SchemaSentryError
from core.rules import RulesetName, parse_ruleset_names
from core.services.assertions import run_assertions
from core.services.audit import build_audit_report, build_ruleset_report
from core.services.drift import compare_schema_data, format_schema_data_drift
from core.services.formatting import (
    SummaryStats,
    format_duration,
    format_reality_report,
    format_source_scan_summary,
    format_summary_line,
)
from core.services.reality_check import find_ghost_routes
from core.services.reality_pipeline import PipelineHooks, PipelineResult, RealityCheckRequest, run_reality_check

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Schema Sentry: validate schema.org JSON-LD against manifest, source and built HTML.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console(stderr=True)

MAX_PRINTED_WARNINGS = 10
MAX_PRINTED_GHOSTS = 5


class OutputFormat(str, Enum):
    JSON = "json"
    HTML = "html"


class AnnotationsMode(str, Enum):
    NONE = "none"
    GITHUB = "github"


class AssertionOutput(str, Enum):
    TABLE = "table"
    JSON = "json"


def _fail(error: SchemaSentryError) -> NoReturn:
    """Imprime el error como JSON estable en stderr y sale con código 1."""

    typer.echo(stable_stringify({"ok": False, "errors": [error.to_payload()]}), err=True)
    raise typer.Exit(code=1)


def _stderr(text: str) -> None:
    _console.print(text, markup=False, highlight=False)


def _load_config(config_path: Optional[Path], settings: AppSettings) -> ProjectConfig | None:
    return load_project_config(config_path or settings.config_path)


def _resolve_rulesets(
    rules: Optional[str], config: ProjectConfig | None, settings: AppSettings
) -> tuple[str, list[RulesetName]]:
    text = resolve_rulesets(rules, config, settings)
    names = parse_ruleset_names(text)
    if text.strip() and not names:
        raise InputError(
            "rules.unknown",
            f"Unknown ruleset(s): {text}",
            "Use --rules google, --rules ai-citation or --rules google,ai-citation.",
        )
    return ",".join(name.value for name in names), names


def _write_report(
    report: ReportWithRoutes,
    *,
    output_format: OutputFormat,
    output: Optional[Path],
    title: str,
) -> None:
    if output_format is OutputFormat.JSON:
        if output:
            path = export_json(payload=report, output_path=output.resolve())
            _console.print(f"[green]✓ Report written to[/green] {path}", highlight=False)
        else:
            typer.echo(render_json(report), nl=False)
        return

    if output:
        path = export_report_html(report=report, output_path=output.resolve(), title=title)
        _console.print(f"[green]✓ HTML report written to[/green] {path}", highlight=False)
    else:
        typer.echo(render_report_html(report, title=title))


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logs on stderr."),
) -> None:
    """Configura logs antes de cualquier subcomando."""

    configure_logging(AppSettings().log_level, verbose=verbose)


@app.command()
def validate(
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-m", help="Path to manifest JSON."),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-r",
        help="Directory containing built HTML output (e.g. ./out or ./.next/server/app).",
    ),
    source_root: Path = typer.Option(Path("."), "--source-root", help="Project root for source scanning."),
    app_dir: Optional[str] = typer.Option(None, "--app-dir", help="App directory relative to --source-root."),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rulesets to run (google,ai-citation)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config JSON."),
    output_format: OutputFormat = typer.Option(OutputFormat.JSON, "--format", help="Report format."),
    annotations: AnnotationsMode = typer.Option(AnnotationsMode.NONE, "--annotations", help="Emit CI annotations."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write report output to file."),
    recommended: Optional[bool] = typer.Option(
        None,
        "--recommended/--no-recommended",
        help="Enable or disable recommended field checks.",
    ),
    table: bool = typer.Option(False, "--table", help="Print a per-route table on stderr."),
) -> None:
    """Reality check: manifest vs source components vs built HTML."""

    settings = AppSettings()
    try:
        project_config = _load_config(config, settings)
        use_recommended = resolve_recommended(recommended, project_config, settings)
        _, rulesets = _resolve_rulesets(rules, project_config, settings)
        manifest_model = load_manifest(manifest or settings.manifest_path)

        built_output_dir = (root or settings.built_output_dir).resolve()
        if not built_output_dir.is_dir():
            raise InputError(
                "validate.no_build_output",
                f"No built HTML output found at {built_output_dir}",
                "Build your Next.js app first with `next build`, then run validate.",
            )
    except SchemaSentryError as exc:
        _fail(exc)

    _console.print("[bold blue]🔍 Schema Sentry Reality Check[/bold blue]")
    _console.print("[dim]Validating actual built HTML against manifest expectations...[/dim]\n")

    request = RealityCheckRequest(
        manifest=manifest_model,
        built_output_dir=built_output_dir,
        source_root=source_root.resolve(),
        app_dir=app_dir or settings.app_dir,
        recommended=use_recommended,
        rulesets=rulesets,
    )
    hooks = PipelineHooks(
        warning=lambda message: logger.warning(message),
        stage=lambda message: _console.print(f"[dim]→ {message}...[/dim]", highlight=False),
    )
    result = asyncio.run(run_reality_check(request, hooks=hooks))
    report = result.report

    _write_report(report, output_format=output_format, output=output, title="Schema Sentry Validate Report")

    if table:
        _console.print(build_reality_table(report))
    _stderr("\n" + format_reality_report(report))
    _stderr(
        format_summary_line(
            "validate",
            SummaryStats(
                routes=report.summary.routes,
                errors=report.summary.errors,
                warnings=report.summary.warnings,
                score=report.summary.score,
                duration_ms=result.duration_ms,
            ),
        )
    )

    if annotations is AnnotationsMode.GITHUB:
        emit_github_annotations(report, "validate")

    raise typer.Exit(code=0 if report.ok else 1)


def _optional_manifest(path: Path) -> Manifest | None:
    try:
        return load_manifest(path)
    except InputError as exc:
        if exc.code != "manifest.not_found":
            raise
        logger.info("Audit sin manifest: {}", exc.message)
        return None


def _optional_data(path: Path) -> SchemaDataFile:
    try:
        return load_schema_data(path)
    except InputError as exc:
        if exc.code != "data.not_found":
            raise
        logger.info("Audit sin datos recolectados: {}", exc.message)
        return SchemaDataFile()


def _print_ghost_routes(ghost_routes: list[str]) -> None:
    _console.print(f"\n[red]👻 Ghost Routes ({len(ghost_routes)}):[/red]")
    _console.print("[dim]   Routes in manifest but no <Schema> component in source:[/dim]")
    for route in ghost_routes[:MAX_PRINTED_GHOSTS]:
        _stderr(f"   ❌ {route}")
    if len(ghost_routes) > MAX_PRINTED_GHOSTS:
        _stderr(f"   ... and {len(ghost_routes) - MAX_PRINTED_GHOSTS} more")


@app.command()
def audit(
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="Path to collected schema data JSON."),
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-m", help="Path to manifest JSON (optional)."),
    scan: bool = typer.Option(False, "--scan", help="Scan app/ and pages/ for routes that must have schema."),
    root: Path = typer.Option(Path("."), "--root", help="Project root for scanning."),
    app_dir: Optional[str] = typer.Option(None, "--app-dir", help="App directory relative to --root."),
    source_scan: bool = typer.Option(
        True,
        "--source-scan/--no-source-scan",
        help="Scan page sources for ghost routes.",
    ),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rulesets to run (google,ai-citation)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config JSON."),
    output_format: OutputFormat = typer.Option(OutputFormat.JSON, "--format", help="Report format."),
    annotations: AnnotationsMode = typer.Option(AnnotationsMode.NONE, "--annotations", help="Emit CI annotations."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write report output to file."),
    recommended: Optional[bool] = typer.Option(
        None,
        "--recommended/--no-recommended",
        help="Enable or disable recommended field checks.",
    ),
    table: bool = typer.Option(False, "--table", help="Print per-route tables on stderr."),
) -> None:
    """Audit collected data, coverage against the manifest and ghost routes."""

    started = time.perf_counter()
    settings = AppSettings()
    try:
        project_config = _load_config(config, settings)
        use_recommended = resolve_recommended(recommended, project_config, settings)
        _, rulesets = _resolve_rulesets(rules, project_config, settings)
        manifest_model = _optional_manifest(manifest or settings.manifest_path)
        data_model = _optional_data(data or settings.data_path)
    except SchemaSentryError as exc:
        _fail(exc)

    _console.print("[bold blue]🔍 Schema Sentry Audit[/bold blue]")
    _console.print("[dim]Analyzing schema health and checking for ghost routes...[/dim]\n")

    project_root = root.resolve()
    source_result = (
        scan_source_files(project_root, app_dir or settings.app_dir) if source_scan else SourceScanResult()
    )
    scanned_routes = scan_routes(project_root) if scan else []
    ghost_routes: list[str] = []
    if manifest_model is not None and source_scan:
        ghost_routes = find_ghost_routes(manifest_model, source_result)

    report = build_audit_report(
        data_model,
        manifest=manifest_model,
        required_routes=scanned_routes or None,
        recommended=use_recommended,
        rulesets=rulesets,
    )

    _write_report(report, output_format=output_format, output=output, title="Schema Sentry Audit Report")
    if annotations is AnnotationsMode.GITHUB:
        emit_github_annotations(report, "audit")

    passed = report.ok and not ghost_routes
    _stderr("")
    _console.print("[bold green]✅ Audit passed[/bold green]" if passed else "[bold red]❌ Audit found issues[/bold red]")
    if table:
        _console.print(build_audit_table(report))
        if source_result.total_files:
            _console.print(build_source_scan_table(source_result))
    elif source_result.total_files:
        _stderr("\n" + format_source_scan_summary(source_result))
    if ghost_routes:
        _print_ghost_routes(ghost_routes)
    _stderr(
        "\n"
        + format_summary_line(
            "audit",
            SummaryStats(
                routes=report.summary.routes,
                errors=report.summary.errors,
                warnings=report.summary.warnings,
                score=report.summary.score,
                duration_ms=(time.perf_counter() - started) * 1000,
                coverage=report.summary.coverage,
            ),
        )
    )

    raise typer.Exit(code=0 if passed else 1)


@app.command()
def collect(
    root: Path = typer.Option(Path("."), "--root", help="Root directory to scan for HTML files."),
    routes: Optional[List[str]] = typer.Option(
        None,
        "--routes",
        help="Only collect specific routes (repeat or comma-separated).",
    ),
    strict_routes: bool = typer.Option(False, "--strict-routes", help="Fail when any --routes entry is missing."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write collected schema data to file."),
    check: bool = typer.Option(False, "--check", help="Compare collected output with an existing data file."),
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="Existing schema data JSON for --check."),
) -> None:
    """Collect JSON-LD blocks from built HTML output."""

    started = time.perf_counter()
    settings = AppSettings()
    root_dir = root.resolve()
    requested = normalize_route_filter(routes or [])

    try:
        try:
            collected = collect_schema_data(root_dir, requested)
        except OSError as exc:
            raise InputError(
                "collect.scan_failed",
                f"Could not scan HTML output at {root_dir}: {exc}",
                "Point --root to a directory containing built HTML output.",
            ) from exc

        if collected.stats.html_files == 0:
            raise InputError(
                "collect.no_html",
                f"No HTML files found under {root_dir}",
                "Point --root to a static output directory (for example ./out).",
            )
        if strict_routes and collected.missing_routes:
            raise InputError(
                "collect.missing_required_routes",
                f"Required routes were not found in collected HTML: {', '.join(collected.missing_routes)}",
                "Rebuild output, adjust --root, or update --routes.",
            )

        drift_detected = False
        if check:
            existing = load_schema_data((data or settings.data_path).resolve())
            if requested:
                existing = SchemaDataFile(
                    routes={route: existing.routes[route] for route in requested if route in existing.routes}
                )
            drift = compare_schema_data(existing, collected.data)
            drift_detected = drift.has_changes
            _stderr(format_schema_data_drift(drift) if drift_detected else "collect | No schema data drift detected.")

        if output:
            try:
                written = export_json(payload=collected.data, output_path=output.resolve())
            except OSError as exc:
                raise InputError(
                    "output.write_failed",
                    f"Could not write collected data to {output.resolve()}: {exc}",
                ) from exc
            _stderr(f"Collected data written to {written}")
        elif not check:
            typer.echo(render_json(collected.data), nl=False)
    except SchemaSentryError as exc:
        _fail(exc)

    if collected.warnings:
        _stderr(f"collect | Warnings: {len(collected.warnings)}")
        for warning in collected.warnings[:MAX_PRINTED_WARNINGS]:
            _stderr(f"- {warning.file}: {warning.message}")
        if len(collected.warnings) > MAX_PRINTED_WARNINGS:
            _stderr(f"- ... {len(collected.warnings) - MAX_PRINTED_WARNINGS} more warning(s)")

    _console.print(build_collect_panel(collected, output=str(output) if output else None))
    parts = [f"Duration: {format_duration((time.perf_counter() - started) * 1000)}"]
    if check:
        parts.append(f"Check: {'drift_detected' if drift_detected else 'clean'}")
    if strict_routes:
        parts.append("Strict routes: enabled")
    _stderr(f"collect | {' | '.join(parts)}")

    raise typer.Exit(code=1 if drift_detected else 0)


@app.command()
def lint(
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="Path to collected schema data JSON."),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rulesets to run (default: all)."),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config JSON."),
    output_format: OutputFormat = typer.Option(OutputFormat.JSON, "--format", help="Report format."),
    annotations: AnnotationsMode = typer.Option(AnnotationsMode.NONE, "--annotations", help="Emit CI annotations."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write report output to file."),
    table: bool = typer.Option(False, "--table", help="Print a per-route table on stderr."),
) -> None:
    """Run rulesets (google, ai-citation) over a collected data file."""

    started = time.perf_counter()
    settings = AppSettings()
    try:
        project_config = _load_config(config, settings)
        _, rulesets = _resolve_rulesets(rules, project_config, settings)
        data_model = load_schema_data(data or settings.data_path)
    except SchemaSentryError as exc:
        _fail(exc)

    report = build_ruleset_report(data_model, rulesets or list(RulesetName))

    _write_report(report, output_format=output_format, output=output, title="Schema Sentry Lint Report")
    if annotations is AnnotationsMode.GITHUB:
        emit_github_annotations(report, "lint")
    if table:
        _console.print(build_audit_table(report))
    _stderr(
        format_summary_line(
            "lint",
            SummaryStats(
                routes=report.summary.routes,
                errors=report.summary.errors,
                warnings=report.summary.warnings,
                score=report.summary.score,
                duration_ms=(time.perf_counter() - started) * 1000,
            ),
        )
    )

    raise typer.Exit(code=0 if report.ok else 1)


@app.command("test")
def run_schema_assertions(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to assertions JSON (default schema-sentry.test.json)."
    ),
    root: Optional[Path] = typer.Option(
        None, "--root", "-r", help="Built HTML output to collect from when --data is not given."
    ),
    data: Optional[Path] = typer.Option(None, "--data", "-d", help="Collected schema data JSON (skips collection)."),
    output_format: AssertionOutput = typer.Option(AssertionOutput.TABLE, "--format", help="table or json."),
) -> None:
    """Run schema assertions (exists, equals, matches, ...) over collected JSON-LD."""

    settings = AppSettings()
    try:
        suite = load_assertion_config(config or settings.assertions_path)
        if data:
            collected = load_schema_data(data)
        else:
            built_output_dir = (root or settings.built_output_dir).resolve()
            if not built_output_dir.is_dir():
                raise InputError(
                    "test.no_build_output",
                    f"No built HTML output found at {built_output_dir}",
                    "Build your app first or pass --data with a collected schema data file.",
                )
            try:
                collected = collect_schema_data(built_output_dir).data
            except OSError as exc:
                raise InputError(
                    "collect.scan_failed",
                    f"Could not scan HTML output at {built_output_dir}: {exc}",
                    "Point --root to a directory containing built HTML output.",
                ) from exc
    except SchemaSentryError as exc:
        _fail(exc)

    _console.print("[bold blue]🧪 Schema Sentry Test[/bold blue]")
    _console.print("[dim]Running schema assertions...[/dim]\n")

    report = run_assertions(suite, collected)

    if output_format is AssertionOutput.JSON:
        typer.echo(render_json(report), nl=False)
    else:
        _console.print(build_assertion_table(report))

    if report.ok:
        _console.print(f"\n[green]✅ All {report.summary.passed} assertion(s) passed[/green]")
    else:
        _console.print(
            f"\n[red]❌ {report.summary.failed} of {report.summary.total} assertion(s) failed[/red]"
        )

    raise typer.Exit(code=0 if report.ok else 1)


async def _review_and_post(
    pr_url: str,
    *,
    request: RealityCheckRequest,
    token: str,
    settings: AppSettings,
    manifest_label: str,
    root_label: str,
    rules_label: str | None,
) -> tuple[PipelineResult, str]:
    pr = parse_pr_url(pr_url)
    _stderr(f"Posting to {pr.owner}/{pr.repo} PR #{pr.number}...")
    result = await run_reality_check(request)
    body = format_bot_comment(result.report, manifest=manifest_label, root=root_label, rules=rules_label)
    url = await post_pr_comment(pr, body, token=token, settings=settings)
    return result, url


@app.command()
def bot(
    pr: Optional[str] = typer.Option(None, "--pr", help="PR URL (https://github.com/owner/repo/pull/123)."),
    event: Optional[str] = typer.Option(None, "--event", help="GitHub event type (pull_request, issue_comment)."),
    event_path: Optional[Path] = typer.Option(
        None,
        "--event-path",
        envvar="GITHUB_EVENT_PATH",
        help="Event payload JSON (defaults to GITHUB_EVENT_PATH).",
    ),
    manifest: Optional[Path] = typer.Option(None, "--manifest", "-m", help="Path to manifest JSON."),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Directory containing built HTML output."),
    source_root: Path = typer.Option(Path("."), "--source-root", help="Project root for source scanning."),
    app_dir: Optional[str] = typer.Option(None, "--app-dir", help="App directory relative to --source-root."),
    rules: Optional[str] = typer.Option(None, "--rules", help="Rulesets to run (google,ai-citation)."),
    token: Optional[str] = typer.Option(None, "--token", help="GitHub token (defaults to GITHUB_TOKEN)."),
) -> None:
    """Post the reality-check summary as a PR review comment."""

    settings = AppSettings()
    try:
        resolved_token = token or settings.github_token
        if not resolved_token:
            raise BotError("bot.missing_token", "GITHUB_TOKEN is required", "Set GITHUB_TOKEN env var or pass --token.")

        if not pr and not event:
            print_banner(_console)
            _stderr("Usage:")
            _stderr("  schemasentry bot --pr https://github.com/owner/repo/pull/123")
            _stderr("  schemasentry bot --event pull_request")
            _stderr("  schemasentry bot --pr <url> --rules google,ai-citation")
            raise typer.Exit(code=0)

        pr_url = pr
        if pr_url is None:
            if event_path is None:
                raise BotError(
                    "bot.no_event_path",
                    "GITHUB_EVENT_PATH not found",
                    "Run inside GitHub Actions or pass --event-path.",
                )
            pr_url = resolve_pr_url_from_event(event or "", event_path)
            if pr_url is None:
                _stderr("Skipping - nothing to review for this event")
                raise typer.Exit(code=0)

        rules_label, rulesets = _resolve_rulesets(rules, None, settings)
        manifest_path = manifest or settings.manifest_path
        built_output_dir = root or settings.built_output_dir
        request = RealityCheckRequest(
            manifest=load_manifest(manifest_path),
            built_output_dir=built_output_dir.resolve(),
            source_root=source_root.resolve(),
            app_dir=app_dir or settings.app_dir,
            recommended=resolve_recommended(None, None, settings),
            rulesets=rulesets,
        )
        result, url = asyncio.run(
            _review_and_post(
                pr_url,
                request=request,
                token=resolved_token,
                settings=settings,
                manifest_label=str(manifest_path),
                root_label=str(built_output_dir),
                rules_label=rules_label or None,
            )
        )
    except SchemaSentryError as exc:
        _fail(exc)

    _console.print(f"[green]✅ Comment posted:[/green] {url}", highlight=False)
    _stderr(f"Score: {result.report.summary.score}/100")


def run() -> None:
    """Entry point para `[project.scripts]`."""

    app()


if __name__ == "__main__":
    run()
