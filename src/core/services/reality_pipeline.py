"""Reality-check orchestration utilities.

The CLI and the PR bot both need the same flow: scan page sources and collect
built JSON-LD concurrently, run the pure reality check over the two snapshots,
then layer ruleset issues on top. Keeping it here keeps side-effects
(printing, progress) out of the engines and lets tests swap in fake scanners.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from adapters.html_collector import HtmlSchemaCollector
from adapters.source_scanner import FileSystemSourceScanner
from core.domain.models import CollectResult, Manifest, RealityCheckReport, SourceScanResult
from core.interfaces.scanner import SchemaCollector, SourceScanner
from core.rules import RulesetName
from core.services.reality_check import attach_ruleset_issues, find_ghost_routes, perform_reality_check


@dataclass
class RealityCheckRequest:
    """Parameters that control a reality-check run."""

    manifest: Manifest
    built_output_dir: Path
    source_root: Path = Path(".")
    app_dir: str = "app"
    recommended: bool = True
    rulesets: Sequence[RulesetName] = ()


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (status lines, warnings)."""

    warning: Callable[[str], None] | None = None
    stage: Callable[[str], None] | None = None


@dataclass
class PipelineResult:
    """Output of a pipeline invocation."""

    report: RealityCheckReport
    source_scan: SourceScanResult
    collected: CollectResult
    ghost_routes: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    duration_ms: float = 0.0


async def run_reality_check(
    request: RealityCheckRequest,
    *,
    scanner: SourceScanner | None = None,
    collector: SchemaCollector | None = None,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    hooks = hooks or PipelineHooks()
    scanner = scanner or FileSystemSourceScanner(request.app_dir)
    collector = collector or HtmlSchemaCollector()
    started = time.perf_counter()

    if hooks.stage:
        hooks.stage("Scanning sources and built output")
    source_scan, collected = await asyncio.gather(
        scanner.scan(request.source_root),
        collector.collect(request.built_output_dir),
    )

    warnings = [f"{warning.file}: {warning.message}" for warning in collected.warnings]
    if hooks.warning:
        for message in warnings:
            hooks.warning(message)

    if hooks.stage:
        hooks.stage("Reconciling manifest, source and HTML")
    report = perform_reality_check(
        request.manifest,
        source_scan,
        collected.data,
        recommended=request.recommended,
    )
    if request.rulesets:
        report = attach_ruleset_issues(report, collected.data, request.rulesets)

    return PipelineResult(
        report=report,
        source_scan=source_scan,
        collected=collected,
        ghost_routes=find_ghost_routes(request.manifest, source_scan),
        warnings=warnings,
        duration_ms=(time.perf_counter() - started) * 1000,
    )
