from __future__ import annotations

from conftest import source

from core.domain.models import CoverageSummary, SourceScanResult
from core.services.formatting import (
    SummaryStats,
    format_duration,
    format_reality_report,
    format_source_scan_summary,
    format_summary_line,
)
from core.services.reality_check import perform_reality_check


def test_format_duration():
    assert format_duration(12.4) == "12ms"
    assert format_duration(999.4) == "999ms"
    assert format_duration(1500) == "1.5s"
    assert format_duration(12_000) == "12s"
    assert format_duration(-1) == "0ms"


def test_summary_line_with_coverage():
    line = format_summary_line(
        "audit",
        SummaryStats(
            routes=3,
            errors=1,
            warnings=2,
            score=88,
            duration_ms=5,
            coverage=CoverageSummary(missing_routes=1, missing_types=0, unlisted_routes=2),
        ),
    )
    assert line == (
        "audit | Routes: 3 | Errors: 1 | Warnings: 2 | Score: 88 | Duration: 5ms | "
        "Coverage: missing_routes=1 missing_types=0 unlisted_routes=2"
    )


def test_reality_report_text_lists_problem_routes():
    report = perform_reality_check({"/blog": ["Article"]}, [], {})
    text = format_reality_report(report)
    assert text.startswith("❌ Schema Reality Check")
    assert "❌ Missing in source: 1" in text
    assert "Problem routes:" in text
    assert "  /blog" in text


def test_source_scan_summary_explains_missing_schema():
    result = SourceScanResult(
        routes=[source("/"), source("/about", has_import=False, has_usage=False), source("/faq", has_usage=False)],
        total_files=3,
        files_with_schema=1,
        files_missing_schema=2,
    )
    text = format_source_scan_summary(result)
    assert "   ❌ /about (no @schemasentry import)" in text
    assert "   ❌ /faq (no <Schema> usage)" in text
    assert "   ❌ /\n" not in text
