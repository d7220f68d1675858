from __future__ import annotations

import asyncio
import io
import json
from pathlib import Path, PurePosixPath

import pytest
from conftest import make_node, source

from adapters.annotations import (
    build_github_annotation_lines,
    emit_github_annotations,
    escape_command_property,
    escape_command_value,
)
from adapters.html_collector import (
    HtmlSchemaCollector,
    collect_schema_data,
    extract_schema_nodes,
    file_path_to_route,
    normalize_route_filter,
)
from adapters.json_exporter import export_json, render_json
from adapters.manifest_loader import load_assertion_config, load_manifest, load_schema_data, parse_schema_data
from adapters.report_exporter import export_report_html, reality_as_audit, render_report_html
from adapters.route_scanner import app_route_for, pages_route_for, scan_routes
from adapters.source_scanner import FileSystemSourceScanner, analyze_source, scan_source_files
from core.domain.models import AssertionCondition, Manifest, RealityStatus
from core.errors import InputError
from core.services.reality_check import perform_reality_check
from core.services.reality_pipeline import PipelineHooks, RealityCheckRequest, run_reality_check


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _page_with_schema(*nodes: dict) -> str:
    scripts = "".join(f'<script type="application/ld+json">{json.dumps(node)}</script>' for node in nodes)
    return f"<html><head>{scripts}</head><body></body></html>"


SCHEMA_PAGE = """
import { Schema, Organization, type Thing } from "@schemasentry/next";

export default function Page() {
  return <Schema data={[org]} />;
}
"""

ALIASED_PAGE = """
import { Schema as JsonLd, Article } from '@schemasentry/core';

export default function Page() {
  return <JsonLd data={article}/>;
}
"""

IMPORT_ONLY_PAGE = """
import { Schema } from "@schemasentry/next";

export default function Page() {
  return <main />;
}
"""


# manifest_loader


def test_load_manifest(tmp_path):
    path = _write(tmp_path / "manifest.json", json.dumps({"routes": {"/": ["Organization"]}}))
    assert load_manifest(path) == Manifest(routes={"/": ["Organization"]})


@pytest.mark.parametrize(
    ("content", "code"),
    [
        (None, "manifest.not_found"),
        ("{oops", "manifest.invalid_json"),
        ('{"routes": {"/": "Organization"}}', "manifest.invalid_shape"),
        ('{"routes": {"/": [1]}}', "manifest.invalid_shape"),
        ("[]", "manifest.invalid_shape"),
    ],
)
def test_manifest_errors(tmp_path, content, code):
    path = tmp_path / "manifest.json"
    if content is not None:
        _write(path, content)
    with pytest.raises(InputError) as excinfo:
        load_manifest(path)
    assert excinfo.value.code == code


def test_load_schema_data_drops_non_objects(tmp_path):
    path = _write(tmp_path / "data.json", json.dumps({"routes": {"/": [make_node("WebPage"), "junk", 3]}}))
    data = load_schema_data(path)
    assert data.routes == {"/": [make_node("WebPage")]}


def test_schema_data_shape_error():
    with pytest.raises(InputError) as excinfo:
        parse_schema_data({"routes": {"/": {"@type": "WebPage"}}})
    assert excinfo.value.code == "data.invalid_shape"


def test_load_assertion_config(tmp_path):
    path = _write(
        tmp_path / "schema-sentry.test.json",
        json.dumps(
            {
                "assertions": [
                    {"id": "has-headline", "schemaType": "Article", "field": "headline", "condition": "exists"},
                    {"id": "https", "field": "url", "condition": "matches", "value": "^https://"},
                ]
            }
        ),
    )

    config = load_assertion_config(path)

    assert [assertion.id for assertion in config.assertions] == ["has-headline", "https"]
    assert config.assertions[0].schema_type == "Article"
    assert config.assertions[1].condition is AssertionCondition.MATCHES


@pytest.mark.parametrize(
    ("content", "code"),
    [
        (None, "assertions.not_found"),
        ("{oops", "assertions.invalid_json"),
        ('{"assertions": {}}', "assertions.invalid_shape"),
        ('{"assertions": [{"id": "x", "field": "name", "condition": "is_cool"}]}', "assertions.invalid_shape"),
        ('{"assertions": [{"id": "x", "condition": "exists"}]}', "assertions.invalid_shape"),
    ],
)
def test_assertion_config_errors(tmp_path, content, code):
    path = tmp_path / "schema-sentry.test.json"
    if content is not None:
        _write(path, content)
    with pytest.raises(InputError) as excinfo:
        load_assertion_config(path)
    assert excinfo.value.code == code


# route_scanner


def test_app_and_pages_route_mapping():
    assert app_route_for(PurePosixPath("page.tsx")) == "/"
    assert app_route_for(PurePosixPath("(marketing)/blog/[slug]/page.tsx")) == "/blog/[slug]"
    assert app_route_for(PurePosixPath("@modal/login/page.tsx")) == "/login"
    assert pages_route_for(PurePosixPath("index.tsx")) == "/"
    assert pages_route_for(PurePosixPath("blog/index.tsx")) == "/blog"
    assert pages_route_for(PurePosixPath("blog/[slug].tsx")) == "/blog/[slug]"
    assert pages_route_for(PurePosixPath("_app.tsx")) is None
    assert pages_route_for(PurePosixPath("api/hello.ts")) is None


def test_scan_routes(tmp_path):
    _write(tmp_path / "app/page.tsx", "")
    _write(tmp_path / "app/(shop)/products/[id]/page.tsx", "")
    _write(tmp_path / "app/blog/layout.tsx", "")
    _write(tmp_path / "pages/faq.tsx", "")
    _write(tmp_path / "pages/_document.tsx", "")
    _write(tmp_path / "pages/api/ping.ts", "")
    assert scan_routes(tmp_path) == ["/", "/faq", "/products/[id]"]


# source_scanner


def test_analyze_source_detects_import_usage_and_builders():
    info = analyze_source("/", "app/page.tsx", SCHEMA_PAGE)
    assert info.has_import
    assert info.has_usage
    assert info.has_component
    assert info.imported_builders == ["Organization"]


def test_analyze_source_respects_aliases():
    info = analyze_source("/blog", "app/blog/page.tsx", ALIASED_PAGE)
    assert info.has_component
    assert info.imported_builders == ["Article"]


def test_import_without_usage():
    info = analyze_source("/faq", "app/faq/page.tsx", IMPORT_ONLY_PAGE)
    assert info.has_import
    assert not info.has_usage
    assert not info.has_component


def test_scan_source_files(tmp_path):
    _write(tmp_path / "app/page.tsx", SCHEMA_PAGE)
    _write(tmp_path / "app/(blog)/blog/page.jsx", ALIASED_PAGE)
    _write(tmp_path / "app/faq/page.tsx", IMPORT_ONLY_PAGE)
    _write(tmp_path / "app/node_modules/pkg/page.tsx", SCHEMA_PAGE)

    result = scan_source_files(tmp_path)

    assert sorted(info.route for info in result.routes) == ["/", "/blog", "/faq"]
    assert result.total_files == 3
    assert result.files_with_schema == 2
    assert result.files_missing_schema == 1


def test_file_system_scanner_is_async(tmp_path):
    _write(tmp_path / "src/app/page.tsx", SCHEMA_PAGE)
    result = asyncio.run(FileSystemSourceScanner("src/app").scan(tmp_path))
    assert [info.route for info in result.routes] == ["/"]


# html_collector


def test_file_path_to_route(tmp_path):
    assert file_path_to_route(tmp_path, tmp_path / "index.html") == "/"
    assert file_path_to_route(tmp_path, tmp_path / "blog/index.html") == "/blog"
    assert file_path_to_route(tmp_path, tmp_path / "about.html") == "/about"


def test_extract_schema_nodes_flattens_graph_and_arrays():
    html = (
        '<script type="application/ld+json">{"@graph": [{"@type": "WebSite"}, {"@type": "Organization"}]}</script>'
        '<script type="application/ld+json">[{"@type": "Person"}, 3]</script>'
        '<script type="text/javascript">var x = 1;</script>'
        '<script type="application/ld+json">{broken</script>'
    )
    nodes, warnings = extract_schema_nodes(html, "index.html")
    assert [node["@type"] for node in nodes] == ["WebSite", "Organization", "Person"]
    assert [warning.message for warning in warnings] == ["Invalid JSON-LD block at script #4"]


def test_normalize_route_filter():
    assert normalize_route_filter(["/b, /a", "/a", " "]) == ["/a", "/b"]


def test_collect_schema_data(tmp_path):
    _write(tmp_path / "index.html", _page_with_schema(make_node("Organization", name="Acme")))
    _write(tmp_path / "blog/index.html", _page_with_schema(make_node("Article"), make_node("BreadcrumbList")))
    _write(tmp_path / "about.html", "<html><body>no schema</body></html>")
    _write(tmp_path / "node_modules/x/index.html", _page_with_schema(make_node("Person")))

    result = collect_schema_data(tmp_path)

    assert list(result.data.routes) == ["/", "/blog"]
    assert result.stats.html_files == 3
    assert result.stats.routes == 2
    assert result.stats.blocks == 3
    assert result.stats.invalid_blocks == 0


def test_collect_with_route_filter(tmp_path):
    _write(tmp_path / "index.html", _page_with_schema(make_node("Organization")))
    _write(tmp_path / "faq.html", _page_with_schema(make_node("FAQPage")))

    result = asyncio.run(HtmlSchemaCollector().collect(tmp_path, ["/faq", "/missing"]))

    assert list(result.data.routes) == ["/faq"]
    assert result.requested_routes == ["/faq", "/missing"]
    assert result.missing_routes == ["/missing"]


# annotations


def test_escaping():
    assert escape_command_value("50%\r\nnext") == "50%25%0D%0Anext"
    assert escape_command_property("a:b,c") == "a%3Ab%2Cc"


def test_github_annotation_lines():
    report = perform_reality_check({"/blog": ["Article"]}, [], {"/x": [make_node("WebPage", name="n", url="u")]})
    lines = build_github_annotation_lines(report, "validate")
    assert lines == [
        "::error title=Schema Sentry validate::[/blog] reality.missing_source_component: "
        'Manifest expects schema but source file has no <Schema> component (routes["/blog"])',
        "::warning title=Schema Sentry validate::[/x] reality.unlisted_route: "
        'Route has schema in HTML but is not listed in manifest (routes["/x"])',
    ]
    stream = io.StringIO()
    assert emit_github_annotations(report, "validate", stream=stream) == lines
    assert stream.getvalue() == "\n".join(lines) + "\n"


# exporters


def test_render_json_is_stable():
    report = perform_reality_check({"/": ["Organization"]}, [source("/")], {})
    text = render_json(report)
    assert text.endswith("\n")
    payload = json.loads(text)
    assert payload["routes"][0]["status"] == "missing_in_html"
    assert payload["routes"][0]["issues"][0]["ruleId"] == "reality.missing_html_output"
    assert text == render_json(report)


def test_export_json_creates_parents(tmp_path):
    path = export_json(payload={"b": 1, "a": 2}, output_path=tmp_path / "out/report.json")
    assert path.read_text(encoding="utf-8") == '{\n  "a": 2,\n  "b": 1\n}\n'


def test_reality_as_audit_projection(organization_node):
    report = perform_reality_check(
        {"/": ["Organization"], "/blog": ["Article"]},
        [source("/")],
        {"/": [organization_node]},
    )
    audit = reality_as_audit(report)
    routes = {route.route: route for route in audit.routes}
    assert routes["/"].ok
    assert not routes["/blog"].ok
    assert audit.summary.coverage.missing_routes == 1


def test_html_report_is_escaped(tmp_path):
    report = perform_reality_check({}, [], {"/<script>": [make_node("WebPage", name="n", url="u")]})
    html = render_report_html(report, title="Report <b>")
    assert "&lt;script&gt;" in html
    assert "Report &lt;b&gt;" in html
    assert RealityStatus.MISSING_FROM_MANIFEST.value in html

    path = export_report_html(report=report, output_path=tmp_path / "r/report.html", title="R")
    assert path.read_text(encoding="utf-8").startswith("<!doctype html>")


# pipeline


def test_pipeline_runs_scanner_and_collector(tmp_path):
    _write(tmp_path / "app/page.tsx", SCHEMA_PAGE)
    _write(tmp_path / "app/faq/page.tsx", IMPORT_ONLY_PAGE)
    built = tmp_path / "out"
    _write(built / "index.html", _page_with_schema(make_node("Organization", name="Acme")))
    _write(built / "extra.html", '<script type="application/ld+json">{nope</script>')

    seen: list[str] = []
    request = RealityCheckRequest(
        manifest=Manifest(routes={"/": ["Organization"], "/faq": ["FAQPage"]}),
        built_output_dir=built,
        source_root=tmp_path,
        recommended=False,
    )
    stages: list[str] = []
    hooks = PipelineHooks(warning=seen.append, stage=stages.append)
    result = asyncio.run(run_reality_check(request, hooks=hooks))

    statuses = {route.route: route.status for route in result.report.routes}
    assert statuses == {"/": RealityStatus.VALID, "/faq": RealityStatus.MISSING_IN_SOURCE}
    assert result.ghost_routes == ["/faq"]
    assert len(seen) == 1
    assert "Invalid JSON-LD block" in seen[0]
    assert result.duration_ms >= 0
    assert stages == ["Scanning sources and built output", "Reconciling manifest, source and HTML"]
