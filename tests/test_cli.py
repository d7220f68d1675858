from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import make_node
from loguru import logger
from typer.testing import CliRunner

from cli.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _detach_log_sinks():
    yield
    logger.remove()


PAGE = """
import { Schema, Organization } from "@schemasentry/next";

export default function Page() {
  return <Schema data={[org]} />;
}
"""


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _html(*nodes: dict) -> str:
    scripts = "".join(f'<script type="application/ld+json">{json.dumps(node)}</script>' for node in nodes)
    return f"<html><head>{scripts}</head><body></body></html>"


@pytest.fixture
def project(tmp_path, organization_node):
    _write(tmp_path / "app/page.tsx", PAGE)
    _write(tmp_path / "out/index.html", _html(organization_node))
    _write(tmp_path / "manifest.json", json.dumps({"routes": {"/": ["Organization"]}}))
    return tmp_path


def _validate_args(project: Path, *extra: str) -> list[str]:
    return [
        "validate",
        "--manifest",
        str(project / "manifest.json"),
        "--root",
        str(project / "out"),
        "--source-root",
        str(project),
        *extra,
    ]


def test_validate_passes_and_writes_report(project):
    report_path = project / "reports/validate.json"
    result = runner.invoke(app, _validate_args(project, "--output", str(report_path)))

    assert result.exit_code == 0
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["ok"] is True
    assert payload["routes"][0]["route"] == "/"
    assert payload["routes"][0]["status"] == "valid"
    assert "Scanning sources and built output" in result.output


def test_validate_html_report(project):
    report_path = project / "report.html"
    result = runner.invoke(app, _validate_args(project, "--format", "html", "--output", str(report_path)))

    assert result.exit_code == 0
    assert report_path.read_text(encoding="utf-8").startswith("<!doctype html>")


def test_validate_fails_on_ghost_route(project):
    _write(project / "manifest.json", json.dumps({"routes": {"/": ["Organization"], "/faq": ["FAQPage"]}}))
    report_path = project / "report.json"

    result = runner.invoke(app, _validate_args(project, "--output", str(report_path), "--annotations", "github"))

    assert result.exit_code == 1
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    statuses = {route["route"]: route["status"] for route in payload["routes"]}
    assert statuses == {"/": "valid", "/faq": "missing_in_source"}
    assert "::error title=Schema Sentry validate::[/faq]" in result.output


def test_validate_applies_rulesets(project):
    article = make_node(
        "Article", headline="A long enough headline", author="Jane", datePublished="2024-01-01", url="u"
    )
    _write(project / "out/index.html", _html(article))
    _write(project / "manifest.json", json.dumps({"routes": {"/": ["Article"]}}))
    report_path = project / "report.json"

    result = runner.invoke(
        app, _validate_args(project, "--rules", "google", "--no-recommended", "--output", str(report_path))
    )

    assert result.exit_code == 1
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    rule_ids = [issue["ruleId"] for issue in payload["routes"][0]["issues"]]
    assert "google.article.image" in rule_ids


def test_validate_missing_manifest(project):
    result = runner.invoke(app, _validate_args(project)[:1] + ["--manifest", str(project / "nope.json")])

    assert result.exit_code == 1
    assert "manifest.not_found" in result.output


def test_validate_without_build_output(project):
    args = _validate_args(project)
    args[args.index("--root") + 1] = str(project / "missing-out")

    result = runner.invoke(app, args)

    assert result.exit_code == 1
    assert "validate.no_build_output" in result.output


def test_validate_unknown_ruleset(project):
    result = runner.invoke(app, _validate_args(project, "--rules", "bing"))

    assert result.exit_code == 1
    assert "rules.unknown" in result.output


def test_collect_then_check_for_drift(project):
    data_path = project / "schema-sentry.data.json"

    collected = runner.invoke(app, ["collect", "--root", str(project / "out"), "--output", str(data_path)])
    assert collected.exit_code == 0
    assert list(json.loads(data_path.read_text(encoding="utf-8"))["routes"]) == ["/"]

    clean = runner.invoke(app, ["collect", "--root", str(project / "out"), "--check", "--data", str(data_path)])
    assert clean.exit_code == 0
    assert "No schema data drift detected." in clean.output

    _write(project / "out/blog/index.html", _html(make_node("WebPage", name="Blog", url="u")))
    drifted = runner.invoke(app, ["collect", "--root", str(project / "out"), "--check", "--data", str(data_path)])
    assert drifted.exit_code == 1
    assert "Added routes: /blog" in drifted.output


def test_collect_without_html(tmp_path):
    (tmp_path / "empty").mkdir()
    result = runner.invoke(app, ["collect", "--root", str(tmp_path / "empty")])

    assert result.exit_code == 1
    assert "collect.no_html" in result.output


def test_collect_strict_routes(project):
    result = runner.invoke(
        app, ["collect", "--root", str(project / "out"), "--routes", "/,/pricing", "--strict-routes"]
    )

    assert result.exit_code == 1
    assert "collect.missing_required_routes" in result.output


def test_lint_reports_ruleset_issues(tmp_path):
    data_path = _write(
        tmp_path / "data.json",
        json.dumps({"routes": {"/": [make_node("Organization", name="Acme")]}}),
    )
    report_path = tmp_path / "lint.json"

    result = runner.invoke(app, ["lint", "--data", str(data_path), "--rules", "google", "--output", str(report_path)])

    payload = json.loads(report_path.read_text(encoding="utf-8"))
    rule_ids = [issue["ruleId"] for issue in payload["routes"][0]["issues"]]
    assert "google.organization.logo" in rule_ids
    assert result.exit_code == (0 if payload["ok"] else 1)


def test_lint_missing_data_file(tmp_path):
    result = runner.invoke(app, ["lint", "--data", str(tmp_path / "nope.json")])

    assert result.exit_code == 1
    assert "data.not_found" in result.output


def test_audit_flags_ghost_routes(project, organization_node):
    data_path = _write(project / "data.json", json.dumps({"routes": {"/": [organization_node]}}))
    _write(project / "manifest.json", json.dumps({"routes": {"/": ["Organization"], "/faq": ["FAQPage"]}}))
    report_path = project / "audit.json"

    result = runner.invoke(
        app,
        [
            "audit",
            "--data",
            str(data_path),
            "--manifest",
            str(project / "manifest.json"),
            "--root",
            str(project),
            "--output",
            str(report_path),
        ],
    )

    assert result.exit_code == 1
    assert "Ghost Routes (1)" in result.output
    payload = json.loads(report_path.read_text(encoding="utf-8"))
    assert payload["summary"]["coverage"]["missingRoutes"] == 1


def test_audit_without_manifest_or_data(tmp_path):
    result = runner.invoke(app, ["audit", "--root", str(tmp_path), "--no-source-scan", "--output", "audit.json"])

    assert result.exit_code == 0
    payload = json.loads((tmp_path / "audit.json").read_text(encoding="utf-8"))
    assert payload["ok"] is True
    assert payload["summary"]["score"] == 100


def test_bot_requires_token():
    result = runner.invoke(app, ["bot", "--pr", "https://github.com/acme/site/pull/1"])

    assert result.exit_code == 1
    assert "bot.missing_token" in result.output


def test_bot_without_target_prints_usage():
    result = runner.invoke(app, ["bot", "--token", "t"])

    assert result.exit_code == 0
    assert "schemasentry bot --pr" in result.output


def test_bot_event_without_payload_path():
    result = runner.invoke(app, ["bot", "--token", "t", "--event", "pull_request"])

    assert result.exit_code == 1
    assert "bot.no_event_path" in result.output


def test_doctor_offline(tmp_path):
    (tmp_path / "schema-sentry.config.json").write_text('{"rules": "google"}', encoding="utf-8")

    result = runner.invoke(app, ["doctor", "run", "--offline"])

    assert result.exit_code == 0
    assert "Schema Sentry Doctor" in result.output
    assert "SKIPPED" in result.output


def _json_from_output(output: str) -> dict:
    start = output.index("{\n")
    end = output.index("\n}\n", start) + 2
    return json.loads(output[start:end])


@pytest.fixture
def assertions_file(project):
    return _write(
        project / "schema-sentry.test.json",
        json.dumps(
            {
                "assertions": [
                    {"id": "org-name", "schemaType": "Organization", "field": "name", "condition": "exists"},
                    {"id": "org-url", "field": "url", "condition": "matches", "value": "^https://"},
                ]
            }
        ),
    )


def test_test_command_passes_from_built_output(project, assertions_file):
    result = runner.invoke(app, ["test", "--config", str(assertions_file), "--root", str(project / "out")])

    assert result.exit_code == 0
    assert "Schema Assertions" in result.output
    assert "All 2 assertion(s) passed" in result.output


def test_test_command_fails_and_prints_json(project, assertions_file):
    data_path = _write(
        project / "data.json",
        json.dumps({"routes": {"/": [make_node("Organization", url="http://insecure")]}}),
    )

    result = runner.invoke(
        app, ["test", "--config", str(assertions_file), "--data", str(data_path), "--format", "json"]
    )

    assert result.exit_code == 1
    payload = _json_from_output(result.output)
    assert payload["ok"] is False
    assert payload["summary"] == {"failed": 2, "passed": 0, "total": 2}
    assert payload["results"][0]["routes"] == ["/"]
    assert payload["results"][1]["message"] == "Failed on 1 route(s): /"


def test_test_command_missing_config(project):
    result = runner.invoke(app, ["test", "--root", str(project / "out")])

    assert result.exit_code == 1
    assert "assertions.not_found" in result.output


def test_test_command_without_build_output(project, assertions_file):
    result = runner.invoke(app, ["test", "--config", str(assertions_file), "--root", str(project / "missing")])

    assert result.exit_code == 1
    assert "test.no_build_output" in result.output
