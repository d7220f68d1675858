from __future__ import annotations

import json

import pytest

from core.config import (
    AppSettings,
    ProjectConfig,
    load_project_config,
    resolve_recommended,
    resolve_rulesets,
)
from core.errors import ConfigError


def test_missing_default_config_is_none(tmp_path):
    assert load_project_config(cwd=tmp_path) is None


def test_loads_default_config_file(tmp_path):
    (tmp_path / "schema-sentry.config.json").write_text(
        json.dumps({"recommended": False, "rules": "google"}), encoding="utf-8"
    )
    config = load_project_config(cwd=tmp_path)
    assert config == ProjectConfig(recommended=False, rules="google")


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(ConfigError) as excinfo:
        load_project_config("nope.json", cwd=tmp_path)
    assert excinfo.value.code == "config.not_found"


@pytest.mark.parametrize(
    ("content", "code"),
    [
        ("{not json", "config.invalid_json"),
        ("[]", "config.invalid_shape"),
        ('{"recommended": "yes"}', "config.invalid_shape"),
        ('{"rules": 3}', "config.invalid_shape"),
    ],
)
def test_invalid_config_files(tmp_path, content, code):
    path = tmp_path / "custom.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_project_config(path)
    assert excinfo.value.code == code
    assert excinfo.value.to_payload()["code"] == code


def test_recommended_precedence():
    config = ProjectConfig(recommended=False)
    assert resolve_recommended(True, config) is True
    assert resolve_recommended(None, config) is False
    assert resolve_recommended(None, None) is True
    assert resolve_recommended(None, ProjectConfig(), AppSettings(recommended=False)) is False


def test_rulesets_precedence():
    config = ProjectConfig(rules="ai-citation")
    assert resolve_rulesets("google", config) == "google"
    assert resolve_rulesets(None, config) == "ai-citation"
    assert resolve_rulesets(None, None, AppSettings(rulesets="google")) == "google"
    assert resolve_rulesets(None, None) == ""


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SCHEMA_SENTRY_APP_DIR", "src/app")
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_test")
    settings = AppSettings()
    assert settings.app_dir == "src/app"
    assert settings.github_token == "ghp_test"
    assert settings.github_api_url == "https://api.github.com"
