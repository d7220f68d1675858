from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from core.domain.models import RouteSourceInfo  # noqa: E402

CONTEXT = "https://schema.org"


def make_node(type_name: str, **fields) -> dict:
    node = {"@context": CONTEXT, "@type": type_name}
    node.update(fields)
    return node


def source(route: str, *, has_import: bool = True, has_usage: bool = True) -> RouteSourceInfo:
    return RouteSourceInfo(
        route=route,
        file_path=f"app{route}/page.tsx",
        has_import=has_import,
        has_usage=has_usage,
    )


@pytest.fixture
def article_node() -> dict:
    return make_node(
        "Article",
        headline="Test Article",
        author={"@type": "Person", "name": "Jane"},
        datePublished="2024-01-01",
        url="https://example.com/blog",
        image="https://example.com/cover.png",
        description="An article",
    )


@pytest.fixture
def organization_node() -> dict:
    return make_node(
        "Organization",
        name="Acme",
        url="https://example.com",
        logo="https://example.com/logo.png",
        sameAs=["https://x.com/acme"],
        description="We make things",
    )


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Settings never read the developer's environment or `.env`."""

    for key in ("GITHUB_TOKEN", "GITHUB_EVENT_PATH"):
        monkeypatch.delenv(key, raising=False)
    for key in list(os.environ):
        if key.startswith("SCHEMA_SENTRY_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
