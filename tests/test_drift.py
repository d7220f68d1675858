from __future__ import annotations

from conftest import make_node

from core.domain.json_ld import stable_stringify
from core.services.drift import compare_schema_data, format_schema_data_drift


def test_key_order_is_not_drift():
    before = {"/": [{"name": "Acme", "@type": "Organization"}]}
    after = {"/": [{"@type": "Organization", "name": "Acme"}]}
    drift = compare_schema_data(before, after)
    assert not drift.has_changes
    assert format_schema_data_drift(drift) == "No schema data drift detected."


def test_added_removed_and_changed_routes():
    before = {
        "/": [make_node("Organization", name="Acme")],
        "/old": [make_node("WebPage")],
    }
    after = {
        "/": [make_node("Organization", name="Acme"), make_node("WebSite")],
        "/new": [make_node("Article")],
    }

    drift = compare_schema_data(before, after)

    assert drift.has_changes
    assert drift.added_routes == ["/new"]
    assert drift.removed_routes == ["/old"]
    assert drift.changed_routes == ["/"]
    detail = drift.changed_route_details[0]
    assert (detail.before_blocks, detail.after_blocks) == (1, 2)
    assert detail.added_types == ["WebSite"]
    assert detail.removed_types == []

    text = format_schema_data_drift(drift)
    assert text.splitlines() == [
        "Schema data drift detected: added_routes=1 removed_routes=1 changed_routes=1",
        "Added routes: /new",
        "Removed routes: /old",
        "Changed routes: /",
        "Changed route details:",
        "- / blocks 1->2 | +types WebSite | -types (none)",
    ]


def test_typeless_nodes_use_unknown_label():
    drift = compare_schema_data({"/": [{"name": "x"}]}, {"/": [make_node("Person")]})
    detail = drift.changed_route_details[0]
    assert detail.added_types == ["Person"]
    assert detail.removed_types == ["(unknown)"]


def test_route_preview_is_truncated():
    after = {f"/r{i}": [make_node("WebPage")] for i in range(7)}
    text = format_schema_data_drift(compare_schema_data({}, after), max_routes=5)
    assert "Added routes: /r0, /r1, /r2, /r3, /r4 (+2 more)" in text


def test_stable_stringify_sorts_keys_recursively():
    value = {"b": [{"z": 1, "a": 2}], "a": "ü"}
    assert stable_stringify(value) == '{"a":"ü","b":[{"a":2,"z":1}]}'
