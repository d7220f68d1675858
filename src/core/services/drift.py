"""Drift between two collected-data snapshots.

Route equality uses `stable_stringify`, so key order inside nodes never
counts as a change while node order does.
"""

from __future__ import annotations

from typing import Sequence

from core.domain.json_ld import Node, node_type, stable_stringify
from core.domain.models import (
    CollectedLike,
    RouteDriftDetail,
    SchemaDataDrift,
    collected_routes,
)

UNKNOWN_TYPE_LABEL = "(unknown)"


def schema_type_label(node: Node) -> str:
    return node_type(node) or UNKNOWN_TYPE_LABEL


def build_route_drift_detail(route: str, before: Sequence[Node], after: Sequence[Node]) -> RouteDriftDetail:
    before_types = {schema_type_label(node) for node in before}
    after_types = {schema_type_label(node) for node in after}
    return RouteDriftDetail(
        route=route,
        before_blocks=len(before),
        after_blocks=len(after),
        added_types=sorted(after_types - before_types),
        removed_types=sorted(before_types - after_types),
    )


def compare_schema_data(existing: CollectedLike | None, collected: CollectedLike | None) -> SchemaDataDrift:
    before = collected_routes(existing)
    after = collected_routes(collected)

    added = sorted(route for route in after if route not in before)
    removed = sorted(route for route in before if route not in after)
    changed = sorted(
        route
        for route in before
        if route in after and stable_stringify(list(before[route])) != stable_stringify(list(after[route]))
    )
    details = [build_route_drift_detail(route, before[route], after[route]) for route in changed]

    return SchemaDataDrift(
        has_changes=bool(added or removed or changed),
        added_routes=added,
        removed_routes=removed,
        changed_routes=changed,
        changed_route_details=details,
    )


def _route_preview(label: str, routes: Sequence[str], max_routes: int) -> str:
    preview = ", ".join(routes[:max_routes])
    suffix = f" (+{len(routes) - max_routes} more)" if len(routes) > max_routes else ""
    return f"{label}: {preview}{suffix}"


def _detail_line(detail: RouteDriftDetail) -> str:
    added = ",".join(detail.added_types) or "(none)"
    removed = ",".join(detail.removed_types) or "(none)"
    return (
        f"{detail.route} blocks {detail.before_blocks}->{detail.after_blocks} "
        f"| +types {added} | -types {removed}"
    )


def format_schema_data_drift(drift: SchemaDataDrift, max_routes: int = 5) -> str:
    if not drift.has_changes:
        return "No schema data drift detected."

    lines = [
        "Schema data drift detected: "
        f"added_routes={len(drift.added_routes)} "
        f"removed_routes={len(drift.removed_routes)} "
        f"changed_routes={len(drift.changed_routes)}"
    ]
    if drift.added_routes:
        lines.append(_route_preview("Added routes", drift.added_routes, max_routes))
    if drift.removed_routes:
        lines.append(_route_preview("Removed routes", drift.removed_routes, max_routes))
    if drift.changed_routes:
        lines.append(_route_preview("Changed routes", drift.changed_routes, max_routes))
        details = drift.changed_route_details[:max_routes]
        if details:
            lines.append("Changed route details:")
            lines.extend(f"- {_detail_line(detail)}" for detail in details)
    return "\n".join(lines)
