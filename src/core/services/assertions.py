"""Schema assertions over collected data (`schemasentry test`).

Each assertion picks nodes (all of them, or those whose `@type` equals
`schemaType`), resolves `field` as a dotted path and checks one condition.
A route fails an assertion when any selected node on it fails; the assertion
passes when no route fails, including when nothing was selected.

Non-string values are compared through their canonical JSON text, so
`true`, `4.5` and `{"a":1}` compare as they are written in the data file.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from loguru import logger

from core.domain.json_ld import Node, get_path, node_type, stable_stringify
from core.domain.models import (
    AssertionCondition,
    AssertionConfig,
    AssertionReport,
    AssertionResult,
    AssertionSummary,
    CollectedLike,
    SchemaAssertion,
    collected_routes,
)

MAX_LISTED_ROUTES = 3


def value_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return stable_stringify(value)


def _exists(value: Any, expected: str | None) -> bool:
    return value is not None and value != ""


def _not_exists(value: Any, expected: str | None) -> bool:
    return not _exists(value, expected)


def _equals(value: Any, expected: str | None) -> bool:
    return value is not None and expected is not None and value_text(value) == expected


def _not_equals(value: Any, expected: str | None) -> bool:
    return not _equals(value, expected)


def _contains(value: Any, expected: str | None) -> bool:
    return value is not None and (expected or "") in value_text(value)


def _matches(value: Any, expected: str | None) -> bool:
    if value is None or not expected:
        return False
    try:
        return re.search(expected, value_text(value)) is not None
    except re.error:
        logger.debug("Patrón inválido en aserción: {}", expected)
        return False


CONDITION_CHECKS: dict[AssertionCondition, Callable[[Any, str | None], bool]] = {
    AssertionCondition.EXISTS: _exists,
    AssertionCondition.NOT_EXISTS: _not_exists,
    AssertionCondition.EQUALS: _equals,
    AssertionCondition.NOT_EQUALS: _not_equals,
    AssertionCondition.CONTAINS: _contains,
    AssertionCondition.MATCHES: _matches,
}


def check_node(assertion: SchemaAssertion, node: Node) -> bool:
    value = get_path(node, assertion.field)
    return CONDITION_CHECKS[assertion.condition](value, assertion.value)


def _selected(assertion: SchemaAssertion, nodes: list[Node]) -> list[Node]:
    if assertion.schema_type is None:
        return nodes
    return [node for node in nodes if node_type(node) == assertion.schema_type]


def _message(assertion: SchemaAssertion, failed_routes: list[str]) -> str:
    if not failed_routes:
        return f"All {assertion.schema_type or 'schemas'} have {assertion.field}"
    listed = ", ".join(failed_routes[:MAX_LISTED_ROUTES])
    more = "..." if len(failed_routes) > MAX_LISTED_ROUTES else ""
    return f"Failed on {len(failed_routes)} route(s): {listed}{more}"


def evaluate_assertion(assertion: SchemaAssertion, collected: CollectedLike | None) -> AssertionResult:
    routes = collected_routes(collected)
    failed_routes = [
        route
        for route in sorted(routes)
        if not all(check_node(assertion, node) for node in _selected(assertion, list(routes[route])))
    ]
    return AssertionResult(
        assertion_id=assertion.id,
        passed=not failed_routes,
        routes=failed_routes,
        message=_message(assertion, failed_routes),
    )


def run_assertions(config: AssertionConfig, collected: CollectedLike | None) -> AssertionReport:
    """Evalúa todas las aserciones en orden de declaración."""

    results = [evaluate_assertion(assertion, collected) for assertion in config.assertions]
    passed = sum(1 for result in results if result.passed)
    logger.debug("Aserciones: {} de {} pasan", passed, len(results))
    return AssertionReport(
        ok=passed == len(results),
        summary=AssertionSummary(total=len(results), passed=passed, failed=len(results) - passed),
        results=results,
    )
