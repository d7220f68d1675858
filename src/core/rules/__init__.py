"""Rulesets: opinionated checks layered on top of base validation.

Responsabilidad:
- Registrar los rulesets disponibles (`google`, `ai-citation`).
- Ejecutar las reglas por tipo de nodo y agregar conteos.

Nota:
- Los resultados de varios rulesets se concatenan sin deduplicar: el mismo
  campo puede ser relevante para Google y para citación por IA.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Sequence

from loguru import logger

from core.domain.json_ld import Node, node_type
from core.domain.models import RulesetResult, RulesetSummary, ValidationIssue
from core.domain.schema_types import TypeName
from core.interfaces.rule import RuleCheck
from core.rules.ai_citation import AI_CITATION_RULES
from core.rules.google import GOOGLE_RULES
from core.services.scoring import count_severities


class RulesetName(str, Enum):
    GOOGLE = "google"
    AI_CITATION = "ai-citation"

    def __str__(self) -> str:
        return self.value


RULESETS: MappingProxyType[RulesetName, MappingProxyType[TypeName, tuple[RuleCheck, ...]]] = MappingProxyType(
    {
        RulesetName.GOOGLE: GOOGLE_RULES,
        RulesetName.AI_CITATION: AI_CITATION_RULES,
    }
)


def _result(issues: list[ValidationIssue]) -> RulesetResult:
    errors, warnings = count_severities(issues)
    return RulesetResult(
        ok=errors == 0,
        issues=issues,
        summary=RulesetSummary(errors=errors, warnings=warnings),
    )


def run_ruleset(name: RulesetName | str, nodes: Sequence[Node]) -> RulesetResult:
    """Run one ruleset over `nodes`; an unknown name yields an empty, ok result."""

    try:
        ruleset = RULESETS[RulesetName(name)]
    except ValueError:
        logger.debug("Ruleset desconocido ignorado: {}", name)
        return _result([])

    issues: list[ValidationIssue] = []
    for index, node in enumerate(nodes):
        type_name = TypeName.parse(node_type(node))
        if type_name is None:
            continue
        prefix = f"nodes[{index}]"
        for rule in ruleset.get(type_name, ()):
            issues.extend(rule.check(node, prefix))
    return _result(issues)


def run_multiple_rulesets(names: Iterable[RulesetName | str], nodes: Sequence[Node]) -> RulesetResult:
    """Concatenate issues across rulesets in the given order and sum the counts."""

    issues: list[ValidationIssue] = []
    for name in names:
        issues.extend(run_ruleset(name, nodes).issues)
    return _result(issues)


def parse_ruleset_names(text: str | None) -> list[RulesetName]:
    """Parse `"google, AI-Citation,bogus"` into known names, keeping input order."""

    if not text:
        return []
    out: list[RulesetName] = []
    for part in text.split(","):
        candidate = part.strip().lower()
        try:
            out.append(RulesetName(candidate))
        except ValueError:
            continue
    return out


__all__ = [
    "AI_CITATION_RULES",
    "GOOGLE_RULES",
    "RULESETS",
    "RulesetName",
    "parse_ruleset_names",
    "run_multiple_rulesets",
    "run_ruleset",
]
