"""Contrato de una regla de ruleset.

Una regla recibe un nodo y el prefijo de ruta (`nodes[2]`) y devuelve cero o
más issues. Es total: nunca lanza para un nodo bien formado, aunque esté vacío.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.json_ld import Node
from core.domain.models import ValidationIssue


@runtime_checkable
class RuleCheck(Protocol):
    rule_id: str

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        """Evalúa el nodo; un campo imposible de evaluar se trata como ausente."""

        ...
