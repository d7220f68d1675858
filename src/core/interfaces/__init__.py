"""Contratos (Protocol) entre el Core y los adaptadores.

- `rule.RuleCheck`: un check de ruleset sobre un nodo JSON-LD.
- `scanner.SourceScanner` / `scanner.SchemaCollector`: las dos fuentes de
  evidencia que alimentan el reality check (código fuente y HTML construido).
"""
