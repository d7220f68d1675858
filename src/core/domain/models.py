"""Modelos del dominio (Pydantic v2).

Responsabilidad:
- Describir *qué* consume y produce el núcleo: manifest, datos recolectados,
  uso en el código fuente, issues y reportes.
- Los modelos son inmutables (`frozen`) y se serializan con alias camelCase
  (`ruleId`, `sourceHasComponent`, ...) para que el JSON del reporte sea estable.

Nota:
- Estos modelos no conocen el sistema de archivos ni el HTML; los adaptadores
  entregan los datos ya normalizados.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from core.domain.json_ld import Node


class DomainModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        use_enum_values=False,
    )

    def to_payload(self) -> dict[str, Any]:
        """Dict JSON-serializable con alias camelCase."""

        return self.model_dump(mode="json", by_alias=True)


class Severity(str, Enum):
    ERROR = "error"
    WARN = "warn"


class ValidationIssue(DomainModel):
    """Hallazgo de dominio. Nunca es una excepción: es un valor."""

    path: str = Field(
        ...,
        description="Ubicación del hallazgo (p.ej. 'nodes[0].image' o 'routes[\"/\"]').",
    )
    message: str = Field(..., min_length=1, description="Mensaje legible.")
    severity: Severity = Field(..., description="error | warn.")
    rule_id: str = Field(
        ...,
        min_length=1,
        description="Identificador estable '<namespace>.<tipo-o-categoría>.<check>'.",
    )

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


class ValidationResult(DomainModel):
    ok: bool
    score: int = Field(..., ge=0, le=100)
    issues: list[ValidationIssue] = Field(default_factory=list)


class Manifest(DomainModel):
    """Declaración del autor: tipos esperados por ruta."""

    routes: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Ruta (p.ej. '/blog/[slug]') -> lista ordenada de tipos esperados.",
    )


class SchemaDataFile(DomainModel):
    """Datos recolectados del build: nodos JSON-LD por ruta."""

    routes: dict[str, list[Node]] = Field(
        default_factory=dict,
        description="Ruta -> nodos encontrados (ya parseados).",
    )


class RouteSourceInfo(DomainModel):
    """Resultado del escaneo de un archivo de página."""

    route: str = Field(..., description="Ruta derivada del archivo fuente.")
    file_path: str = Field(default="", description="Archivo analizado.")
    has_import: bool = Field(
        default=False,
        description="El archivo importa la primitiva de render de structured data.",
    )
    has_usage: bool = Field(
        default=False,
        description="La primitiva se invoca realmente (p.ej. '<Schema ...>').",
    )
    imported_builders: list[str] = Field(default_factory=list)

    @property
    def has_component(self) -> bool:
        return self.has_import and self.has_usage


class SourceScanResult(DomainModel):
    routes: list[RouteSourceInfo] = Field(default_factory=list)
    total_files: int = 0
    files_with_schema: int = 0
    files_missing_schema: int = 0


class CoverageSummary(DomainModel):
    missing_routes: int = 0
    missing_types: int = 0
    unlisted_routes: int = 0


class CoverageResult(DomainModel):
    all_routes: list[str] = Field(default_factory=list)
    issues_by_route: dict[str, list[ValidationIssue]] = Field(default_factory=dict)
    summary: CoverageSummary = Field(default_factory=CoverageSummary)


class RulesetSummary(DomainModel):
    errors: int = 0
    warnings: int = 0


class RulesetResult(DomainModel):
    ok: bool = True
    issues: list[ValidationIssue] = Field(default_factory=list)
    summary: RulesetSummary = Field(default_factory=RulesetSummary)


class RealityStatus(str, Enum):
    VALID = "valid"
    MISSING_IN_HTML = "missing_in_html"
    MISSING_IN_SOURCE = "missing_in_source"
    MISSING_FROM_MANIFEST = "missing_from_manifest"
    TYPE_MISMATCH = "type_mismatch"


class RouteRealityReport(DomainModel):
    route: str
    status: RealityStatus
    source_has_component: bool = False
    html_has_schema: bool = False
    expected_types: list[str] = Field(default_factory=list)
    found_types: list[str] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)
    score: int = Field(default=100, ge=0, le=100)


class RealitySummary(DomainModel):
    routes: int = 0
    errors: int = 0
    warnings: int = 0
    score: int = 100
    valid_routes: int = 0
    missing_in_html: int = 0
    missing_in_source: int = 0
    missing_from_manifest: int = 0
    type_mismatches: int = 0


class RealityCheckReport(DomainModel):
    """Agregado del reality check: ordenado por ruta para diffs deterministas."""

    ok: bool = True
    summary: RealitySummary = Field(default_factory=RealitySummary)
    routes: list[RouteRealityReport] = Field(default_factory=list)


class RouteReport(DomainModel):
    route: str
    ok: bool
    score: int = Field(..., ge=0, le=100)
    issues: list[ValidationIssue] = Field(default_factory=list)
    expected_types: list[str] = Field(default_factory=list)
    found_types: list[str] = Field(default_factory=list)


class AuditSummary(DomainModel):
    routes: int = 0
    errors: int = 0
    warnings: int = 0
    score: int = 100
    coverage: CoverageSummary | None = None


class AuditReport(DomainModel):
    ok: bool = True
    summary: AuditSummary = Field(default_factory=AuditSummary)
    routes: list[RouteReport] = Field(default_factory=list)


class RouteDriftDetail(DomainModel):
    route: str
    before_blocks: int = 0
    after_blocks: int = 0
    added_types: list[str] = Field(default_factory=list)
    removed_types: list[str] = Field(default_factory=list)


class SchemaDataDrift(DomainModel):
    has_changes: bool = False
    added_routes: list[str] = Field(default_factory=list)
    removed_routes: list[str] = Field(default_factory=list)
    changed_routes: list[str] = Field(default_factory=list)
    changed_route_details: list[RouteDriftDetail] = Field(default_factory=list)


ManifestLike = Union[Manifest, Mapping[str, Sequence[str]]]
CollectedLike = Union[SchemaDataFile, Mapping[str, Sequence[Node]]]


def manifest_routes(manifest: ManifestLike | None) -> Mapping[str, Sequence[str]]:
    """Acepta un `Manifest` o el mapping `ruta -> tipos` directamente."""

    if manifest is None:
        return {}
    if isinstance(manifest, Manifest):
        return manifest.routes
    return manifest


def collected_routes(collected: CollectedLike | None) -> Mapping[str, Sequence[Node]]:
    """Acepta un `SchemaDataFile` o el mapping `ruta -> nodos` directamente."""

    if collected is None:
        return {}
    if isinstance(collected, SchemaDataFile):
        return collected.routes
    return collected


class AssertionCondition(str, Enum):
    EXISTS = "exists"
    NOT_EXISTS = "not_exists"
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    MATCHES = "matches"


class SchemaAssertion(DomainModel):
    """Aserción declarada en `schema-sentry.test.json`."""

    id: str = Field(..., min_length=1)
    description: str = ""
    schema_type: str | None = Field(
        default=None,
        description="Limita la aserción a nodos con este `@type`; `None` evalúa todos.",
    )
    field: str = Field(..., min_length=1, description="Campo o ruta con puntos (`author.name`).")
    condition: AssertionCondition
    value: str | None = Field(default=None, description="Valor esperado; patrón para `matches`.")


class AssertionConfig(DomainModel):
    assertions: list[SchemaAssertion] = Field(default_factory=list)


class AssertionResult(DomainModel):
    assertion_id: str
    passed: bool
    routes: list[str] = Field(default_factory=list)
    message: str


class AssertionSummary(DomainModel):
    total: int = 0
    passed: int = 0
    failed: int = 0


class AssertionReport(DomainModel):
    ok: bool = True
    summary: AssertionSummary = Field(default_factory=AssertionSummary)
    results: list[AssertionResult] = Field(default_factory=list)


class CollectWarning(DomainModel):
    file: str
    message: str


class CollectStats(DomainModel):
    html_files: int = 0
    routes: int = 0
    blocks: int = 0
    invalid_blocks: int = 0


class CollectResult(DomainModel):
    """Salida del recolector de HTML construido."""

    data: SchemaDataFile = Field(default_factory=SchemaDataFile)
    stats: CollectStats = Field(default_factory=CollectStats)
    warnings: list[CollectWarning] = Field(default_factory=list)
    requested_routes: list[str] = Field(default_factory=list)
    missing_routes: list[str] = Field(default_factory=list)
