"""Contratos de los colaboradores de I/O.

Por qué Protocol:
- El núcleo recibe snapshots ya normalizados; cómo se obtienen (filesystem,
  HTML, fixtures de test) queda del lado de los adaptadores.
- `scan`/`collect` son asíncronos porque típicamente recorren árboles de
  archivos y el pipeline los ejecuta en paralelo.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from core.domain.models import CollectResult, SourceScanResult


@runtime_checkable
class SourceScanner(Protocol):
    """Descubre páginas y detecta uso del componente de structured data."""

    async def scan(self, root_dir: Path) -> SourceScanResult:
        ...


@runtime_checkable
class SchemaCollector(Protocol):
    """Extrae nodos JSON-LD del output construido, agrupados por ruta."""

    async def collect(
        self,
        root_dir: Path,
        routes: Sequence[str] | None = None,
    ) -> CollectResult:
        ...
