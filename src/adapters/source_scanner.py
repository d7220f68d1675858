"""Escaneo del código fuente: ¿cada página usa el componente `<Schema>`?

Responsabilidad:
- Encontrar `page.(tsx|jsx|ts|js)` bajo el directorio de la app.
- Detectar el import de `@schemasentry/next|core`, el uso real del
  componente (respetando alias `Schema as X`) y los builders importados.

Nota:
- Es análisis textual (regex), no un parser de TS/JSX: suficiente para la
  convención de imports del paquete y rápido para cientos de páginas.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path, PurePosixPath
from typing import Iterable

from loguru import logger

from adapters.route_scanner import app_route_for
from core.domain.models import RouteSourceInfo, SourceScanResult
from core.domain.schema_types import TypeName

IGNORED_DIRS = frozenset({".git", "node_modules", ".pnpm-store", ".next", "dist", "build", "out"})
PAGE_FILENAMES = frozenset({"page.tsx", "page.jsx", "page.ts", "page.js"})

_SCHEMA_IMPORT = re.compile(r"""from\s+["']@schemasentry/(?:next|core)["']""")
_NAMED_IMPORT = re.compile(r"""import\s*\{([^}]+)\}\s*from\s*["']@schemasentry/(?:next|core)["']""")
_TYPE_PREFIX = re.compile(r"^type\s+")
_AS_SPLIT = re.compile(r"\s+as\s+")


def find_page_files(directory: Path) -> list[Path]:
    """Recorre `directory` (orden estable) saltando directorios de build/deps."""

    if not directory.is_dir():
        return []
    files: list[Path] = []
    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            if entry.name not in IGNORED_DIRS:
                files.extend(find_page_files(entry))
        elif entry.is_file() and entry.name in PAGE_FILENAMES:
            files.append(entry)
    return files


def _split_alias(specifier: str) -> tuple[str, str | None]:
    """`Schema as S` -> (`Schema`, `S`); `Article` -> (`Article`, None)."""

    parts = [part.strip() for part in _AS_SPLIT.split(specifier, maxsplit=1)]
    if len(parts) == 2 and parts[1]:
        return parts[0], parts[1]
    return parts[0], None


def has_component_usage(content: str, aliases: Iterable[str]) -> bool:
    """`<Schema ` o `<Schema>` (o el alias importado) aparece en el JSX."""

    names = sorted(set(aliases)) or ["Schema"]
    return any(re.search(rf"<{re.escape(name)}(?:\s|>)", content) for name in names)


def analyze_source(route: str, file_path: str, content: str) -> RouteSourceInfo:
    aliases: set[str] = set()
    builders: list[str] = []

    for match in _NAMED_IMPORT.finditer(content):
        for raw in match.group(1).split(","):
            specifier = _TYPE_PREFIX.sub("", raw.strip()).strip()
            if not specifier:
                continue
            base, alias = _split_alias(specifier)
            if base == "Schema":
                aliases.add(alias or "Schema")
            if TypeName.parse(base) is not None:
                builders.append(base)

    return RouteSourceInfo(
        route=route,
        file_path=file_path,
        has_import=bool(_SCHEMA_IMPORT.search(content)),
        has_usage=has_component_usage(content, aliases),
        imported_builders=builders,
    )


def scan_source_files(root_dir: Path, app_dir: str = "app") -> SourceScanResult:
    base = (root_dir / app_dir).resolve()
    infos: list[RouteSourceInfo] = []

    for file in find_page_files(base):
        route = app_route_for(PurePosixPath(file.relative_to(base).as_posix()))
        content = file.read_text(encoding="utf-8", errors="replace")
        infos.append(analyze_source(route, str(file), content))

    with_schema = sum(1 for info in infos if info.has_component)
    logger.debug("Source scan: {} páginas, {} con <Schema>", len(infos), with_schema)
    return SourceScanResult(
        routes=infos,
        total_files=len(infos),
        files_with_schema=with_schema,
        files_missing_schema=len(infos) - with_schema,
    )


class FileSystemSourceScanner:
    """Implementación de `core.interfaces.scanner.SourceScanner`."""

    def __init__(self, app_dir: str = "app") -> None:
        self.app_dir = app_dir

    async def scan(self, root_dir: Path) -> SourceScanResult:
        return await asyncio.to_thread(scan_source_files, root_dir, self.app_dir)
