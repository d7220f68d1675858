"""Recolección de JSON-LD desde el HTML construido.

Responsabilidad:
- Recorrer `*.html` (orden estable) y mapear cada archivo a su ruta.
- Extraer `<script type="application/ld+json">` con BeautifulSoup, aplanar
  arrays y `@graph`, y contar bloques inválidos como warnings.
- Aplicar un allow-list opcional de rutas y reportar las pedidas que faltan.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Iterable, Sequence

from bs4 import BeautifulSoup
from loguru import logger

from core.domain.json_ld import Node
from core.domain.models import CollectResult, CollectStats, CollectWarning, SchemaDataFile

IGNORED_DIRS = frozenset({".git", "node_modules", ".pnpm-store"})
JSON_LD_MIME = "application/ld+json"


def normalize_route_filter(entries: Iterable[str]) -> list[str]:
    """`["/a, /b", "/a"]` -> `["/a", "/b"]` (split por coma, sin vacíos, ordenado)."""

    routes = {part.strip() for entry in entries for part in entry.split(",")}
    routes.discard("")
    return sorted(routes)


def walk_html_files(root_dir: Path) -> list[Path]:
    if not root_dir.is_dir():
        return []
    files: list[Path] = []
    for entry in root_dir.iterdir():
        if entry.is_dir():
            if entry.name not in IGNORED_DIRS:
                files.extend(walk_html_files(entry))
        elif entry.is_file() and entry.name.endswith(".html"):
            files.append(entry)
    return files


def file_path_to_route(root_dir: Path, file_path: Path) -> str | None:
    relative = file_path.relative_to(root_dir).as_posix()
    if relative == "index.html":
        return "/"
    if relative.endswith("/index.html"):
        return "/" + relative[: -len("/index.html")]
    if relative.endswith(".html"):
        return "/" + relative[: -len(".html")]
    return None


def normalize_block(value: Any) -> list[Node]:
    """Un bloque JSON-LD puede ser un objeto, un array o un `@graph`."""

    if isinstance(value, list):
        return [item for item in value if isinstance(item, dict)]
    if not isinstance(value, dict):
        return []
    graph = value.get("@graph")
    if isinstance(graph, list):
        return [item for item in graph if isinstance(item, dict)]
    return [value]


def extract_schema_nodes(html: str, file_label: str) -> tuple[list[Node], list[CollectWarning]]:
    soup = BeautifulSoup(html, "html.parser")
    nodes: list[Node] = []
    warnings: list[CollectWarning] = []

    for index, script in enumerate(soup.find_all("script"), start=1):
        script_type = str(script.get("type") or "").strip().lower()
        if script_type != JSON_LD_MIME:
            continue
        body = script.get_text().strip()
        if not body:
            continue
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            logger.warning("JSON-LD inválido en {} (script #{})", file_label, index)
            warnings.append(CollectWarning(file=file_label, message=f"Invalid JSON-LD block at script #{index}"))
            continue
        nodes.extend(normalize_block(parsed))

    return nodes, warnings


def collect_schema_data(root_dir: Path, routes: Sequence[str] | None = None) -> CollectResult:
    root = root_dir.resolve()
    requested = normalize_route_filter(routes or [])
    html_files = sorted(walk_html_files(root), key=lambda path: path.as_posix())

    collected: dict[str, list[Node]] = {}
    warnings: list[CollectWarning] = []
    for file in html_files:
        route = file_path_to_route(root, file)
        if route is None:
            continue
        nodes, file_warnings = extract_schema_nodes(file.read_text(encoding="utf-8", errors="replace"), str(file))
        if nodes:
            collected.setdefault(route, []).extend(nodes)
        warnings.extend(file_warnings)

    if requested:
        filtered = {route: collected[route] for route in requested if route in collected}
        missing = [route for route in requested if route not in collected]
    else:
        filtered = collected
        missing = []

    ordered = {route: filtered[route] for route in sorted(filtered)}
    logger.debug("Collect: {} HTML, {} rutas con JSON-LD", len(html_files), len(ordered))
    return CollectResult(
        data=SchemaDataFile(routes=ordered),
        stats=CollectStats(
            html_files=len(html_files),
            routes=len(ordered),
            blocks=sum(len(nodes) for nodes in ordered.values()),
            invalid_blocks=len(warnings),
        ),
        warnings=warnings,
        requested_routes=requested,
        missing_routes=missing,
    )


class HtmlSchemaCollector:
    """Implementación de `core.interfaces.scanner.SchemaCollector`."""

    async def collect(self, root_dir: Path, routes: Sequence[str] | None = None) -> CollectResult:
        return await asyncio.to_thread(collect_schema_data, root_dir, routes)
