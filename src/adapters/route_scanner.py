"""Descubrimiento de rutas desde el filesystem (Next.js `app/` y `pages/`).

Reglas:
- `app/`: cada `page.(js|jsx|ts|tsx|mdx)` es una ruta; los segmentos de grupo
  `(x)` y paralelos `@x` no forman parte de la URL.
- `pages/`: cada archivo de página es una ruta; se ignoran `api/` y los
  archivos con prefijo `_`; `index` colapsa en el directorio.
"""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath

_APP_PAGE = re.compile(r"^page\.(?:[tj]sx?|mdx)$")
_PAGES_FILE = re.compile(r"\.(?:[tj]sx?|mdx)$")


def _is_group_segment(segment: str) -> bool:
    return segment.startswith("(") and segment.endswith(")")


def _is_parallel_segment(segment: str) -> bool:
    return segment.startswith("@")


def _join_route(segments: list[str]) -> str:
    return "/" + "/".join(segments) if segments else "/"


def app_route_for(relative: PurePosixPath) -> str:
    """`(marketing)/blog/[slug]/page.tsx` -> `/blog/[slug]`."""

    segments = [
        segment
        for segment in relative.parts[:-1]
        if segment and not _is_group_segment(segment) and not _is_parallel_segment(segment)
    ]
    return _join_route(segments)


def pages_route_for(relative: PurePosixPath) -> str | None:
    """`blog/index.tsx` -> `/blog`; `api/*` y `_app.tsx` -> `None`."""

    parts = list(relative.parts)
    if not parts or parts[0] == "api":
        return None
    stem = PurePosixPath(parts.pop()).stem
    if stem.startswith("_"):
        return None
    segments = [segment for segment in parts if segment]
    if stem != "index":
        segments.append(stem)
    return _join_route(segments)


def _walk(root: Path) -> list[Path]:
    return sorted(path for path in root.rglob("*") if path.is_file())


def scan_routes(root_dir: Path, *, include_app: bool = True, include_pages: bool = True) -> list[str]:
    routes: set[str] = set()

    app_dir = root_dir / "app"
    if include_app and app_dir.is_dir():
        for file in _walk(app_dir):
            if _APP_PAGE.match(file.name):
                routes.add(app_route_for(PurePosixPath(file.relative_to(app_dir).as_posix())))

    pages_dir = root_dir / "pages"
    if include_pages and pages_dir.is_dir():
        for file in _walk(pages_dir):
            if not _PAGES_FILE.search(file.name):
                continue
            route = pages_route_for(PurePosixPath(file.relative_to(pages_dir).as_posix()))
            if route is not None:
                routes.add(route)

    return sorted(routes)
