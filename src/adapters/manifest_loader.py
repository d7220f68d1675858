"""Carga del manifest, del archivo de datos recolectados y de las aserciones.

Por qué en adapters:
- El núcleo asume entradas bien tipadas; todo error de archivo o de forma se
  traduce aquí a `InputError` con un código estable para la CLI.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from core.domain.models import AssertionConfig, Manifest, SchemaDataFile
from core.errors import InputError

_INIT_HINT = "Create the file or point to it with --manifest / --data."


def _read_json(path: Path, *, kind: str, label: str, hint: str = _INIT_HINT) -> Any:
    if not path.is_file():
        raise InputError(f"{kind}.not_found", f"{label} not found at {path}", hint)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"{kind}.not_found", f"{label} not found at {path}", hint) from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(
            f"{kind}.invalid_json",
            f"{label} is not valid JSON",
            "Check the JSON syntax or regenerate the file.",
        ) from exc


def _routes_object(payload: Any) -> dict[str, Any] | None:
    if not isinstance(payload, dict):
        return None
    routes = payload.get("routes")
    if not isinstance(routes, dict):
        return None
    return routes


def parse_manifest(payload: Any) -> Manifest:
    routes = _routes_object(payload)
    valid = routes is not None and all(
        isinstance(entry, list) and all(isinstance(item, str) for item in entry) for entry in routes.values()
    )
    if not valid:
        raise InputError(
            "manifest.invalid_shape",
            "Manifest must contain a 'routes' object with string array values",
            "Ensure each route maps to an array of schema type names.",
        )
    return Manifest(routes=routes)


def parse_schema_data(payload: Any) -> SchemaDataFile:
    routes = _routes_object(payload)
    error = InputError(
        "data.invalid_shape",
        "Schema data must contain a 'routes' object with array values",
        "Ensure each route maps to an array of JSON-LD blocks.",
    )
    if routes is None or not all(isinstance(entry, list) for entry in routes.values()):
        raise error
    # Non-object entries carry no structured data.
    cleaned = {route: [node for node in nodes if isinstance(node, dict)] for route, nodes in routes.items()}
    try:
        return SchemaDataFile(routes=cleaned)
    except ValidationError as exc:
        raise error from exc


def load_manifest(path: Path) -> Manifest:
    manifest = parse_manifest(_read_json(path, kind="manifest", label="Manifest"))
    logger.debug("Manifest cargado: {} ({} rutas)", path, len(manifest.routes))
    return manifest


def load_schema_data(path: Path) -> SchemaDataFile:
    data = parse_schema_data(_read_json(path, kind="data", label="Schema data"))
    logger.debug("Datos cargados: {} ({} rutas)", path, len(data.routes))
    return data


_ASSERTIONS_HINT = (
    'Create schema-sentry.test.json with {"assertions": [{"id": "...", "field": "...", "condition": "exists"}]} '
    "or point to it with --config."
)


def parse_assertion_config(payload: Any) -> AssertionConfig:
    error = InputError(
        "assertions.invalid_shape",
        "Assertion config must contain an 'assertions' array",
        "Each assertion needs an id, a field and one of: exists, not_exists, equals, not_equals, contains, matches.",
    )
    if not isinstance(payload, dict) or not isinstance(payload.get("assertions"), list):
        raise error
    try:
        return AssertionConfig.model_validate(payload)
    except ValidationError as exc:
        raise error from exc


def load_assertion_config(path: Path) -> AssertionConfig:
    config = parse_assertion_config(
        _read_json(path, kind="assertions", label="Assertion config", hint=_ASSERTIONS_HINT)
    )
    logger.debug("Aserciones cargadas: {} ({})", path, len(config.assertions))
    return config
