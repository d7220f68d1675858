"""Exportación JSON de reportes y datos recolectados.

Por qué JSON estable:
- Los reportes se versionan y se comparan en CI; claves ordenadas e indentación
  fija producen diffs limpios.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def to_payload(value: BaseModel | dict[str, Any]) -> Any:
    """Modelo de dominio -> dict JSON (alias camelCase)."""

    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


def render_json(value: BaseModel | dict[str, Any]) -> str:
    return json.dumps(to_payload(value), ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_json(*, payload: BaseModel | dict[str, Any], output_path: Path) -> Path:
    """Escribe `payload` como JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_json(payload), encoding="utf-8")
    return output_path
