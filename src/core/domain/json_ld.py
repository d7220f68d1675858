"""Forma de los nodos JSON-LD y navegación segura.

Responsabilidad:
- Declarar el árbol recursivo de valores JSON que representa un nodo.
- Ofrecer accesores que devuelven "ausente" (``None``) ante tipos inesperados
  en lugar de lanzar excepciones; todas las reglas navegan los nodos con ellos.
- Serialización canónica (`stable_stringify`) para comparar snapshots.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from pydantic import JsonValue

Node = dict[str, JsonValue]


def get_field(value: Any, key: str) -> Any:
    """Devuelve `value[key]` si `value` es un objeto; `None` en otro caso."""

    if isinstance(value, Mapping):
        return value.get(key)
    return None


def get_path(value: Any, path: str) -> Any:
    """Resuelve una ruta con puntos (`author.name`) sobre objetos anidados.

    Cualquier segmento que no cae sobre un objeto devuelve `None`.
    """

    current = value
    for key in path.split("."):
        current = get_field(current, key)
        if current is None:
            return None
    return current


def is_present(value: Any) -> bool:
    """Presencia de un campo para las reglas.

    - `None`, cadenas vacías o en blanco, listas/objetos vacíos y `False` cuentan
      como ausentes.
    - Los números (incluido 0) cuentan como presentes.
    """

    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) > 0
    return True


def as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def node_type(node: Any) -> str | None:
    """`@type` del nodo si es una cadena no vacía."""

    raw = get_field(node, "@type")
    if isinstance(raw, str) and raw.strip():
        return raw
    return None


def found_types(nodes: Iterable[Any]) -> list[str]:
    """Valores `@type` (string) de los nodos, en orden de aparición."""

    out: list[str] = []
    for node in nodes:
        raw = get_field(node, "@type")
        if isinstance(raw, str):
            out.append(raw)
    return out


def sort_keys(value: Any) -> Any:
    if isinstance(value, list):
        return [sort_keys(item) for item in value]
    if isinstance(value, Mapping):
        return {key: sort_keys(value[key]) for key in sorted(value.keys())}
    return value


def stable_stringify(value: Any) -> str:
    """JSON canónico: claves ordenadas recursivamente, arrays en su orden original."""

    return json.dumps(sort_keys(value), ensure_ascii=False, separators=(",", ":"))
