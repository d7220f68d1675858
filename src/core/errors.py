"""Errores de la capa de entrada (archivos, configuración, integraciones).

Los hallazgos de dominio NO son excepciones (ver `ValidationIssue`); estas
clases cubren solo fallos estructurales que el núcleo nunca ve.
"""

from __future__ import annotations


class SchemaSentryError(Exception):
    """Error con código estable y sugerencia opcional para el usuario."""

    def __init__(self, code: str, message: str, suggestion: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"code": self.code, "message": self.message}
        if self.suggestion is not None:
            payload["suggestion"] = self.suggestion
        return payload


class InputError(SchemaSentryError):
    """Manifest o archivo de datos ausente, ilegible o con forma inválida."""


class ConfigError(SchemaSentryError):
    """Archivo de configuración del proyecto inválido."""


class BotError(SchemaSentryError):
    """Fallo al publicar la revisión en GitHub."""
