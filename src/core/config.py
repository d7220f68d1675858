"""Configuración del Core.

Qué vive aquí:
- `AppSettings`: defaults de rutas, token de GitHub y logging desde el
  entorno (prefijo `SCHEMA_SENTRY_`) o `.env`.
- El archivo de proyecto `schema-sentry.config.json` se valida con Pydantic y
  sus fallos se traducen a `ConfigError` con códigos estables.

Precedencia:
- flag de CLI > archivo de proyecto > variable de entorno/.env > default.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.errors import ConfigError

DEFAULT_CONFIG_PATH = "schema-sentry.config.json"
DEFAULT_MANIFEST_PATH = "schema-sentry.manifest.json"
DEFAULT_DATA_PATH = "schema-sentry.data.json"
DEFAULT_ASSERTIONS_PATH = "schema-sentry.test.json"


class AppSettings(BaseSettings):
    """Settings de proceso (env vars y `.env`).

    Por qué pydantic-settings:
    - Las rutas y el token se validan una vez, en el borde.
    - CLI, bot y doctor leen el mismo contrato.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_SENTRY_",
        extra="ignore",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    manifest_path: Path = Field(
        default=Path(DEFAULT_MANIFEST_PATH),
        description="Manifest con los tipos esperados por ruta.",
    )
    data_path: Path = Field(
        default=Path(DEFAULT_DATA_PATH),
        description="JSON con los nodos recolectados por ruta.",
    )
    assertions_path: Path = Field(
        default=Path(DEFAULT_ASSERTIONS_PATH),
        description="Aserciones de `schemasentry test`.",
    )
    built_output_dir: Path = Field(
        default=Path(".next/server/app"),
        description="Directorio del HTML construido (p.ej. `out/` o `.next/server/app`).",
    )
    app_dir: str = Field(
        default="app",
        min_length=1,
        description="Directorio de páginas relativo a la raíz del proyecto.",
    )
    config_path: Path | None = Field(
        default=None,
        description="Ruta explícita al archivo de configuración del proyecto.",
    )
    rulesets: str = Field(
        default="",
        description="Rulesets por defecto separados por coma (google,ai-citation).",
    )
    recommended: bool | None = Field(
        default=None,
        description="Activa los checks de campos recomendados; `None` delega al archivo de proyecto.",
    )

    github_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SCHEMA_SENTRY_GITHUB_TOKEN", "GITHUB_TOKEN"),
        description="Token para publicar comentarios en PRs.",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        min_length=8,
        description="Base URL de la API de GitHub (GHES compatible).",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="schema-sentry/0.1 (+https://schema.org)",
        min_length=1,
        description="User-Agent para peticiones HTTP.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel mínimo de logs en stderr (DEBUG, INFO, WARNING...).",
    )


class ProjectConfig(BaseModel):
    """Contenido de `schema-sentry.config.json`."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    recommended: StrictBool | None = Field(
        default=None,
        description="Checks de campos recomendados.",
    )
    rules: str | None = Field(
        default=None,
        description="Rulesets a ejecutar (p.ej. 'google,ai-citation').",
    )


def load_project_config(config_path: Path | str | None = None, *, cwd: Path | None = None) -> ProjectConfig | None:
    """Carga la configuración del proyecto.

    - Sin ruta explícita y sin archivo por defecto: `None`.
    - Ruta explícita inexistente, ilegible, JSON inválido o forma inválida:
      `ConfigError`.
    """

    base = cwd or Path.cwd()
    explicit = config_path is not None
    resolved = (base / Path(config_path if explicit else DEFAULT_CONFIG_PATH)).resolve()

    if not resolved.is_file():
        if explicit:
            raise ConfigError(
                "config.not_found",
                f"Config not found at {resolved}",
                "Provide a valid path or remove --config.",
            )
        return None

    try:
        raw = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(
            "config.read_failed",
            f"Failed to read config at {resolved}",
            "Check file permissions or re-create the config file.",
        ) from exc

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            "config.invalid_json",
            "Config is not valid JSON",
            "Check the JSON syntax or regenerate the file.",
        ) from exc

    if not isinstance(parsed, dict):
        raise _invalid_shape()
    try:
        return ProjectConfig.model_validate(parsed)
    except ValidationError as exc:
        raise _invalid_shape() from exc


def _invalid_shape() -> ConfigError:
    return ConfigError(
        "config.invalid_shape",
        "Config must be a JSON object with optional boolean 'recommended' and string 'rules'",
        'Example: { "recommended": false, "rules": "google" }',
    )


def resolve_recommended(cli_override: bool | None, config: ProjectConfig | None, settings: AppSettings | None = None) -> bool:
    """flag de CLI > archivo de proyecto > entorno > `True`."""

    if cli_override is not None:
        return cli_override
    if config is not None and config.recommended is not None:
        return config.recommended
    if settings is not None and settings.recommended is not None:
        return settings.recommended
    return True


def resolve_rulesets(cli_value: str | None, config: ProjectConfig | None, settings: AppSettings | None = None) -> str:
    """Misma precedencia que `resolve_recommended`; cadena vacía = ningún ruleset."""

    if cli_value is not None:
        return cli_value
    if config is not None and config.rules is not None:
        return config.rules
    if settings is not None:
        return settings.rulesets
    return ""
