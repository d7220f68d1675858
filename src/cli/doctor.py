"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, load_project_config
from core.errors import ConfigError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_config(config_path: Path | None) -> tuple[str, str]:
    try:
        config = load_project_config(config_path)
    except ConfigError as exc:
        return "FAIL", f"{exc.code}: {exc.message}"
    if config is None:
        return "OPTIONAL", "No schema-sentry.config.json -> defaults apply"
    return "OK", f"recommended={config.recommended} rules={config.rules or '-'}"


def _check_path(path: Path, *, directory: bool = False) -> tuple[str, str]:
    exists = path.is_dir() if directory else path.is_file()
    return ("OK" if exists else "MISSING"), str(path)


@app.command()
def run(
    offline: bool = typer.Option(False, "--offline", help="Skip the GitHub API connectivity check."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Schema Sentry Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    status, detail = _check_config(settings.config_path)
    table.add_row("Project config", status, detail)

    status, detail = _check_path(settings.manifest_path)
    table.add_row("Manifest", status, detail)
    status, detail = _check_path(settings.data_path)
    table.add_row("Collected data", "OPTIONAL" if status == "MISSING" else status, detail)
    status, detail = _check_path(Path(settings.app_dir), directory=True)
    table.add_row("App directory", status, detail)
    status, detail = _check_path(settings.built_output_dir, directory=True)
    table.add_row("Built output", status, detail)

    if settings.github_token:
        table.add_row("GitHub token", "OK", "PR bot enabled")
    else:
        table.add_row("GitHub token", "OPTIONAL", "Set GITHUB_TOKEN to post PR comments")

    if offline:
        table.add_row("GitHub API", "SKIPPED", settings.github_api_url)
    else:
        ok_http, detail_http = asyncio.run(_check_http(settings.github_api_url, settings))
        table.add_row("GitHub API", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not settings.built_output_dir.is_dir():
        _console.print(
            "\n[yellow]Note:[/yellow] Build the app first (`next build`) so `validate` can read the built HTML."
        )
