"""Cliente HTTP compartido (httpx) para la API de GitHub.

Responsabilidad:
- Un único lugar para timeout, User-Agent y headers JSON.
- `transport` permite inyectar `httpx.MockTransport` en tests.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    base_url: str = "",
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """`httpx.AsyncClient` configurado desde `AppSettings`.

    Lo usan el bot (comentarios en PRs) y `doctor` (chequeo de conectividad).
    """

    settings = settings or AppSettings()
    headers = {"User-Agent": settings.user_agent, "Accept": "application/vnd.github+json"}
    headers.update(extra_headers or {})
    return httpx.AsyncClient(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        transport=transport,
    )
