"""Revisión automática de PRs: publica el resumen del reality check.

Flujo:
- `parse_pr_url` extrae owner/repo/número de una URL de PR.
- `resolve_pr_url_from_event` lee el payload de GitHub Actions
  (`pull_request` o `issue_comment` con `/schemasentry`).
- `format_bot_comment` arma el markdown; `post_pr_comment` lo publica vía
  `POST /repos/{owner}/{repo}/issues/{n}/comments`.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

import httpx
from loguru import logger

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import RealityCheckReport
from core.errors import BotError

_PR_URL = re.compile(r"github\.com/([^/]+)/([^/]+)/pull/(\d+)")
SLASH_COMMAND = "/schemasentry"


@dataclass(frozen=True)
class PullRequestRef:
    owner: str
    repo: str
    number: int

    @property
    def comments_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/issues/{self.number}/comments"


def parse_pr_url(url: str) -> PullRequestRef:
    match = _PR_URL.search(url or "")
    if not match:
        raise BotError(
            "bot.invalid_pr_url",
            f"Invalid PR URL format: {url!r}",
            "Expected: https://github.com/owner/repo/pull/123",
        )
    return PullRequestRef(owner=match.group(1), repo=match.group(2), number=int(match.group(3)))


def resolve_pr_url_from_event(event_type: str, event_path: Path) -> str | None:
    """URL del PR a comentar, o `None` si el evento debe ignorarse."""

    try:
        event = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise BotError("bot.event_unreadable", f"Failed to read event payload at {event_path}") from exc

    if event_type == "pull_request":
        pr = event.get("pull_request") if isinstance(event, dict) else None
        if not isinstance(pr, dict) or not pr.get("html_url"):
            raise BotError("bot.event_invalid", "No pull_request data in event")
        return str(pr["html_url"])

    if event_type == "issue_comment":
        comment = event.get("comment") if isinstance(event, dict) else None
        issue = event.get("issue") if isinstance(event, dict) else None
        if not isinstance(comment, dict) or not isinstance(issue, dict):
            raise BotError("bot.event_invalid", "No comment or issue data in event")
        if SLASH_COMMAND not in str(comment.get("body") or ""):
            logger.info("Comentario ignorado: no contiene {}", SLASH_COMMAND)
            return None
        pull_request = issue.get("pull_request")
        if not isinstance(pull_request, dict) or not pull_request.get("html_url"):
            logger.info("Comentario ignorado: no pertenece a un PR")
            return None
        return str(pull_request["html_url"])

    raise BotError(
        "bot.unsupported_event",
        f"Unsupported event type: {event_type}",
        "Use --event pull_request or --event issue_comment.",
    )


def format_bot_comment(
    report: RealityCheckReport,
    *,
    manifest: str,
    root: str,
    rules: str | None = None,
) -> str:
    icon = "✅" if report.ok else "❌"
    status = "All checks passed!" if report.ok else "Schema issues found"
    summary = report.summary
    rules_info = f"\n**Rulesets:** {rules}" if rules else ""
    rules_flag = f" --rules {rules}" if rules else ""

    return (
        f"## 🔍 Schema Sentry Bot Review {icon}\n"
        "\n"
        f"{status}\n"
        "\n"
        "| Metric | Value |\n"
        "|--------|-------|\n"
        f"| Routes | {summary.routes} |\n"
        f"| Errors | {summary.errors} |\n"
        f"| Warnings | {summary.warnings} |\n"
        f"| Score | {summary.score}/100 |\n"
        f"{rules_info}\n"
        "\n"
        "---\n"
        f"*Run with: `schemasentry validate --manifest {manifest} --root {root}{rules_flag}`*"
    )


async def post_pr_comment(
    pr: PullRequestRef,
    body: str,
    *,
    token: str,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Publica el comentario y devuelve su `html_url`."""

    settings = settings or AppSettings()
    headers = {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github.v3+json",
    }
    async with build_async_client(
        settings,
        base_url=settings.github_api_url,
        extra_headers=headers,
        transport=transport,
    ) as client:
        try:
            response = await client.post(pr.comments_path, json={"body": body})
        except httpx.HTTPError as exc:
            raise BotError("bot.request_failed", f"Failed to post comment: {exc}") from exc

    if response.status_code >= 400:
        raise BotError(
            "bot.api_error",
            f"GitHub API error: {response.status_code} - {response.text}",
            "Check that the token can write to pull request comments.",
        )

    url = ""
    try:
        payload = response.json()
    except ValueError:
        payload = None
        logger.debug("Respuesta de GitHub sin JSON")
    if isinstance(payload, dict):
        url = str(payload.get("html_url") or "")
    logger.info("Comentario publicado en {}/{}#{}", pr.owner, pr.repo, pr.number)
    return url
