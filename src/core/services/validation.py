"""Base field-presence validator.

Every route's nodes go through this check before any classification: it
flags an empty node list, a wrong `@context`, unknown `@type` values and
missing required fields, plus BreadcrumbList item shape.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Any, Sequence
from urllib.parse import urlparse

from core.domain.json_ld import Node, get_field, is_object, is_present
from core.domain.models import Severity, ValidationIssue, ValidationResult
from core.domain.schema_types import SCHEMA_CONTEXT, TypeName
from core.services.scoring import count_severities, penalized_score

REQUIRED_FIELDS: MappingProxyType[TypeName, tuple[str, ...]] = MappingProxyType(
    {
        TypeName.ORGANIZATION: ("name",),
        TypeName.PERSON: ("name",),
        TypeName.PLACE: ("name",),
        TypeName.LOCAL_BUSINESS: ("name",),
        TypeName.WEB_SITE: ("name", "url"),
        TypeName.WEB_PAGE: ("name", "url"),
        TypeName.ARTICLE: ("headline", "author", "datePublished", "url"),
        TypeName.BLOG_POSTING: ("headline", "author", "datePublished", "url"),
        TypeName.PRODUCT: ("name", "description", "url"),
        TypeName.VIDEO_OBJECT: ("name", "thumbnailUrl", "uploadDate"),
        TypeName.IMAGE_OBJECT: ("contentUrl",),
        TypeName.EVENT: ("name", "startDate"),
        TypeName.REVIEW: ("itemReviewed", "reviewRating", "author"),
        TypeName.FAQ_PAGE: ("mainEntity",),
        TypeName.HOW_TO: ("name", "step"),
        TypeName.BREADCRUMB_LIST: ("itemListElement",),
    }
)

RECOMMENDED_FIELDS: MappingProxyType[TypeName, tuple[str, ...]] = MappingProxyType(
    {
        TypeName.ORGANIZATION: ("url", "logo"),
        TypeName.ARTICLE: ("image", "description"),
        TypeName.BLOG_POSTING: ("image", "description"),
        TypeName.PRODUCT: ("image", "offers"),
        TypeName.EVENT: ("location",),
    }
)

# Fields that must be a non-empty list, with their dedicated message.
_LIST_FIELDS = {
    "mainEntity": "FAQPage must include at least one Question",
    "step": "HowTo must include at least one step",
    "itemListElement": "BreadcrumbList must include at least one breadcrumb item",
}


def make_issue(path: str, message: str, severity: Severity, rule_id: str) -> ValidationIssue:
    return ValidationIssue(path=path, message=message, severity=severity, rule_id=rule_id)


def error(path: str, message: str, rule_id: str) -> ValidationIssue:
    return make_issue(path, message, Severity.ERROR, rule_id)


def warning(path: str, message: str, rule_id: str) -> ValidationIssue:
    return make_issue(path, message, Severity.WARN, rule_id)


def is_absolute_url(value: Any) -> bool:
    if not isinstance(value, str) or not value.strip():
        return False
    parsed = urlparse(value.strip())
    return bool(parsed.scheme) and bool(parsed.netloc)


def has_author(node: Node) -> bool:
    author = get_field(node, "author")
    if isinstance(author, str):
        return bool(author.strip())
    if is_object(author):
        name = get_field(author, "name")
        return isinstance(name, str) and bool(name.strip())
    return False


def _check_required(node: Node, type_name: TypeName, prefix: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for field in REQUIRED_FIELDS.get(type_name, ()):
        if field == "author":
            if not has_author(node):
                issues.append(
                    error(f"{prefix}.author", "Missing required field 'author'", "schema.required.author")
                )
            continue

        value = get_field(node, field)
        if field in _LIST_FIELDS:
            if not (isinstance(value, list) and value):
                issues.append(error(f"{prefix}.{field}", _LIST_FIELDS[field], f"schema.required.{field}"))
            continue

        if not is_present(value):
            issues.append(
                error(f"{prefix}.{field}", f"Missing required field '{field}'", f"schema.required.{field}")
            )
    return issues


def _check_recommended(node: Node, type_name: TypeName, prefix: str) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for field in RECOMMENDED_FIELDS.get(type_name, ()):
        if not is_present(get_field(node, field)):
            issues.append(
                warning(
                    f"{prefix}.{field}",
                    f"Recommended field '{field}' is missing",
                    f"schema.recommended.{field}",
                )
            )
    return issues


def _check_breadcrumbs(node: Node, prefix: str) -> list[ValidationIssue]:
    entries = get_field(node, "itemListElement")
    if not isinstance(entries, list):
        return []

    issues: list[ValidationIssue] = []
    for index, entry in enumerate(entries):
        entry_path = f"{prefix}.itemListElement[{index}]"
        if not is_object(entry):
            issues.append(error(entry_path, "BreadcrumbList items must be objects", "schema.breadcrumb.item"))
            continue

        position = get_field(entry, "position")
        valid_position = (
            isinstance(position, (int, float))
            and not isinstance(position, bool)
            and math.isfinite(position)
            and position > 0
        )
        if not valid_position:
            issues.append(
                error(
                    f"{entry_path}.position",
                    "ListItem.position must be a positive number",
                    "schema.breadcrumb.position",
                )
            )

        item = get_field(entry, "item")
        if isinstance(item, str):
            if not is_absolute_url(item):
                issues.append(
                    error(f"{entry_path}.item", "ListItem.item must be a valid URL", "schema.breadcrumb.item.url")
                )
        elif is_object(item):
            target = get_field(item, "@id")
            if target is None:
                target = get_field(item, "url")
            if not is_absolute_url(target):
                issues.append(
                    error(
                        f"{entry_path}.item",
                        "ListItem.item must include a valid @id or url",
                        "schema.breadcrumb.item.url",
                    )
                )
        else:
            issues.append(error(f"{entry_path}.item", "ListItem.item is required", "schema.breadcrumb.item"))
    return issues


def validate_nodes(nodes: Sequence[Node], *, recommended: bool = False) -> list[ValidationIssue]:
    """Issue list only; see `validate_schema` for the scored result."""

    issues: list[ValidationIssue] = []
    if not nodes:
        issues.append(error("root", "No schema blocks provided", "schema.empty"))

    for index, node in enumerate(nodes):
        prefix = f"nodes[{index}]"

        if get_field(node, "@context") != SCHEMA_CONTEXT:
            issues.append(error(f"{prefix}.@context", "Invalid or missing @context", "schema.context"))

        type_name = TypeName.parse(get_field(node, "@type"))
        if type_name is None:
            issues.append(error(f"{prefix}.@type", "Unknown or missing @type", "schema.type"))
            continue

        issues.extend(_check_required(node, type_name, prefix))
        if recommended:
            issues.extend(_check_recommended(node, type_name, prefix))
        if type_name is TypeName.BREADCRUMB_LIST:
            issues.extend(_check_breadcrumbs(node, prefix))

    return issues


def validate_schema(nodes: Sequence[Node], *, recommended: bool = False) -> ValidationResult:
    issues = validate_nodes(nodes, recommended=recommended)
    errors, warnings = count_severities(issues)
    return ValidationResult(ok=errors == 0, score=penalized_score(errors, warnings), issues=issues)
