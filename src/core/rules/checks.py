"""Building blocks for ruleset tables.

Each check is an immutable object implementing `core.interfaces.rule.RuleCheck`.
Checks navigate nodes through the safe accessors of `core.domain.json_ld`, so
a missing or wrong-shaped field is reported as absent and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from core.domain.json_ld import Node, as_list, get_field, is_object, is_present
from core.domain.models import Severity, ValidationIssue


@dataclass(frozen=True)
class IssueSpec:
    rule_id: str
    message: str
    severity: Severity = Severity.ERROR

    def at(self, path: str) -> ValidationIssue:
        return ValidationIssue(
            path=path,
            message=self.message,
            severity=self.severity,
            rule_id=self.rule_id,
        )


def error(rule_id: str, message: str) -> IssueSpec:
    return IssueSpec(rule_id, message, Severity.ERROR)


def warn(rule_id: str, message: str) -> IssueSpec:
    return IssueSpec(rule_id, message, Severity.WARN)


@dataclass(frozen=True)
class RequiredField:
    """The field must be present (non-blank, non-empty)."""

    field: str
    spec: IssueSpec

    @property
    def rule_id(self) -> str:
        return self.spec.rule_id

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        if is_present(get_field(node, self.field)):
            return []
        return [self.spec.at(f"{path_prefix}.{self.field}")]


@dataclass(frozen=True)
class NonEmptyList:
    """The field must be a list with at least one entry."""

    field: str
    spec: IssueSpec

    @property
    def rule_id(self) -> str:
        return self.spec.rule_id

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        value = get_field(node, self.field)
        if isinstance(value, list) and value:
            return []
        return [self.spec.at(f"{path_prefix}.{self.field}")]


@dataclass(frozen=True)
class RequiredNestedField:
    """`parent.child` must exist.

    `parent` may be an object or a list of objects (e.g. several `offers`);
    one entry carrying `child` is enough. When `parent` itself is absent the
    `missing_parent` spec is reported, or nothing if it is `None`.
    """

    parent: str
    child: str
    spec: IssueSpec
    missing_parent: IssueSpec | None = None

    @property
    def rule_id(self) -> str:
        return self.spec.rule_id

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        parent = get_field(node, self.parent)
        if not is_present(parent):
            if self.missing_parent is None:
                return []
            return [self.missing_parent.at(f"{path_prefix}.{self.parent}")]
        if any(is_object(entry) and self.child in entry for entry in as_list(parent)):
            return []
        return [self.spec.at(f"{path_prefix}.{self.parent}.{self.child}")]


@dataclass(frozen=True)
class LengthRange:
    """String length within `[minimum, maximum]`; skipped when the field is absent."""

    field: str
    minimum: int
    maximum: int
    rule_id: str
    severity: Severity = Severity.WARN

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        value = get_field(node, self.field)
        length = len(value) if isinstance(value, str) else 0
        if length == 0 or self.minimum <= length <= self.maximum:
            return []
        return [
            ValidationIssue(
                path=f"{path_prefix}.{self.field}",
                message=(
                    f"{self.field} length ({length}) should be between "
                    f"{self.minimum}-{self.maximum} characters for optimal display"
                ),
                severity=self.severity,
                rule_id=self.rule_id,
            )
        ]


@dataclass(frozen=True)
class ListItemsHaveKeys:
    """Every entry of the list field is an object carrying all `keys`.

    `missing` is reported when the field is absent or not a list (and when it
    is empty, unless `allow_empty`); with `missing=None` such nodes are skipped.
    """

    field: str
    keys: tuple[str, ...]
    spec: IssueSpec
    missing: IssueSpec | None = None
    allow_empty: bool = False

    @property
    def rule_id(self) -> str:
        return self.spec.rule_id

    def _item_ok(self, item: Any) -> bool:
        return is_object(item) and all(key in item for key in self.keys)

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        value = get_field(node, self.field)
        path = f"{path_prefix}.{self.field}"
        if not isinstance(value, list) or (not value and not self.allow_empty):
            return [] if self.missing is None else [self.missing.at(path)]
        if all(self._item_ok(item) for item in value):
            return []
        return [self.spec.at(path)]


@dataclass(frozen=True)
class AnyOfFields:
    """At least one of `fields` is present; reported on the first field's path."""

    fields: tuple[str, ...]
    spec: IssueSpec

    @property
    def rule_id(self) -> str:
        return self.spec.rule_id

    def check(self, node: Node, path_prefix: str) -> list[ValidationIssue]:
        if any(is_present(get_field(node, field)) for field in self.fields):
            return []
        return [self.spec.at(f"{path_prefix}.{self.fields[0]}")]
