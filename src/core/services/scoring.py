"""Scoring helpers shared by every report builder.

A route score starts at a cap and loses a fixed penalty per error and per
warning, clamped at zero. Aggregates are the unweighted mean of the route
scores, rounded half-up. Callers that merge issue lists must call
`route_score` on the merged list instead of combining two scores.
"""

from __future__ import annotations

import math
from fractions import Fraction
from typing import Iterable

from core.domain.models import Severity, ValidationIssue

SCORE_CAP = 100
ERROR_PENALTY = 10
WARNING_PENALTY = 2


def count_severities(issues: Iterable[ValidationIssue]) -> tuple[int, int]:
    """Return `(errors, warnings)` for an issue list."""

    errors = 0
    warnings = 0
    for issue in issues:
        if issue.severity is Severity.ERROR:
            errors += 1
        else:
            warnings += 1
    return errors, warnings


def penalized_score(errors: int, warnings: int, *, cap: int = SCORE_CAP) -> int:
    return max(0, cap - ERROR_PENALTY * errors - WARNING_PENALTY * warnings)


def route_score(issues: Iterable[ValidationIssue], *, cap: int = SCORE_CAP) -> int:
    errors, warnings = count_severities(issues)
    return penalized_score(errors, warnings, cap=cap)


def round_half_up(value: Fraction) -> int:
    return math.floor(value + Fraction(1, 2))


def aggregate_score(scores: Iterable[int]) -> int:
    """Mean of route scores; an empty report is vacuously perfect."""

    values = list(scores)
    if not values:
        return SCORE_CAP
    return round_half_up(Fraction(sum(values), len(values)))
