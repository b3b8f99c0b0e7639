# grade_engine/services/validation_service.py
"""Validation and normalization of candidate grade definitions.

A candidate is accepted only when its tiers, read as closed integer intervals,
cover every percentage from 0 to 100 exactly once. Grade-point ordering is
checked separately and only produces warnings.
"""
from typing import List, Optional, Sequence, Union
import logging
import math

from pydantic import ValidationError

from ..core.config import settings
from ..core.exceptions import GradeValidationError
from ..schemas.grade_definition_schemas import (
    GradeDefinitionCreate, GradeRange, GradeRangeCreate, GradeWarning,
    NormalizedDefinition, ValidationFailure, ValidationResult
)

logger = logging.getLogger(__name__)

MIN_MARKS = 0
MAX_MARKS = 100

Candidate = Union[GradeDefinitionCreate, dict]


def _fail(reason: str, *rows: GradeRangeCreate) -> ValidationFailure:
    return ValidationFailure(reason=reason, offending_ranges=list(rows))


def _label(row: GradeRangeCreate) -> str:
    return f"{row.grade} ({row.min_marks}-{row.max_marks})"


def _find_failure(candidate: GradeDefinitionCreate) -> Optional[ValidationFailure]:
    if not candidate.name or not candidate.name.strip():
        return _fail("Grade definition name is required")

    rows = candidate.grade_ranges
    if not rows:
        return _fail("At least one grade range is required")

    for row in rows:
        if not row.grade or not row.grade.strip():
            return _fail(
                f"Grade is required for range {row.min_marks}-{row.max_marks}", row
            )
        if row.min_marks < MIN_MARKS or row.max_marks > MAX_MARKS:
            return _fail(
                f"Grade range must be between {MIN_MARKS} and {MAX_MARKS}. "
                f"Found: {row.min_marks}-{row.max_marks}",
                row
            )
        if row.min_marks > row.max_marks:
            return _fail(
                f"Invalid range: min ({row.min_marks}) cannot be greater than max ({row.max_marks})",
                row
            )
        if not math.isfinite(row.grade_point) or row.grade_point < 0:
            return _fail(
                f"Grade point must be a non-negative number. Found: {row.grade} ({row.grade_point})", row
            )

    seen = {}
    for row in rows:
        grade = row.grade.strip()
        if grade in seen:
            return _fail(f"Duplicate grade: {grade}", seen[grade], row)
        seen[grade] = row

    ordered = sorted(rows, key=lambda r: (r.min_marks, r.max_marks))

    first = ordered[0]
    if first.min_marks != MIN_MARKS:
        return _fail(
            f"Grade ranges must start at {MIN_MARKS}. Lowest range is {_label(first)}", first
        )

    for previous, current in zip(ordered, ordered[1:]):
        if current.min_marks <= previous.max_marks:
            return _fail(
                f"Grade ranges overlap: {_label(previous)} and {_label(current)}",
                previous, current
            )
        if current.min_marks > previous.max_marks + 1:
            missing_from = previous.max_marks + 1
            missing_to = current.min_marks - 1
            missing = str(missing_from) if missing_from == missing_to else f"{missing_from}-{missing_to}"
            return _fail(
                f"Grade ranges leave marks {missing} uncovered between "
                f"{_label(previous)} and {_label(current)}",
                previous, current
            )

    last = ordered[-1]
    if last.max_marks != MAX_MARKS:
        return _fail(
            f"Grade ranges must end at {MAX_MARKS}. Highest range is {_label(last)}", last
        )

    return None


def check_grade_point_order(ranges: Sequence[GradeRange]) -> List[GradeWarning]:
    """Warn wherever a higher tier carries a lower grade point than the tier below it."""
    warnings = []
    ordered = sorted(ranges, key=lambda r: r.min_marks)
    for lower, higher in zip(ordered, ordered[1:]):
        if higher.grade_point < lower.grade_point:
            warnings.append(GradeWarning(
                message=(
                    f"Grade {higher.grade} has a lower grade point ({higher.grade_point:g}) "
                    f"than grade {lower.grade} ({lower.grade_point:g})"
                ),
                ranges=[lower, higher],
            ))
    return warnings


def _describe_errors(exc: ValidationError) -> str:
    """One line per schema error, e.g. ``gradeRanges.0.minMarks: Field required``"""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "Invalid grade definition: " + "; ".join(messages)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def validate(candidate: Candidate) -> ValidationResult:
    """Check a candidate definition and return it normalized.

    The result either carries a ``failure`` (nothing accepted) or a
    ``definition`` with ranges sorted by ``min_marks`` ascending and
    ``display_order`` counted from the top tier, plus any grade-point warnings.
    """
    if isinstance(candidate, dict):
        try:
            candidate = GradeDefinitionCreate.model_validate(candidate)
        except ValidationError as exc:
            failure = _fail(_describe_errors(exc))
            logger.info("Grade definition payload rejected: %s", failure.reason)
            return ValidationResult(failure=failure)

    failure = _find_failure(candidate)
    if failure is not None:
        logger.info("Grade definition '%s' rejected: %s", candidate.name, failure.reason)
        return ValidationResult(failure=failure)

    ordered = sorted(candidate.grade_ranges, key=lambda r: r.min_marks)
    total = len(ordered)
    ranges = tuple(
        GradeRange(
            grade=row.grade.strip(),
            min_marks=row.min_marks,
            max_marks=row.max_marks,
            grade_point=row.grade_point,
            description=_clean(row.description),
            display_order=total - index,
        )
        for index, row in enumerate(ordered)
    )

    warnings = []
    if settings.WARN_ON_GRADE_POINT_ORDER:
        warnings = check_grade_point_order(ranges)
        for warning in warnings:
            logger.warning("Grade definition '%s': %s", candidate.name, warning.message)

    definition = NormalizedDefinition(
        name=candidate.name.strip(),
        code=_clean(candidate.code),
        description=_clean(candidate.description),
        is_default=candidate.is_default,
        grade_ranges=ranges,
    )
    return ValidationResult(definition=definition, warnings=warnings)


def validate_or_raise(candidate: Candidate) -> ValidationResult:
    result = validate(candidate)
    if not result.ok:
        raise GradeValidationError(result.failure)
    return result
