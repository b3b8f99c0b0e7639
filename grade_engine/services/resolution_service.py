# grade_engine/services/resolution_service.py
"""Mark to grade resolution against an accepted grade definition."""
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence
import logging

from ..core.exceptions import CorruptDefinitionError, NoDefaultDefinitionError, OutOfDomainError
from ..schemas.grade_definition_schemas import GradeCalculation, GradeDefinition, GradeRange
from .default_policy import get_default
from .validation_service import MAX_MARKS, MIN_MARKS

logger = logging.getLogger(__name__)


def _to_percentage(mark) -> Decimal:
    if isinstance(mark, bool) or not isinstance(mark, (int, float, Decimal)):
        logger.error("Non-numeric mark passed to grade resolution: %r", mark)
        raise OutOfDomainError(mark)
    value = Decimal(str(mark))
    if not value.is_finite() or value < MIN_MARKS or value > MAX_MARKS:
        logger.error("Mark outside percentage domain passed to grade resolution: %r", mark)
        raise OutOfDomainError(mark)
    return value


def round_mark(mark) -> int:
    """Round a percentage half-up to the integer tier boundaries use."""
    return int(_to_percentage(mark).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def resolve(definition: GradeDefinition, mark) -> GradeRange:
    """Return the single range of ``definition`` containing ``mark``.

    ``definition`` must have passed validation. Finding no range or more than
    one range means it did not, and raises CorruptDefinitionError.
    """
    value = round_mark(mark)
    matches = [r for r in definition.grade_ranges if r.contains(value)]
    if len(matches) != 1:
        logger.error(
            "Grade definition %s resolved mark %s to %d ranges", definition.id, mark, len(matches)
        )
        raise CorruptDefinitionError(definition.id, mark, len(matches))
    return matches[0]


def calculate_grade(definition: GradeDefinition, percentage) -> GradeCalculation:
    grade_range = resolve(definition, percentage)
    return GradeCalculation(
        grade=grade_range.grade,
        grade_point=grade_range.grade_point,
        min_marks=grade_range.min_marks,
        max_marks=grade_range.max_marks,
        description=grade_range.description,
        percentage=float(percentage),
    )


def resolve_default(definitions: Sequence[GradeDefinition], mark) -> GradeRange:
    """Resolve ``mark`` against the school's default grade definition."""
    definition = get_default(definitions)
    if definition is None:
        raise NoDefaultDefinitionError()
    return resolve(definition, mark)


def format_grade(grade_range: GradeRange) -> str:
    return f"{grade_range.grade} ({grade_range.min_marks}-{grade_range.max_marks}%)"
