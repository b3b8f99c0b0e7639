# grade_engine/services/exam_grade_config.py
"""Which grade definition an exam is graded with.

An exam without a configuration is graded with the school's default
definition. With ``auto_calculate_grades`` off, marks for the exam are not
turned into grades automatically.
"""
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union
import logging
import uuid

from ..core.exceptions import ExamConfigurationExistsError, NotFoundError
from ..schemas.grade_definition_schemas import (
    ExamConfigChange, ExamGradeConfiguration, ExamGradeConfigurationCreate,
    ExamGradeConfigurationUpdate, GradeDefinition, GradeRange
)
from .resolution_service import resolve, resolve_default

logger = logging.getLogger(__name__)

ConfigRequest = Union[ExamGradeConfigurationCreate, dict]
ConfigChanges = Union[ExamGradeConfigurationUpdate, dict]


def _check_definition(definitions: Sequence[GradeDefinition], definition_id: str) -> GradeDefinition:
    for definition in definitions:
        if definition.id == definition_id:
            return definition
    raise NotFoundError("Grade definition", definition_id)


def get_exam_grade_config(
    configurations: Sequence[ExamGradeConfiguration], exam_id: str
) -> Optional[ExamGradeConfiguration]:
    for configuration in configurations:
        if configuration.exam_id == exam_id:
            return configuration
    return None


def _require_config(configurations, exam_id: str) -> ExamGradeConfiguration:
    configuration = get_exam_grade_config(configurations, exam_id)
    if configuration is None:
        raise NotFoundError("Exam grade configuration", exam_id)
    return configuration


def configure_exam_grading(
    definitions: Sequence[GradeDefinition],
    configurations: Sequence[ExamGradeConfiguration],
    request: ConfigRequest,
    school_id: Optional[str] = None
) -> ExamConfigChange:
    """Bind an exam to one of the school's grade definitions"""
    if isinstance(request, dict):
        request = ExamGradeConfigurationCreate.model_validate(request)

    definition = _check_definition(definitions, request.grade_definition_id)
    if get_exam_grade_config(configurations, request.exam_id) is not None:
        raise ExamConfigurationExistsError(request.exam_id)

    now = datetime.now(timezone.utc)
    configuration = ExamGradeConfiguration(
        id=str(uuid.uuid4()),
        school_id=school_id,
        exam_id=request.exam_id,
        grade_definition_id=definition.id,
        auto_calculate_grades=request.auto_calculate_grades,
        created_at=now,
        updated_at=now,
    )
    logger.info("Exam %s graded with definition %s", request.exam_id, definition.id)
    return ExamConfigChange(
        configurations=list(configurations) + [configuration], configuration=configuration
    )


def update_exam_grade_config(
    definitions: Sequence[GradeDefinition],
    configurations: Sequence[ExamGradeConfiguration],
    exam_id: str,
    changes: ConfigChanges
) -> ExamConfigChange:
    existing = _require_config(configurations, exam_id)
    if isinstance(changes, dict):
        changes = ExamGradeConfigurationUpdate.model_validate(changes)

    update = changes.model_dump(exclude_unset=True, exclude_none=True)
    if "grade_definition_id" in update:
        _check_definition(definitions, update["grade_definition_id"])

    updated = existing.model_copy(update={**update, "updated_at": datetime.now(timezone.utc)})
    logger.info("Updated grade configuration for exam %s", exam_id)
    return ExamConfigChange(
        configurations=[updated if c.id == existing.id else c for c in configurations],
        configuration=updated,
    )


def remove_exam_grade_config(
    configurations: Sequence[ExamGradeConfiguration], exam_id: str
) -> ExamConfigChange:
    existing = _require_config(configurations, exam_id)
    logger.info("Removed grade configuration for exam %s", exam_id)
    return ExamConfigChange(
        configurations=[c for c in configurations if c.id != existing.id], configuration=existing
    )


def exams_using(configurations: Sequence[ExamGradeConfiguration], definition_id: str) -> List[str]:
    return [c.exam_id for c in configurations if c.grade_definition_id == definition_id]


def resolve_for_exam(
    definitions: Sequence[GradeDefinition],
    configurations: Sequence[ExamGradeConfiguration],
    exam_id: str,
    mark
) -> Optional[GradeRange]:
    """Resolve a mark with the exam's configured definition.

    Falls back to the school default when the exam has no configuration.
    Returns None when automatic grading is switched off for the exam.
    """
    configuration = get_exam_grade_config(configurations, exam_id)
    if configuration is None:
        return resolve_default(definitions, mark)
    if not configuration.auto_calculate_grades:
        return None
    definition = _check_definition(definitions, configuration.grade_definition_id)
    return resolve(definition, mark)
