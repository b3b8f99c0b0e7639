# grade_engine/__init__.py
"""Grading scale engine: grade definitions, validation and mark resolution."""
from .core.exceptions import (
    GradingException, GradeValidationError, NotFoundError, TemplateNotFoundError,
    NoDefaultDefinitionError, ProtectedDefinitionError, DuplicateDefinitionError,
    OutOfDomainError, CorruptDefinitionError, VersionConflictError,
    ExamConfigurationExistsError, DefinitionInUseError
)
from .schemas.grade_definition_schemas import (
    DefinitionOrigin, GradeRange, GradeRangeCreate, GradeRangeUpdate,
    GradeDefinition, GradeDefinitionCreate, StandardScale, ValidationFailure,
    GradeWarning, NormalizedDefinition, ValidationResult, GradeCalculation,
    DefinitionChange, ExamGradeConfiguration, ExamGradeConfigurationCreate,
    ExamGradeConfigurationUpdate, ExamConfigChange
)
from .services.standard_scales import get_template, list_templates, indian_standards
from .services.validation_service import validate, validate_or_raise, check_grade_point_order
from .services.resolution_service import (
    resolve, calculate_grade, resolve_default, format_grade, round_mark
)
from .services.default_policy import set_default, get_default, ensure_default
from .services.grade_definition_service import GradeDefinitionService, duplicate_codes
from .services.exam_grade_config import (
    configure_exam_grading, get_exam_grade_config, update_exam_grade_config,
    remove_exam_grade_config, exams_using, resolve_for_exam
)
from .services.definition_store import GradeDefinitionStore, StoreSnapshot

__version__ = "1.0.0"
