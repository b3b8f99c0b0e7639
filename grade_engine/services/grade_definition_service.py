# grade_engine/services/grade_definition_service.py
from typing import Dict, List, Mapping, Optional, Sequence, Union
import logging
import uuid

from ..core.config import settings
from ..core.exceptions import (
    DefinitionInUseError, DuplicateDefinitionError, NotFoundError, ProtectedDefinitionError
)
from ..schemas.grade_definition_schemas import (
    DefinitionChange, DefinitionOrigin, ExamGradeConfiguration, GradeDefinition,
    GradeDefinitionCreate, GradeRangeCreate, GradeRangeUpdate, NormalizedDefinition
)
from .default_policy import ensure_default, get_default, set_default
from .exam_grade_config import exams_using
from .standard_scales import get_template
from .validation_service import Candidate, validate_or_raise

logger = logging.getLogger(__name__)

RangeChanges = Union[GradeRangeUpdate, dict]


class GradeDefinitionService:
    """Create, edit, delete and re-default a school's grade definitions.

    The service holds no definitions itself: every operation takes the current
    collection and returns a DefinitionChange with the new collection.
    """

    def __init__(self, school_id: str):
        self.school_id = school_id

    @staticmethod
    def template_definition_id(scale_id: str) -> str:
        return f"grade-{scale_id.strip().lower()}{settings.PROTECTED_ID_SUFFIX}"

    def _find(self, definitions: Sequence[GradeDefinition], definition_id: str) -> GradeDefinition:
        for definition in definitions:
            if definition.id == definition_id:
                return definition
        raise NotFoundError("Grade definition", definition_id)

    def _build(
        self,
        normalized: NormalizedDefinition,
        definition_id: str,
        origin: DefinitionOrigin = DefinitionOrigin.CUSTOM,
        template_id: Optional[str] = None,
        is_default: bool = False
    ) -> GradeDefinition:
        return GradeDefinition(
            id=definition_id,
            school_id=self.school_id,
            name=normalized.name,
            code=normalized.code,
            description=normalized.description,
            is_default=is_default,
            grade_ranges=normalized.grade_ranges,
            origin=origin,
            template_id=template_id,
        )

    def _place_default(
        self,
        definitions: List[GradeDefinition],
        definition: GradeDefinition,
        make_default: bool
    ) -> List[GradeDefinition]:
        if make_default or get_default(definitions) is None:
            return set_default(definitions, definition.id)
        return definitions

    def _warn_duplicate_code(self, definitions: Sequence[GradeDefinition], definition: GradeDefinition):
        if definition.code and definition.code.upper() in duplicate_codes(definitions):
            logger.warning(
                "Grade definition code %s is used more than once in school %s",
                definition.code, self.school_id
            )

    def create(self, definitions: Sequence[GradeDefinition], candidate: Candidate) -> DefinitionChange:
        """Validate a custom definition and add it to the collection"""
        result = validate_or_raise(candidate)
        definition = self._build(result.definition, str(uuid.uuid4()))
        updated = self._place_default(
            list(definitions) + [definition], definition, result.definition.is_default
        )
        created = self._find(updated, definition.id)
        self._warn_duplicate_code(updated, created)

        logger.info(
            "Created grade definition %s (%s) for school %s", created.id, created.name, self.school_id
        )
        return DefinitionChange(definitions=updated, definition=created, warnings=result.warnings)

    def create_from_template(
        self,
        definitions: Sequence[GradeDefinition],
        scale_id: str,
        name: Optional[str] = None,
        is_default: bool = False
    ) -> DefinitionChange:
        """Instantiate a built-in scale as a protected, template-seeded definition"""
        template = get_template(scale_id)
        definition_id = self.template_definition_id(template.scale_id)
        if any(d.id == definition_id for d in definitions):
            raise DuplicateDefinitionError(definition_id)

        definition = GradeDefinition(
            id=definition_id,
            school_id=self.school_id,
            name=name or template.name,
            code=template.code,
            description=template.description,
            grade_ranges=template.ranges,
            origin=DefinitionOrigin.STANDARD_TEMPLATE,
            template_id=template.scale_id,
        )
        updated = self._place_default(list(definitions) + [definition], definition, is_default)
        created = self._find(updated, definition_id)

        logger.info("Seeded %s grade definition for school %s", template.code, self.school_id)
        return DefinitionChange(definitions=updated, definition=created)

    def seed_standard_definitions(self, scale_ids: Optional[Sequence[str]] = None) -> List[GradeDefinition]:
        """Initial definitions for a new school, with the configured scale as default"""
        definitions: List[GradeDefinition] = []
        for scale_id in scale_ids or settings.SEED_SCALES:
            definitions = self.create_from_template(definitions, scale_id).definitions

        default_id = self.template_definition_id(settings.DEFAULT_SCALE)
        if any(d.id == default_id for d in definitions):
            return set_default(definitions, default_id)
        return ensure_default(definitions)

    def update(
        self,
        definitions: Sequence[GradeDefinition],
        definition_id: str,
        candidate: Candidate
    ) -> DefinitionChange:
        """Replace a definition's fields and full range set.

        Standard-template definitions are never changed: the edit is saved as
        a new custom copy which is appended to the collection and returned.
        ``is_default=True`` on the candidate moves the default to the result;
        ``False`` leaves the current default where it is.
        """
        existing = self._find(definitions, definition_id)
        result = validate_or_raise(candidate)
        normalized = result.definition

        if existing.is_protected:
            replacement = self._build(normalized, str(uuid.uuid4()))
            updated = list(definitions) + [replacement]
            logger.info(
                "Grade definition %s is a standard template, saved edits as copy %s",
                existing.id, replacement.id
            )
        else:
            replacement = self._build(
                normalized, existing.id, existing.origin, existing.template_id, existing.is_default
            )
            updated = [replacement if d.id == existing.id else d for d in definitions]
            logger.info("Updated grade definition %s for school %s", existing.id, self.school_id)

        if normalized.is_default:
            updated = set_default(updated, replacement.id)
        replacement = self._find(updated, replacement.id)
        self._warn_duplicate_code(updated, replacement)

        return DefinitionChange(definitions=updated, definition=replacement, warnings=result.warnings)

    def update_ranges(
        self,
        definitions: Sequence[GradeDefinition],
        definition_id: str,
        changes: Mapping[str, RangeChanges]
    ) -> DefinitionChange:
        """Edit several tiers, keyed by grade, and re-validate the whole set.

        Moving a boundary needs both neighbouring tiers changed together, so
        all edits are applied before validation.
        """
        existing = self._find(definitions, definition_id)
        rows = [r.to_create() for r in existing.grade_ranges]
        by_grade = {row.grade: index for index, row in enumerate(rows)}

        for grade, change in changes.items():
            if grade not in by_grade:
                raise NotFoundError("Grade range", grade)
            if isinstance(change, dict):
                change = GradeRangeUpdate.model_validate(change)
            index = by_grade[grade]
            merged = {**rows[index].model_dump(), **change.model_dump(exclude_unset=True)}
            rows[index] = GradeRangeCreate(**merged)

        candidate = GradeDefinitionCreate(
            name=existing.name,
            code=existing.code,
            description=existing.description,
            is_default=False,
            grade_ranges=rows,
        )
        return self.update(definitions, definition_id, candidate)

    def update_range(
        self,
        definitions: Sequence[GradeDefinition],
        definition_id: str,
        grade: str,
        changes: RangeChanges
    ) -> DefinitionChange:
        return self.update_ranges(definitions, definition_id, {grade: changes})

    def delete(
        self,
        definitions: Sequence[GradeDefinition],
        definition_id: str,
        exam_configurations: Sequence[ExamGradeConfiguration] = ()
    ) -> DefinitionChange:
        """Remove a custom definition no exam configuration still points at"""
        existing = self._find(definitions, definition_id)
        if existing.is_protected:
            logger.warning("Refused to delete standard grade definition %s", definition_id)
            raise ProtectedDefinitionError(definition_id)
        exam_ids = exams_using(exam_configurations, definition_id)
        if exam_ids:
            logger.warning("Refused to delete grade definition %s used by exams %s", definition_id, exam_ids)
            raise DefinitionInUseError(definition_id, exam_ids)

        remaining = [d for d in definitions if d.id != definition_id]
        if existing.is_default and remaining:
            remaining = set_default(remaining, remaining[0].id)
            logger.info("Default grade definition deleted, %s is now default", remaining[0].id)

        logger.info("Deleted grade definition %s for school %s", definition_id, self.school_id)
        return DefinitionChange(definitions=remaining, definition=existing)

    def set_default(self, definitions: Sequence[GradeDefinition], definition_id: str) -> DefinitionChange:
        updated = set_default(definitions, definition_id)
        logger.info("Grade definition %s set as default for school %s", definition_id, self.school_id)
        return DefinitionChange(definitions=updated, definition=self._find(updated, definition_id))


def duplicate_codes(definitions: Sequence[GradeDefinition]) -> Dict[str, List[str]]:
    """Codes (upper-cased) shared by more than one definition, with their ids"""
    by_code: Dict[str, List[str]] = {}
    for definition in definitions:
        if definition.code:
            by_code.setdefault(definition.code.upper(), []).append(definition.id)
    return {code: ids for code, ids in by_code.items() if len(ids) > 1}
