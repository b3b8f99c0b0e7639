# grade_engine/services/default_policy.py
"""Single-default rule across a school's grade definitions."""
from typing import List, Optional, Sequence
import logging

from ..core.exceptions import NotFoundError
from ..schemas.grade_definition_schemas import GradeDefinition

logger = logging.getLogger(__name__)


def _with_default(definitions: Sequence[GradeDefinition], target_id: str) -> List[GradeDefinition]:
    return [
        d if d.is_default == (d.id == target_id) else d.model_copy(update={"is_default": d.id == target_id})
        for d in definitions
    ]


def set_default(definitions: Sequence[GradeDefinition], target_id: str) -> List[GradeDefinition]:
    """Return a new list where only ``target_id`` is flagged as default.

    The input is left untouched, and calling this twice with the same target
    gives the same result as calling it once.
    """
    if not any(d.id == target_id for d in definitions):
        raise NotFoundError("Grade definition", target_id)
    return _with_default(definitions, target_id)


def get_default(definitions: Sequence[GradeDefinition]) -> Optional[GradeDefinition]:
    for definition in definitions:
        if definition.is_default:
            return definition
    return None


def ensure_default(definitions: Sequence[GradeDefinition]) -> List[GradeDefinition]:
    """Repair a loaded collection so exactly one definition is default.

    Keeps the first flagged definition, or promotes the first definition when
    none is flagged. An empty collection stays empty.
    """
    if not definitions:
        return []
    current = get_default(definitions)
    target = current if current is not None else definitions[0]
    flagged = sum(1 for d in definitions if d.is_default)
    if flagged != 1:
        logger.warning(
            "Found %d default grade definitions, keeping %s as default", flagged, target.id
        )
    return _with_default(definitions, target.id)
