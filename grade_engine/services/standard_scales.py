# grade_engine/services/standard_scales.py
"""Built-in grading scales (CBSE, State, ICSE and international variants)."""
from typing import Dict, List
import logging

from ..core.exceptions import TemplateNotFoundError
from ..schemas.grade_definition_schemas import GradeRange, StandardScale

logger = logging.getLogger(__name__)


def _ranges(rows) -> tuple:
    # rows are listed highest tier first
    return tuple(
        GradeRange(
            grade=grade,
            min_marks=low,
            max_marks=high,
            grade_point=points,
            description=description,
            display_order=order,
        )
        for order, (grade, low, high, points, description) in enumerate(rows, start=1)
    )


_CATALOG: Dict[str, StandardScale] = {
    # Indian standards
    "cbse": StandardScale(
        scale_id="cbse",
        name="CBSE (Central Board)",
        code="CBSE",
        description="Central Board of Secondary Education - Standard 8 Grade Scale",
        ranges=_ranges([
            ("A+", 91, 100, 10, "Outstanding"),
            ("A", 81, 90, 9, "Excellent"),
            ("B+", 71, 80, 8, "Very Good"),
            ("B", 61, 70, 7, "Good"),
            ("C+", 51, 60, 6, "Satisfactory"),
            ("C", 41, 50, 5, "Fair"),
            ("D", 33, 40, 4, "Needs Improvement"),
            ("E", 0, 32, 0, "Not Satisfactory"),
        ]),
    ),
    "state": StandardScale(
        scale_id="state",
        name="State Board (General)",
        code="STATE",
        description="General State Standards - 6 Grade Scale",
        ranges=_ranges([
            ("A", 80, 100, 9, "Excellent"),
            ("B", 70, 79, 7, "Good"),
            ("C", 60, 69, 5, "Satisfactory"),
            ("D", 50, 59, 3, "Fair"),
            ("E", 35, 49, 1, "Pass"),
            ("F", 0, 34, 0, "Fail"),
        ]),
    ),
    "icse": StandardScale(
        scale_id="icse",
        name="ICSE (Indian Certificate)",
        code="ICSE",
        description="Indian Certificate of Secondary Education - 7 Grade Scale",
        ranges=_ranges([
            ("A*", 90, 100, 10, "Outstanding"),
            ("A", 80, 89, 9, "Excellent"),
            ("B", 70, 79, 8, "Very Good"),
            ("C", 60, 69, 7, "Good"),
            ("D", 50, 59, 6, "Satisfactory"),
            ("E", 40, 49, 5, "Fair"),
            ("F", 0, 39, 0, "Fail"),
        ]),
    ),
    # International standards
    "standard": StandardScale(
        scale_id="standard",
        name="Standard (4.0)",
        code="STANDARD",
        description="Standard 4.0 grade point scale",
        ranges=_ranges([
            ("A+", 90, 100, 4.0, None),
            ("A", 80, 89, 3.8, None),
            ("B+", 70, 79, 3.5, None),
            ("B", 60, 69, 3.0, None),
            ("C+", 50, 59, 2.5, None),
            ("C", 40, 49, 2.0, None),
            ("D", 33, 39, 1.0, None),
            ("F", 0, 32, 0.0, None),
        ]),
    ),
    "simple": StandardScale(
        scale_id="simple",
        name="Simple (5 Grades)",
        code="SIMPLE",
        description="Simple five grade scale",
        ranges=_ranges([
            ("A", 75, 100, 4.0, None),
            ("B", 60, 74, 3.0, None),
            ("C", 45, 59, 2.0, None),
            ("D", 30, 44, 1.0, None),
            ("F", 0, 29, 0.0, None),
        ]),
    ),
    "international": StandardScale(
        scale_id="international",
        name="International",
        code="INTL",
        description="International six grade scale",
        ranges=_ranges([
            ("A*", 90, 100, 4.0, None),
            ("A", 80, 89, 3.7, None),
            ("B", 70, 79, 3.3, None),
            ("C", 60, 69, 3.0, None),
            ("D", 50, 59, 2.0, None),
            ("E", 0, 49, 0.0, None),
        ]),
    ),
}

INDIAN_SCALES = ("cbse", "state", "icse")


def get_template(scale_id: str) -> StandardScale:
    """Look up a built-in scale by id (``cbse``, ``state``, ``icse`` ...).

    Raises TemplateNotFoundError for an unknown id. The returned scale is
    frozen, so callers cannot alter the catalog through it.
    """
    key = (scale_id or "").strip().lower()
    template = _CATALOG.get(key)
    if template is None:
        logger.info("Unknown grading scale requested: %s", scale_id)
        raise TemplateNotFoundError(scale_id)
    return template


def list_templates() -> List[str]:
    return list(_CATALOG.keys())


def indian_standards() -> Dict[str, StandardScale]:
    return {scale_id: _CATALOG[scale_id] for scale_id in INDIAN_SCALES}
