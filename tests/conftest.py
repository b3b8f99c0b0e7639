import pytest

from grade_engine.schemas.grade_definition_schemas import GradeDefinitionCreate, GradeRangeCreate
from grade_engine.services.grade_definition_service import GradeDefinitionService

SCHOOL_ID = "school-001"


@pytest.fixture()
def service():
    return GradeDefinitionService(SCHOOL_ID)


@pytest.fixture()
def seeded(service):
    """CBSE, State and ICSE definitions as a new school starts with them."""
    return service.seed_standard_definitions()


@pytest.fixture()
def cbse(seeded):
    return next(d for d in seeded if d.id == "grade-cbse-default")


def make_candidate(rows, name="Pass/Fail", **kwargs):
    return GradeDefinitionCreate(
        name=name,
        grade_ranges=[
            GradeRangeCreate(grade=grade, min_marks=low, max_marks=high, grade_point=points)
            for grade, low, high, points in rows
        ],
        **kwargs
    )


@pytest.fixture()
def pass_fail():
    return make_candidate([("P", 40, 100, 1), ("F", 0, 39, 0)], code="PF")
