from decimal import Decimal

import pytest

from grade_engine.core.exceptions import CorruptDefinitionError, NoDefaultDefinitionError, OutOfDomainError
from grade_engine.schemas.grade_definition_schemas import GradeDefinition, GradeRange
from grade_engine.services.resolution_service import (
    calculate_grade, format_grade, resolve, resolve_default, round_mark
)


class TestCBSEScenario:
    def test_inside_top_tier(self, cbse):
        grade_range = resolve(cbse, 95)
        assert (grade_range.grade, grade_range.grade_point) == ("A+", 10)

    def test_lower_boundary_is_inclusive(self, cbse):
        grade_range = resolve(cbse, 91)
        assert (grade_range.grade, grade_range.grade_point) == ("A+", 10)

    def test_adjacent_tier(self, cbse):
        grade_range = resolve(cbse, 90)
        assert (grade_range.grade, grade_range.grade_point) == ("A", 9)

    def test_pass_mark(self, cbse):
        assert resolve(cbse, 33).grade == "D"
        assert resolve(cbse, 32).grade == "E"
        assert resolve(cbse, 0).grade == "E"
        assert resolve(cbse, 100).grade == "A+"


class TestCoverage:
    def test_every_mark_resolves_in_every_seeded_definition(self, seeded):
        for definition in seeded:
            for mark in range(0, 101):
                grade_range = resolve(definition, mark)
                assert grade_range.min_marks <= mark <= grade_range.max_marks

    def test_boundaries_resolve_to_their_tier(self, service, pass_fail):
        definition = service.create([], pass_fail).definition
        for grade_range in definition.grade_ranges:
            assert resolve(definition, grade_range.min_marks) == grade_range
            assert resolve(definition, grade_range.max_marks) == grade_range

    def test_ranges_are_disjoint(self, seeded):
        for definition in seeded:
            ranges = definition.grade_ranges
            for lower, higher in zip(ranges, ranges[1:]):
                assert lower.max_marks < higher.min_marks


class TestFractionalMarks:
    def test_rounds_half_up(self, cbse):
        assert resolve(cbse, 90.5).grade == "A+"
        assert resolve(cbse, 90.49).grade == "A"
        assert resolve(cbse, Decimal("32.5")).grade == "D"

    def test_round_mark(self):
        assert round_mark(0.4) == 0
        assert round_mark(99.5) == 100
        assert round_mark(Decimal("70.50")) == 71


class TestOutOfDomain:
    @pytest.mark.parametrize("mark", [-1, -0.01, 100.01, 101, float("nan"), float("inf")])
    def test_rejected_not_clamped(self, cbse, mark):
        with pytest.raises(OutOfDomainError) as exc_info:
            resolve(cbse, mark)
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("mark", ["95", None, True])
    def test_non_numeric(self, cbse, mark):
        with pytest.raises(OutOfDomainError):
            resolve(cbse, mark)


class TestCorruptDefinition:
    def _unvalidated(self, ranges):
        # bypasses validation on purpose
        return GradeDefinition.model_construct(id="broken", name="Broken", grade_ranges=tuple(ranges))

    def test_gap_is_reported(self):
        definition = self._unvalidated([
            GradeRange(grade="F", min_marks=0, max_marks=49, grade_point=0),
            GradeRange(grade="P", min_marks=51, max_marks=100, grade_point=1),
        ])
        assert resolve(definition, 49).grade == "F"
        with pytest.raises(CorruptDefinitionError) as exc_info:
            resolve(definition, 50)
        assert exc_info.value.matches == 0
        assert exc_info.value.status_code == 500

    def test_overlap_is_reported(self):
        definition = self._unvalidated([
            GradeRange(grade="F", min_marks=0, max_marks=60, grade_point=0),
            GradeRange(grade="P", min_marks=50, max_marks=100, grade_point=1),
        ])
        with pytest.raises(CorruptDefinitionError) as exc_info:
            resolve(definition, 55)
        assert exc_info.value.matches == 2


class TestHelpers:
    def test_calculate_grade(self, cbse):
        calculation = calculate_grade(cbse, 72.4)
        assert calculation.grade == "B+"
        assert calculation.grade_point == 8
        assert (calculation.min_marks, calculation.max_marks) == (71, 80)
        assert calculation.description == "Very Good"
        assert calculation.percentage == 72.4
        assert calculation.model_dump(by_alias=True)["gradePoint"] == 8

    def test_resolve_default(self, seeded):
        assert resolve_default(seeded, 91).grade == "A+"

    def test_resolve_default_without_default(self):
        with pytest.raises(NoDefaultDefinitionError):
            resolve_default([], 50)

    def test_format_grade(self, cbse):
        assert format_grade(resolve(cbse, 95)) == "A+ (91-100%)"
