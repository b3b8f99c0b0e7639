# grade_engine/schemas/grade_definition_schemas.py
"""Pydantic schemas for grade definitions and grade ranges.

Python attributes are snake_case; the persisted record and form payloads use
camelCase (``minMarks``, ``gradePoint``, ``isDefault`` ...). Both spellings are
accepted on input.
"""
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class DefinitionOrigin(str, Enum):
    STANDARD_TEMPLATE = "standard-template"
    CUSTOM = "custom"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Candidate input (raw form rows, checked by the validation service)
class GradeRangeCreate(CamelModel):
    grade: str = Field(default="", description="Letter grade, e.g. A+")
    min_marks: int = Field(..., description="Lowest percentage in the tier (inclusive)")
    max_marks: int = Field(..., description="Highest percentage in the tier (inclusive)")
    grade_point: float = Field(..., description="Grade point for the tier")
    description: Optional[str] = None
    display_order: Optional[int] = None


class GradeRangeUpdate(CamelModel):
    """Schema for editing one tier - all fields optional"""
    grade: Optional[str] = None
    min_marks: Optional[int] = None
    max_marks: Optional[int] = None
    grade_point: Optional[float] = None
    description: Optional[str] = None


class GradeDefinitionCreate(CamelModel):
    name: str = Field(default="", description="Display name of the grading scale")
    code: Optional[str] = Field(default=None, max_length=20)
    description: Optional[str] = None
    is_default: bool = False
    grade_ranges: List[GradeRangeCreate] = Field(default_factory=list)


# Accepted, immutable model
class GradeRange(CamelModel):
    model_config = ConfigDict(frozen=True)

    grade: str = Field(..., min_length=1)
    min_marks: int = Field(..., ge=0, le=100)
    max_marks: int = Field(..., ge=0, le=100)
    grade_point: float = Field(..., ge=0)
    description: Optional[str] = None
    display_order: Optional[int] = None

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.min_marks > self.max_marks:
            raise ValueError('min_marks cannot be greater than max_marks')
        return self

    def contains(self, mark: int) -> bool:
        return self.min_marks <= mark <= self.max_marks

    def to_create(self) -> GradeRangeCreate:
        return GradeRangeCreate(**self.model_dump())


class GradeDefinition(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    school_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    code: Optional[str] = None
    description: Optional[str] = None
    is_default: bool = False
    grade_ranges: Tuple[GradeRange, ...] = Field(..., min_length=1)
    origin: DefinitionOrigin = DefinitionOrigin.CUSTOM
    template_id: Optional[str] = None

    @field_validator('grade_ranges')
    @classmethod
    def sort_ranges(cls, v):
        return tuple(sorted(v, key=lambda r: r.min_marks))

    @property
    def is_protected(self) -> bool:
        return self.origin == DefinitionOrigin.STANDARD_TEMPLATE

    def find_range(self, grade: str) -> Optional[GradeRange]:
        for grade_range in self.grade_ranges:
            if grade_range.grade == grade:
                return grade_range
        return None

    def to_candidate(self) -> GradeDefinitionCreate:
        return GradeDefinitionCreate(
            name=self.name,
            code=self.code,
            description=self.description,
            is_default=self.is_default,
            grade_ranges=[r.to_create() for r in self.grade_ranges],
        )

    def to_record(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GradeDefinition":
        return cls.model_validate(record)


class StandardScale(CamelModel):
    model_config = ConfigDict(frozen=True)

    scale_id: str
    name: str
    code: str
    description: Optional[str] = None
    ranges: Tuple[GradeRange, ...]


# Results
class ValidationFailure(CamelModel):
    reason: str
    offending_ranges: List[GradeRangeCreate] = Field(default_factory=list)


class GradeWarning(CamelModel):
    message: str
    ranges: List[GradeRange] = Field(default_factory=list)


class NormalizedDefinition(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    is_default: bool = False
    grade_ranges: Tuple[GradeRange, ...]


class ValidationResult(CamelModel):
    definition: Optional[NormalizedDefinition] = None
    failure: Optional[ValidationFailure] = None
    warnings: List[GradeWarning] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.failure is None


class GradeCalculation(CamelModel):
    grade: str
    grade_point: float
    min_marks: int
    max_marks: int
    description: Optional[str] = None
    percentage: float


class DefinitionChange(CamelModel):
    definitions: List[GradeDefinition]
    definition: Optional[GradeDefinition] = None
    warnings: List[GradeWarning] = Field(default_factory=list)


# Exam grade configuration
class ExamGradeConfigurationCreate(CamelModel):
    exam_id: str = Field(..., min_length=1)
    grade_definition_id: str = Field(..., min_length=1)
    auto_calculate_grades: bool = True


class ExamGradeConfigurationUpdate(CamelModel):
    """Schema for re-pointing an exam - all fields optional"""
    grade_definition_id: Optional[str] = None
    auto_calculate_grades: Optional[bool] = None


class ExamGradeConfiguration(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    school_id: Optional[str] = None
    exam_id: str
    grade_definition_id: str
    auto_calculate_grades: bool = True
    created_at: datetime
    updated_at: datetime


class ExamConfigChange(CamelModel):
    configurations: List[ExamGradeConfiguration]
    configuration: Optional[ExamGradeConfiguration] = None
