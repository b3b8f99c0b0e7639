# grade_engine/core/exceptions.py
"""Custom exceptions for the grade engine."""
from typing import Any, Dict, Optional


class GradingException(Exception):
    """Base exception for the grading engine"""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "type": self.__class__.__name__}


class GradeValidationError(GradingException):
    """Raised when a candidate grade definition fails validation."""
    def __init__(self, failure):
        self.failure = failure
        super().__init__(failure.reason, 422)

    def to_dict(self) -> Dict[str, Any]:
        detail = super().to_dict()
        detail["offendingRanges"] = [
            r.model_dump(by_alias=True) for r in self.failure.offending_ranges
        ]
        return detail


class NotFoundError(GradingException):
    """Resource not found exception"""
    def __init__(self, resource: str, id: Optional[str] = None):
        message = f"{resource} not found"
        if id:
            message += f" with id: {id}"
        super().__init__(message, 404)


class TemplateNotFoundError(NotFoundError):
    """Exception raised when a standard scale id is not in the catalog."""
    def __init__(self, scale_id: str):
        self.scale_id = scale_id
        super().__init__("Grading scale template", scale_id)


class NoDefaultDefinitionError(NotFoundError):
    """Exception raised when a school has no default grade definition."""
    def __init__(self):
        super().__init__("Default grade definition")


class ProtectedDefinitionError(GradingException):
    """Exception raised on an attempt to delete a standard-template definition."""
    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(
            "Cannot delete default standards. You can set a different standard as default instead.",
            409
        )


class DuplicateDefinitionError(GradingException):
    """Exception raised when a standard scale is seeded twice for a school."""
    def __init__(self, definition_id: str):
        self.definition_id = definition_id
        super().__init__(f"Grade definition already exists with id: {definition_id}", 409)


class OutOfDomainError(GradingException):
    """Mark outside the 0-100 percentage domain."""
    def __init__(self, mark: Any):
        self.mark = mark
        super().__init__(f"Mark must be a percentage between 0 and 100. Found: {mark!r}", 400)


class CorruptDefinitionError(GradingException):
    """Grade definition does not map a mark to exactly one range."""
    def __init__(self, definition_id: str, mark: Any, matches: int):
        self.definition_id = definition_id
        self.mark = mark
        self.matches = matches
        super().__init__(
            f"Grade definition {definition_id} has {matches} ranges for mark {mark}",
            500
        )


class VersionConflictError(GradingException):
    """Exception raised when a store commit is based on a stale version."""
    def __init__(self, school_id: str, expected: int, actual: int):
        self.school_id = school_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Grade definitions for school {school_id} changed (expected version {expected}, found {actual})",
            409
        )


class ExamConfigurationExistsError(GradingException):
    """Exception raised when an exam already has a grade configuration."""
    def __init__(self, exam_id: str):
        self.exam_id = exam_id
        super().__init__(f"Grade configuration already exists for exam: {exam_id}", 409)


class DefinitionInUseError(GradingException):
    """Exception raised on deleting a grade definition that exams still grade with."""
    def __init__(self, definition_id: str, exam_ids):
        self.definition_id = definition_id
        self.exam_ids = list(exam_ids)
        super().__init__(
            f"Grade definition {definition_id} is used by exams: {', '.join(self.exam_ids)}",
            409
        )
