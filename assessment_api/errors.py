"""Domain errors raised by the assessment services.

All errors are raised before any state is mutated and carry a message meant
to be shown to the end user as is.
"""
from typing import Any

from fastapi import HTTPException, status


class AssessmentError(HTTPException):
    """Base error for the assessment engine."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: str,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code
        self.extra = extra or {}

    def __str__(self) -> str:
        return str(self.detail)


class AssessmentValidationError(AssessmentError):
    """User-correctable input problem."""

    def __init__(self, detail: str, **extra: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            extra=extra,
        )


class AssessmentPermissionError(AssessmentError):
    """Caller does not own the resource."""

    def __init__(self, detail: str, **extra: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code="FORBIDDEN",
            extra=extra,
        )


class AssessmentConflictError(AssessmentError):
    """Operation conflicts with existing state."""

    def __init__(self, detail: str, **extra: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            error_code="CONFLICT",
            extra=extra,
        )


class AssessmentNotFoundError(AssessmentError):
    """Referenced entity does not exist."""

    def __init__(self, detail: str, error_code: str = "NOT_FOUND", **extra: Any):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            error_code=error_code,
            extra=extra,
        )


class TemplateNotFoundError(AssessmentNotFoundError):
    def __init__(self, template_id: str):
        super().__init__(
            "Test template not found.",
            error_code="TEMPLATE_NOT_FOUND",
            template_id=template_id,
        )


class CourseNotFoundError(AssessmentNotFoundError):
    def __init__(self, course_id: str):
        super().__init__(
            "Course not found.",
            error_code="COURSE_NOT_FOUND",
            course_id=course_id,
        )


class TestItemNotFoundError(AssessmentNotFoundError):
    def __init__(self, course_id: str, test_item_id: str):
        super().__init__(
            "Test is not part of this course.",
            error_code="TEST_ITEM_NOT_FOUND",
            course_id=course_id,
            test_item_id=test_item_id,
        )
