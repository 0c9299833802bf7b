"""In-progress test session models."""
from pydantic import BaseModel, Field, field_validator

from assessment_api.models.common import NonNegativeInt, Text


def make_session_key(student_id: str, course_id: str, test_item_id: str) -> str:
    """Composite key of a session."""
    return f"{student_id}:{course_id}:{test_item_id}"


def _answers_as_text(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(key): "" if item is None else str(item) for key, item in value.items()}


class SessionDraft(BaseModel):
    """Model for autosaving a session (key and updatedAt are assigned)."""

    studentId: str = Field(..., min_length=1)
    courseId: str = Field(..., min_length=1)
    testItemId: str = Field(..., min_length=1)
    templateId: Text = ""
    startedAt: Text = ""
    remainingSeconds: NonNegativeInt = 0
    currentQuestionIndex: NonNegativeInt = 0
    answers: dict[str, str] = {}

    @field_validator("answers", mode="before")
    @classmethod
    def _answers(cls, value: object) -> dict[str, str]:
        return _answers_as_text(value)


class AssessmentSession(BaseModel):
    key: str
    studentId: str
    courseId: str
    testItemId: str
    templateId: Text = ""
    startedAt: Text = ""
    updatedAt: str
    remainingSeconds: NonNegativeInt = 0
    currentQuestionIndex: NonNegativeInt = 0
    answers: dict[str, str] = {}

    @field_validator("answers", mode="before")
    @classmethod
    def _answers(cls, value: object) -> dict[str, str]:
        return _answers_as_text(value)


class SessionUpsertRequest(BaseModel):
    """Model for the session autosave endpoint."""

    studentId: str = Field(..., min_length=1)
    templateId: Text = ""
    startedAt: Text = ""
    remainingSeconds: NonNegativeInt = 0
    currentQuestionIndex: NonNegativeInt = 0
    answers: dict[str, str] = {}

    @field_validator("answers", mode="before")
    @classmethod
    def _answers(cls, value: object) -> dict[str, str]:
        return _answers_as_text(value)
