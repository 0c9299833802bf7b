"""Test template models."""
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, field_validator

from assessment_api.models.common import (
    AssessmentKind,
    NonNegativeInt,
    TemplateStatus,
    Text,
)

AnswerType = Literal["text", "number"]


def _coerce_answer_type(value: object) -> str | None:
    if value is None:
        return None
    return "number" if value == "number" else "text"


def _coerce_attachment_type(value: object) -> str:
    return value if value in ("image", "pdf", "doc", "link") else "link"


def _coerce_tolerance_kind(value: object) -> str:
    return "rel" if value == "rel" else "abs"


class AssessmentLinkRef(BaseModel):
    courseId: str | None = None
    lessonId: str | None = None
    itemId: str | None = None


class AssessmentAttachment(BaseModel):
    id: str
    name: Text = ""
    url: Text = ""
    type: Annotated[
        Literal["image", "pdf", "doc", "link"], BeforeValidator(_coerce_attachment_type)
    ] = "link"


class RecommendationLink(BaseModel):
    """Study recommendation shown after a wrong answer."""

    text: Text
    link: AssessmentLinkRef | None = None

    def identity(self) -> tuple[str, str, str, str]:
        """Key used to deduplicate recommendations."""
        link = self.link or AssessmentLinkRef()
        return (
            self.text,
            link.courseId or "",
            link.lessonId or "",
            link.itemId or "",
        )


class RecommendationMapItem(BaseModel):
    topicId: str
    label: Text = ""
    link: AssessmentLinkRef | None = None


class AnswerTolerance(BaseModel):
    kind: Annotated[Literal["abs", "rel"], BeforeValidator(_coerce_tolerance_kind)] = "abs"
    value: float = 0.0

    @field_validator("value", mode="before")
    @classmethod
    def _non_negative(cls, value: object) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0.0
        return max(0.0, float(value))


class FormatRules(BaseModel):
    allowCommaDecimal: bool | None = None
    trimSpaces: bool | None = None


class AnswerSpec(BaseModel):
    type: Annotated[AnswerType | None, BeforeValidator(_coerce_answer_type)] = None
    expected: str | list[str] = ""
    tolerance: AnswerTolerance | None = None
    formatRules: FormatRules | None = None

    @field_validator("expected", mode="before")
    @classmethod
    def _expected_as_text(cls, value: object) -> str | list[str]:
        if isinstance(value, list):
            return [str(item) for item in value if item is not None]
        if value is None:
            return ""
        return str(value)

    def expected_variants(self) -> list[str]:
        """Expected answers as a list."""
        if isinstance(self.expected, list):
            return list(self.expected)
        return [self.expected]

    @property
    def trim_spaces(self) -> bool:
        rules = self.formatRules
        return True if rules is None or rules.trimSpaces is None else rules.trimSpaces

    @property
    def allow_comma_decimal(self) -> bool:
        rules = self.formatRules
        if rules is None or rules.allowCommaDecimal is None:
            return True
        return rules.allowCommaDecimal


class QuestionPrompt(BaseModel):
    text: Text = ""
    attachments: list[AssessmentAttachment] | None = None


class QuestionFeedback(BaseModel):
    explanation: Text = ""
    recommendations: list[RecommendationLink] | None = None


class AssessmentQuestion(BaseModel):
    id: str
    prompt: QuestionPrompt = QuestionPrompt()
    topicId: str | None = None
    answerSpec: AnswerSpec = AnswerSpec()
    feedback: QuestionFeedback = QuestionFeedback()


class TestTemplate(BaseModel):
    """Teacher-authored test, mutable until frozen into course placements."""

    id: str
    title: Text = ""
    description: Text = ""
    durationMinutes: NonNegativeInt = 0
    assessmentKind: AssessmentKind = "credit"
    createdByTeacherId: Text = ""
    createdAt: Text = ""
    updatedAt: Text = ""
    questions: list[AssessmentQuestion] = []
    recommendationMap: list[RecommendationMapItem] | None = None
    status: TemplateStatus = "draft"
    deletedAt: str | None = None


class TestTemplateSnapshot(BaseModel):
    """Frozen gradeable content of a template."""

    title: Text = ""
    description: Text = ""
    durationMinutes: NonNegativeInt = 0
    assessmentKind: AssessmentKind = "credit"
    questions: list[AssessmentQuestion] = []
    recommendationMap: list[RecommendationMapItem] | None = None


class TemplateDraft(BaseModel):
    """Model for creating or updating a template."""

    id: str | None = None
    title: Text = ""
    description: Text = ""
    durationMinutes: NonNegativeInt = 0
    assessmentKind: AssessmentKind = "credit"
    createdByTeacherId: str
    questions: list[AssessmentQuestion] = []
    recommendationMap: list[RecommendationMapItem] | None = None
    status: TemplateStatus = "draft"


class TemplateOwnerRequest(BaseModel):
    """Model for owner-only template actions."""

    teacherId: str
