"""Attempt, evaluation and progress models."""
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from assessment_api.models.common import NonNegativeInt, Text
from assessment_api.models.templates import RecommendationLink

CheckReason = Literal["correct", "incorrect", "invalid_format"]


class AttemptAnswer(BaseModel):
    questionId: str
    raw: Text = ""
    normalized: Text = ""
    isCorrect: bool = False


class AttemptScore(BaseModel):
    correct: NonNegativeInt = 0
    total: NonNegativeInt = 0
    percent: NonNegativeInt = 0


class TopicBreakdown(BaseModel):
    topicId: str
    correct: int = 0
    total: int = 0


class AssessmentAttempt(BaseModel):
    """Submitted attempt. Never mutated after creation."""

    id: str
    studentId: str
    courseId: str
    testItemId: str
    templateId: Text = ""
    startedAt: Text = ""
    submittedAt: str | None = None
    timeSpentSeconds: NonNegativeInt = 0
    answers: list[AttemptAnswer] = []
    score: AttemptScore = AttemptScore()
    topicBreakdown: list[TopicBreakdown] = []
    recommendationsComputed: list[RecommendationLink] = []


class QuestionCheckResult(BaseModel):
    questionId: str
    raw: str
    normalized: str
    isCorrect: bool
    reason: CheckReason
    explanation: str = ""
    recommendations: list[RecommendationLink] = []


class Evaluation(BaseModel):
    checked: list[QuestionCheckResult]
    score: AttemptScore
    topicBreakdown: list[TopicBreakdown]
    recommendations: list[RecommendationLink]


class SubmitAttemptRequest(BaseModel):
    """Model for submitting answers to a course test."""

    studentId: str = Field(..., min_length=1)
    courseId: str = Field(..., min_length=1)
    testItemId: str = Field(..., min_length=1)
    templateId: str | None = None
    answers: dict[str, str] = {}
    startedAt: str | None = None
    timeSpentSeconds: NonNegativeInt = 0

    @field_validator("answers", mode="before")
    @classmethod
    def _answers_as_text(cls, value: object) -> dict[str, str]:
        if not isinstance(value, dict):
            return {}
        return {str(key): "" if item is None else str(item) for key, item in value.items()}


class SubmitAttemptResult(BaseModel):
    attempt: AssessmentAttempt
    checked: list[QuestionCheckResult]


class CourseProgress(BaseModel):
    totalTests: int
    completedTests: int
    averageLatestPercent: int


class KnowledgeProgress(BaseModel):
    totalTests: int
    completedTests: int
    averageBestPercent: int
