"""Pydantic models."""
from assessment_api.models.attempts import (
    AssessmentAttempt,
    AttemptAnswer,
    AttemptScore,
    CourseProgress,
    Evaluation,
    KnowledgeProgress,
    QuestionCheckResult,
    SubmitAttemptRequest,
    SubmitAttemptResult,
    TopicBreakdown,
)
from assessment_api.models.content import (
    AddTestItemRequest,
    BlocksSaveRequest,
    ContentSaveRequest,
    Course,
    CourseContentItem,
    CourseMaterialBlock,
    Lesson,
    LessonContentItem,
    MoveItemRequest,
    Purchase,
    TestContentItem,
)
from assessment_api.models.sessions import (
    AssessmentSession,
    SessionDraft,
    SessionUpsertRequest,
    make_session_key,
)
from assessment_api.models.state import AssessmentsState, parse_sessions_map
from assessment_api.models.templates import (
    AnswerSpec,
    AnswerTolerance,
    AssessmentAttachment,
    AssessmentLinkRef,
    AssessmentQuestion,
    FormatRules,
    QuestionFeedback,
    QuestionPrompt,
    RecommendationLink,
    RecommendationMapItem,
    TemplateDraft,
    TemplateOwnerRequest,
    TestTemplate,
    TestTemplateSnapshot,
)

__all__ = [
    "AddTestItemRequest",
    "AnswerSpec",
    "AnswerTolerance",
    "AssessmentAttachment",
    "AssessmentAttempt",
    "AssessmentLinkRef",
    "AssessmentQuestion",
    "AssessmentSession",
    "AssessmentsState",
    "AttemptAnswer",
    "AttemptScore",
    "BlocksSaveRequest",
    "ContentSaveRequest",
    "Course",
    "CourseContentItem",
    "CourseMaterialBlock",
    "CourseProgress",
    "Evaluation",
    "FormatRules",
    "KnowledgeProgress",
    "Lesson",
    "LessonContentItem",
    "MoveItemRequest",
    "Purchase",
    "QuestionCheckResult",
    "QuestionFeedback",
    "QuestionPrompt",
    "RecommendationLink",
    "RecommendationMapItem",
    "SessionDraft",
    "SessionUpsertRequest",
    "SubmitAttemptRequest",
    "SubmitAttemptResult",
    "TemplateDraft",
    "TemplateOwnerRequest",
    "TestContentItem",
    "TestTemplate",
    "TestTemplateSnapshot",
    "TopicBreakdown",
    "make_session_key",
    "parse_sessions_map",
]
