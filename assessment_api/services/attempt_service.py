"""Service layer for submitted attempts and progress."""
import logging

from assessment_api.errors import TemplateNotFoundError, TestItemNotFoundError
from assessment_api.models.attempts import (
    AssessmentAttempt,
    AttemptAnswer,
    CourseProgress,
    KnowledgeProgress,
    SubmitAttemptRequest,
    SubmitAttemptResult,
)
from assessment_api.models.content import TestContentItem
from assessment_api.services.evaluator import evaluate_answers
from assessment_api.services.progress_service import (
    best_attempts_by_item,
    course_progress,
    knowledge_progress,
    latest_attempts_by_item,
)
from assessment_api.services.snapshot_service import resolve_template_for_test_item
from assessment_api.storage.adapters import AssessmentsStateAdapter
from assessment_api.utils.time_utils import timestamp_sort_key, utc_now
from assessment_api.utils.validation import generate_id

logger = logging.getLogger(__name__)


async def submit_assessment_attempt(
    store: AssessmentsStateAdapter, request: SubmitAttemptRequest
) -> SubmitAttemptResult:
    """
    Grade answers against the test item's effective template and record the attempt.

    The frozen snapshot of the item is preferred over the live template.

    Raises:
        TestItemNotFoundError: the course queue has no such test item
        TemplateNotFoundError: neither a snapshot nor the live template exists
    """
    state = await store.read_state()
    queue = state.courseContent.get(request.courseId, [])
    test_item = next(
        (
            item
            for item in queue
            if isinstance(item, TestContentItem) and item.id == request.testItemId
        ),
        None,
    )
    if test_item is None:
        raise TestItemNotFoundError(request.courseId, request.testItemId)

    template = resolve_template_for_test_item(state.templates, test_item)
    if template is None:
        raise TemplateNotFoundError(test_item.templateId)

    evaluation = evaluate_answers(template, request.answers)
    submitted_at = utc_now()
    attempt = AssessmentAttempt(
        id=generate_id(),
        studentId=request.studentId,
        courseId=request.courseId,
        testItemId=request.testItemId,
        templateId=template.id,
        startedAt=request.startedAt or submitted_at,
        submittedAt=submitted_at,
        timeSpentSeconds=request.timeSpentSeconds,
        answers=[
            AttemptAnswer(
                questionId=item.questionId,
                raw=item.raw,
                normalized=item.normalized,
                isCorrect=item.isCorrect,
            )
            for item in evaluation.checked
        ],
        score=evaluation.score,
        topicBreakdown=evaluation.topicBreakdown,
        recommendationsComputed=evaluation.recommendations,
    )

    state.attempts = [*state.attempts, attempt]
    await store.write_state(state, "assessment-attempt-submit")
    logger.info(
        "Recorded attempt %s for item %s: %d%%",
        attempt.id,
        attempt.testItemId,
        attempt.score.percent,
    )
    return SubmitAttemptResult(attempt=attempt, checked=evaluation.checked)


async def get_assessment_attempts(
    store: AssessmentsStateAdapter,
    student_id: str,
    course_id: str,
    test_item_id: str | None = None,
) -> list[AssessmentAttempt]:
    """A student's attempts in a course, newest first."""
    state = await store.read_state()
    attempts = [
        attempt
        for attempt in state.attempts
        if attempt.studentId == student_id
        and attempt.courseId == course_id
        and (not test_item_id or attempt.testItemId == test_item_id)
    ]
    return sorted(
        attempts, key=lambda attempt: timestamp_sort_key(attempt.submittedAt), reverse=True
    )


async def get_latest_assessment_attempts_map(
    store: AssessmentsStateAdapter, student_id: str, course_id: str
) -> dict[str, AssessmentAttempt]:
    attempts = await get_assessment_attempts(store, student_id, course_id)
    return latest_attempts_by_item(attempts)


async def get_best_assessment_attempts_map(
    store: AssessmentsStateAdapter, student_id: str, course_id: str
) -> dict[str, AssessmentAttempt]:
    attempts = await get_assessment_attempts(store, student_id, course_id)
    return best_attempts_by_item(attempts)


async def get_assessment_course_progress(
    store: AssessmentsStateAdapter,
    student_id: str,
    course_id: str,
    test_item_ids: list[str],
) -> CourseProgress:
    """Completion and average of latest percents over the given test items."""
    latest = await get_latest_assessment_attempts_map(store, student_id, course_id)
    return course_progress(latest, test_item_ids)


async def get_assessment_knowledge_progress(
    store: AssessmentsStateAdapter,
    student_id: str,
    course_id: str,
    test_item_ids: list[str],
) -> KnowledgeProgress:
    """Same as course progress, over best attempts."""
    best = await get_best_assessment_attempts_map(store, student_id, course_id)
    return knowledge_progress(best, test_item_ids)
