"""Progress aggregation over submitted attempts.

Pure functions over attempt lists in any order.
"""
from assessment_api.models.attempts import (
    AssessmentAttempt,
    CourseProgress,
    KnowledgeProgress,
)
from assessment_api.models.content import CourseContentItem, LessonContentItem
from assessment_api.utils.time_utils import timestamp_sort_key
from assessment_api.utils.validation import clamp_non_negative_int, round_half_up


def _newest_first(attempts: list[AssessmentAttempt]) -> list[AssessmentAttempt]:
    return sorted(
        attempts, key=lambda attempt: timestamp_sort_key(attempt.submittedAt), reverse=True
    )


def latest_attempts_by_item(attempts: list[AssessmentAttempt]) -> dict[str, AssessmentAttempt]:
    """Most recently submitted attempt per test item."""
    latest: dict[str, AssessmentAttempt] = {}
    for attempt in _newest_first(attempts):
        latest.setdefault(attempt.testItemId, attempt)
    return latest


def best_attempts_by_item(attempts: list[AssessmentAttempt]) -> dict[str, AssessmentAttempt]:
    """Highest percent per test item; the most recent attempt wins ties."""
    best: dict[str, AssessmentAttempt] = {}
    for attempt in _newest_first(attempts):
        current = best.get(attempt.testItemId)
        if current is None or attempt.score.percent > current.score.percent:
            best[attempt.testItemId] = attempt
    return best


def _average_percent(attempts: list[AssessmentAttempt]) -> int:
    if not attempts:
        return 0
    return round_half_up(sum(attempt.score.percent for attempt in attempts) / len(attempts))


def course_progress(
    latest: dict[str, AssessmentAttempt], test_item_ids: list[str]
) -> CourseProgress:
    relevant = [latest[item_id] for item_id in test_item_ids if item_id in latest]
    return CourseProgress(
        totalTests=len(test_item_ids),
        completedTests=len(relevant),
        averageLatestPercent=_average_percent(relevant),
    )


def knowledge_progress(
    best: dict[str, AssessmentAttempt], test_item_ids: list[str]
) -> KnowledgeProgress:
    relevant = [best[item_id] for item_id in test_item_ids if item_id in best]
    return KnowledgeProgress(
        totalTests=len(test_item_ids),
        completedTests=len(relevant),
        averageBestPercent=_average_percent(relevant),
    )


def grade_label(percent: int) -> str:
    if percent >= 85:
        return "Excellent"
    if percent >= 70:
        return "Good"
    if percent >= 50:
        return "Satisfactory"
    return "Unsatisfactory"


def grade_tone(percent: int) -> str:
    """UI tone matching `grade_label`."""
    if percent >= 85:
        return "success"
    if percent >= 70:
        return "info"
    if percent >= 50:
        return "warning"
    return "error"


def format_spent_time(seconds: float) -> str:
    """Human readable duration, e.g. ``1 h 2 min 3 s``."""
    safe = clamp_non_negative_int(seconds)
    hours, rest = divmod(safe, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours} h {minutes} min {secs} s"
    if minutes > 0:
        return f"{minutes} min {secs} s"
    return f"{secs} s"


def unanswered_question_indexes(question_ids: list[str], answers: dict[str, str]) -> list[int]:
    """1-based positions of questions with a blank answer."""
    return [
        index
        for index, question_id in enumerate(question_ids, start=1)
        if not str(answers.get(question_id) or "").strip()
    ]


def missing_prerequisites(
    queue: list[CourseContentItem], test_item_id: str, viewed_lesson_ids: list[str]
) -> list[LessonContentItem]:
    """Lesson items placed before the test that the student has not opened."""
    target_index = next(
        (index for index, item in enumerate(queue) if item.id == test_item_id), -1
    )
    if target_index <= 0:
        return []
    viewed = set(viewed_lesson_ids)
    return [
        item
        for item in queue[:target_index]
        if isinstance(item, LessonContentItem) and item.lessonId not in viewed
    ]
