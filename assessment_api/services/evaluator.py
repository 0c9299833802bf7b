"""Answer evaluator.

Pure functions: a template and raw answers in, per-question verdicts,
score, topic breakdown and recommendations out.
"""
import math
import re

from assessment_api.models.attempts import (
    AttemptScore,
    CheckReason,
    Evaluation,
    QuestionCheckResult,
    TopicBreakdown,
)
from assessment_api.models.templates import (
    AnswerSpec,
    AnswerType,
    AssessmentQuestion,
    RecommendationLink,
    TestTemplate,
)
from assessment_api.utils.validation import round_half_up

UNASSIGNED_TOPIC = "unassigned"
EPSILON = 1e-9

_NUMBER_WITH_COMMA = re.compile(r"^[-+]?\d+([.,]\d+)?$")
_NUMBER_DOT_ONLY = re.compile(r"^[-+]?\d+(\.\d+)?$")
_FLOAT_LITERAL = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")
_WHITESPACE = re.compile(r"\s+")


def looks_like_number(value: str, allow_comma_decimal: bool = True) -> bool:
    pattern = _NUMBER_WITH_COMMA if allow_comma_decimal else _NUMBER_DOT_ONLY
    return bool(pattern.match(value.strip()))


def detect_answer_type(
    expected: str | list[str], allow_comma_decimal: bool = True
) -> AnswerType:
    """Classify an expected answer as `number` or `text`."""
    source = expected if isinstance(expected, list) else [expected]
    variants = [item.strip() for item in source if item and item.strip()]
    if not variants:
        return "text"
    if all(looks_like_number(item, allow_comma_decimal) for item in variants):
        return "number"
    return "text"


def resolve_answer_type(spec: AnswerSpec) -> AnswerType:
    """Stored type, or the detected one for specs saved without a type."""
    if spec.type is not None:
        return spec.type
    return detect_answer_type(spec.expected, spec.allow_comma_decimal)


def normalize_answer(raw: str, spec: AnswerSpec) -> str:
    """Normalize a raw answer (or expected value) by the answer's format rules."""
    source = raw or ""
    if resolve_answer_type(spec) == "number":
        value = source.strip() if spec.trim_spaces else source
        if spec.allow_comma_decimal:
            value = value.replace(",", ".")
        return value

    value = source.strip()
    if spec.trim_spaces:
        value = _WHITESPACE.sub(" ", value)
    return value


def parse_number(value: str) -> float | None:
    """Parse a full numeric literal, None when it is not one."""
    candidate = value.strip()
    if not _FLOAT_LITERAL.match(candidate):
        return None
    number = float(candidate)
    return number if math.isfinite(number) else None


def _within_tolerance(actual: float, expected: float, spec: AnswerSpec) -> bool:
    tolerance = spec.tolerance
    if tolerance is None:
        return abs(actual - expected) <= EPSILON
    if tolerance.kind == "abs":
        return abs(actual - expected) <= tolerance.value + EPSILON
    base = 1.0 if abs(expected) <= EPSILON else abs(expected)
    return abs(actual - expected) / base <= tolerance.value + EPSILON


def _check_number(normalized: str, spec: AnswerSpec) -> tuple[bool, CheckReason]:
    if not normalized:
        return False, "invalid_format"
    actual = parse_number(normalized)
    if actual is None:
        return False, "invalid_format"

    expected_values = [
        number
        for number in (
            parse_number(normalize_answer(item, spec)) for item in spec.expected_variants()
        )
        if number is not None
    ]
    if not expected_values:
        return False, "invalid_format"

    if any(_within_tolerance(actual, expected, spec) for expected in expected_values):
        return True, "correct"
    return False, "incorrect"


def _check_text(normalized: str, spec: AnswerSpec) -> tuple[bool, CheckReason]:
    if not normalized:
        return False, "invalid_format"
    variants = {normalize_answer(item, spec).casefold() for item in spec.expected_variants()}
    if normalized.casefold() in variants:
        return True, "correct"
    return False, "incorrect"


def dedupe_recommendations(
    recommendations: list[RecommendationLink],
) -> list[RecommendationLink]:
    """Drop repeated recommendations, keeping first occurrences in order."""
    seen: set[tuple[str, str, str, str]] = set()
    unique: list[RecommendationLink] = []
    for recommendation in recommendations:
        identity = recommendation.identity()
        if identity in seen:
            continue
        seen.add(identity)
        unique.append(recommendation)
    return unique


def check_question(question: AssessmentQuestion, raw: str) -> QuestionCheckResult:
    """Check one raw answer against a question."""
    spec = question.answerSpec
    normalized = normalize_answer(raw, spec)

    if resolve_answer_type(spec) == "number":
        is_correct, reason = _check_number(normalized, spec)
    else:
        is_correct, reason = _check_text(normalized, spec)

    recommendations: list[RecommendationLink] = []
    if not is_correct:
        recommendations = dedupe_recommendations(question.feedback.recommendations or [])

    return QuestionCheckResult(
        questionId=question.id,
        raw=raw or "",
        normalized=normalized,
        isCorrect=is_correct,
        reason=reason,
        explanation=question.feedback.explanation,
        recommendations=recommendations,
    )


def build_topic_breakdown(
    questions: list[AssessmentQuestion], checked: list[QuestionCheckResult]
) -> list[TopicBreakdown]:
    """Correct/total per topic, in order of first appearance."""
    buckets: dict[str, TopicBreakdown] = {}
    for question, result in zip(questions, checked):
        topic_id = question.topicId or UNASSIGNED_TOPIC
        bucket = buckets.setdefault(topic_id, TopicBreakdown(topicId=topic_id))
        bucket.total += 1
        if result.isCorrect:
            bucket.correct += 1
    return list(buckets.values())


def evaluate_answers(template: TestTemplate, answers: dict[str, str]) -> Evaluation:
    """Evaluate all questions of a template."""
    checked = [
        check_question(question, answers.get(question.id, ""))
        for question in template.questions
    ]

    correct = sum(1 for item in checked if item.isCorrect)
    total = len(checked)
    percent = round_half_up(correct / total * 100) if total > 0 else 0

    recommendations = dedupe_recommendations(
        [recommendation for item in checked for recommendation in item.recommendations]
    )

    return Evaluation(
        checked=checked,
        score=AttemptScore(correct=correct, total=total, percent=percent),
        topicBreakdown=build_topic_breakdown(template.questions, checked),
        recommendations=recommendations,
    )
