"""Service layer for test templates."""
import logging

from assessment_api.errors import (
    AssessmentConflictError,
    AssessmentPermissionError,
    AssessmentValidationError,
    TemplateNotFoundError,
)
from assessment_api.models.content import TestContentItem
from assessment_api.models.state import AssessmentsState
from assessment_api.models.templates import (
    AssessmentQuestion,
    TemplateDraft,
    TestTemplate,
)
from assessment_api.services.evaluator import detect_answer_type
from assessment_api.services.providers import PurchaseProvider
from assessment_api.services.snapshot_service import freeze_course_content
from assessment_api.storage.adapters import AssessmentsStateAdapter
from assessment_api.utils.time_utils import timestamp_sort_key, utc_now
from assessment_api.utils.validation import generate_id

logger = logging.getLogger(__name__)


def _question_has_content(question: AssessmentQuestion) -> bool:
    expected = question.answerSpec.expected_variants()
    return bool(
        question.prompt.text.strip()
        or any(item.strip() for item in expected)
        or question.feedback.explanation.strip()
    )


def validate_template(draft: TemplateDraft) -> None:
    """Raise a validation error when the draft cannot be saved with its status."""
    if draft.status == "draft":
        if draft.title.strip() or draft.description.strip():
            return
        if any(_question_has_content(question) for question in draft.questions):
            return
        raise AssessmentValidationError(
            "Add a title or at least one question to save a draft."
        )

    if not draft.title.strip():
        raise AssessmentValidationError("Enter the test title.")
    if draft.durationMinutes <= 0:
        raise AssessmentValidationError("Enter the test duration in minutes.")
    if not draft.questions:
        raise AssessmentValidationError("Add at least one question.")

    for index, question in enumerate(draft.questions, start=1):
        expected = [item for item in question.answerSpec.expected_variants() if item.strip()]
        if (
            not question.prompt.text.strip()
            or not expected
            or not question.feedback.explanation.strip()
        ):
            raise AssessmentValidationError(
                "Every question needs a prompt, a correct answer and an explanation.",
                question_index=index,
            )


def _with_detected_types(questions: list[AssessmentQuestion]) -> list[AssessmentQuestion]:
    """Fill in answer types for questions saved without one."""
    result = []
    for question in questions:
        spec = question.answerSpec
        if spec.type is not None:
            result.append(question)
            continue
        detected = detect_answer_type(spec.expected, spec.allow_comma_decimal)
        result.append(
            question.model_copy(
                update={"answerSpec": spec.model_copy(update={"type": detected})}
            )
        )
    return result


def _draft_of(template: TestTemplate) -> TemplateDraft:
    return TemplateDraft(
        id=template.id,
        title=template.title,
        description=template.description,
        durationMinutes=template.durationMinutes,
        assessmentKind=template.assessmentKind,
        createdByTeacherId=template.createdByTeacherId,
        questions=template.questions,
        recommendationMap=template.recommendationMap,
        status=template.status,
    )


async def get_templates_by_teacher(
    store: AssessmentsStateAdapter, teacher_id: str
) -> list[TestTemplate]:
    """Live templates of a teacher, most recently updated first."""
    state = await store.read_state()
    templates = [
        template
        for template in state.templates
        if template.createdByTeacherId == teacher_id and not template.deletedAt
    ]
    return sorted(
        templates, key=lambda template: timestamp_sort_key(template.updatedAt), reverse=True
    )


async def get_template_by_id(
    store: AssessmentsStateAdapter, template_id: str
) -> TestTemplate | None:
    state = await store.read_state()
    return next((template for template in state.templates if template.id == template_id), None)


async def save_template(store: AssessmentsStateAdapter, draft: TemplateDraft) -> TestTemplate:
    """
    Create or update a template.

    Placements of the template that have no snapshot yet are frozen with the
    version that existed before this save.
    """
    validate_template(draft)

    state = await store.read_state()
    timestamp = utc_now()
    existing = (
        next((template for template in state.templates if template.id == draft.id), None)
        if draft.id
        else None
    )
    if existing and existing.createdByTeacherId != draft.createdByTeacherId:
        raise AssessmentPermissionError("You cannot edit another teacher's template.")

    next_template = TestTemplate(
        id=existing.id if existing else draft.id or generate_id(),
        title=draft.title.strip(),
        description=draft.description.strip(),
        durationMinutes=draft.durationMinutes,
        assessmentKind=draft.assessmentKind,
        createdByTeacherId=draft.createdByTeacherId,
        createdAt=existing.createdAt if existing else timestamp,
        updatedAt=timestamp,
        questions=_with_detected_types(draft.questions),
        recommendationMap=draft.recommendationMap,
        status=draft.status,
        deletedAt=None,
    )

    if existing:
        state.templates = [
            next_template if template.id == existing.id else template
            for template in state.templates
        ]
        state.courseContent = freeze_course_content(state.courseContent, existing)
    else:
        state.templates = [*state.templates, next_template]

    await store.write_state(state, "assessment-template-save")
    logger.info("Saved template %s (%s)", next_template.id, next_template.status)
    return next_template


async def _owned_template(
    store: AssessmentsStateAdapter, template_id: str, teacher_id: str, action: str
) -> tuple[AssessmentsState, TestTemplate]:
    state = await store.read_state()
    template = next((item for item in state.templates if item.id == template_id), None)
    if template is None:
        raise TemplateNotFoundError(template_id)
    if template.createdByTeacherId != teacher_id:
        raise AssessmentPermissionError(f"You cannot {action} another teacher's template.")
    return state, template


async def publish_template(
    store: AssessmentsStateAdapter, template_id: str, teacher_id: str
) -> TestTemplate:
    state, template = await _owned_template(store, template_id, teacher_id, "publish")
    validate_template(_draft_of(template).model_copy(update={"status": "published"}))

    updated = template.model_copy(update={"status": "published", "updatedAt": utc_now()})
    state.templates = [updated if item.id == template_id else item for item in state.templates]
    await store.write_state(state, "assessment-template-publish")
    return updated


async def duplicate_template(
    store: AssessmentsStateAdapter, template_id: str, teacher_id: str
) -> TestTemplate:
    """Copy a template into the caller's library."""
    template = await get_template_by_id(store, template_id)
    if template is None:
        raise TemplateNotFoundError(template_id)
    draft = _draft_of(template).model_copy(
        update={
            "id": None,
            "createdByTeacherId": teacher_id,
            "title": f"{template.title} (copy)",
        }
    )
    return await save_template(store, draft)


async def _soft_delete(
    store: AssessmentsStateAdapter,
    state: AssessmentsState,
    template: TestTemplate,
    reason: str,
) -> TestTemplate:
    timestamp = utc_now()
    deleted = template.model_copy(update={"deletedAt": timestamp, "updatedAt": timestamp})
    state.templates = [deleted if item.id == template.id else item for item in state.templates]
    # Freeze with the version students could see before deletion
    state.courseContent = freeze_course_content(state.courseContent, template)
    await store.write_state(state, reason)
    logger.info("Removed template %s from library (%s)", template.id, reason)
    return deleted


async def hide_template(
    store: AssessmentsStateAdapter, template_id: str, teacher_id: str
) -> TestTemplate:
    """Hide a template from the teacher's library; course placements keep working."""
    state, template = await _owned_template(store, template_id, teacher_id, "hide")
    return await _soft_delete(store, state, template, "assessment-template-hide")


async def delete_template(
    store: AssessmentsStateAdapter,
    purchases: PurchaseProvider,
    template_id: str,
    teacher_id: str,
) -> TestTemplate:
    """
    Soft-delete a template.

    Refused while any purchased course still holds the template in its queue.
    Placements without a snapshot are frozen first so they stay gradeable.
    """
    state, template = await _owned_template(store, template_id, teacher_id, "delete")

    linked_course_ids = {
        course_id
        for course_id, items in state.courseContent.items()
        if any(
            isinstance(item, TestContentItem) and item.templateId == template_id
            for item in items
        )
    }
    if linked_course_ids:
        purchased = {purchase.courseId for purchase in await purchases.get_purchases()}
        blocked = sorted(linked_course_ids & purchased)
        if blocked:
            raise AssessmentConflictError(
                "This test is already used in purchased courses. "
                "You can hide it from your library, but it cannot be deleted.",
                course_ids=blocked,
            )

    return await _soft_delete(store, state, template, "assessment-template-delete")
