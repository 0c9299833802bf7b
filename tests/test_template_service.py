import pytest

from assessment_api.errors import (
    AssessmentConflictError,
    AssessmentPermissionError,
    AssessmentValidationError,
    TemplateNotFoundError,
)
from assessment_api.models import (
    AssessmentQuestion,
    AssessmentsState,
    QuestionPrompt,
    TemplateDraft,
)
from assessment_api.services import template_service
from factories import (
    COURSE_ID,
    TEACHER_ID,
    StaticPurchases,
    make_question,
    make_template,
    make_test_item,
)

pytestmark = pytest.mark.anyio


def _draft(**fields) -> TemplateDraft:
    values = {
        "title": "Fractions",
        "durationMinutes": 20,
        "createdByTeacherId": TEACHER_ID,
        "questions": [make_question("q1", expected="42")],
        "status": "published",
    }
    values.update(fields)
    return TemplateDraft(**values)


async def _seed(state_adapter, **fields) -> None:
    await state_adapter.write_state(AssessmentsState(**fields), "test-seed")


def test_empty_draft_is_rejected() -> None:
    with pytest.raises(AssessmentValidationError):
        template_service.validate_template(
            TemplateDraft(createdByTeacherId=TEACHER_ID, status="draft")
        )
    template_service.validate_template(
        TemplateDraft(createdByTeacherId=TEACHER_ID, title="Work in progress")
    )
    template_service.validate_template(
        TemplateDraft(
            createdByTeacherId=TEACHER_ID,
            questions=[AssessmentQuestion(id="q1", prompt=QuestionPrompt(text="2 + 2?"))],
        )
    )


@pytest.mark.parametrize(
    ("fields", "message"),
    [
        ({"title": "  "}, "Enter the test title."),
        ({"durationMinutes": 0}, "Enter the test duration in minutes."),
        ({"questions": []}, "Add at least one question."),
    ],
)
def test_published_requirements(fields: dict, message: str) -> None:
    with pytest.raises(AssessmentValidationError) as exc_info:
        template_service.validate_template(_draft(**fields))
    assert exc_info.value.detail == message


def test_published_question_needs_explanation() -> None:
    question = make_question("q2", expected="1")
    question.feedback.explanation = " "
    with pytest.raises(AssessmentValidationError) as exc_info:
        template_service.validate_template(
            _draft(questions=[make_question("q1"), question])
        )
    assert exc_info.value.extra == {"question_index": 2}


async def test_save_creates_template_with_detected_types(state_adapter) -> None:
    saved = await template_service.save_template(
        state_adapter,
        _draft(questions=[make_question("q1", expected="3,5"), make_question("q2", expected="cat")]),
    )

    assert saved.id
    assert saved.createdAt == saved.updatedAt
    assert [question.answerSpec.type for question in saved.questions] == ["number", "text"]
    stored = await template_service.get_template_by_id(state_adapter, saved.id)
    assert stored is not None
    assert stored.model_dump() == saved.model_dump()


async def test_save_rejects_foreign_template(state_adapter) -> None:
    await _seed(state_adapter, templates=[make_template("tpl-1", teacher_id="someone-else")])
    with pytest.raises(AssessmentPermissionError):
        await template_service.save_template(state_adapter, _draft(id="tpl-1"))


async def test_edit_freezes_placements_with_previous_version(state_adapter) -> None:
    original = make_template("tpl-1", title="Version 1")
    await _seed(
        state_adapter,
        templates=[original],
        courseContent={COURSE_ID: [make_test_item("t1", 1, template=original)]},
    )

    await template_service.save_template(state_adapter, _draft(id="tpl-1", title="Version 2"))
    await template_service.save_template(state_adapter, _draft(id="tpl-1", title="Version 3"))

    state = await state_adapter.read_state()
    item = state.courseContent[COURSE_ID][0]
    assert item.templateSnapshot is not None
    assert item.templateSnapshot.title == "Version 1"
    assert state.templates[0].title == "Version 3"
    assert state.templates[0].createdAt == original.createdAt


async def test_get_templates_by_teacher(state_adapter) -> None:
    await _seed(
        state_adapter,
        templates=[
            make_template("old", updated_at="2024-01-01T00:00:00+00:00"),
            make_template("new", updated_at="2024-03-01T00:00:00+00:00"),
            make_template("deleted", deletedAt="2024-02-01T00:00:00+00:00"),
            make_template("foreign", teacher_id="teacher-2"),
        ],
    )
    templates = await template_service.get_templates_by_teacher(state_adapter, TEACHER_ID)
    assert [template.id for template in templates] == ["new", "old"]


async def test_publish_validates_full_template(state_adapter) -> None:
    await _seed(
        state_adapter,
        templates=[
            make_template("ready", status="draft"),
            make_template("untitled", title="", status="draft"),
        ],
    )

    published = await template_service.publish_template(state_adapter, "ready", TEACHER_ID)
    assert published.status == "published"

    with pytest.raises(AssessmentValidationError):
        await template_service.publish_template(state_adapter, "untitled", TEACHER_ID)
    with pytest.raises(AssessmentPermissionError):
        await template_service.publish_template(state_adapter, "ready", "teacher-2")
    with pytest.raises(TemplateNotFoundError):
        await template_service.publish_template(state_adapter, "missing", TEACHER_ID)


async def test_duplicate_template(state_adapter) -> None:
    await _seed(state_adapter, templates=[make_template("tpl-1", title="Algebra")])
    copy = await template_service.duplicate_template(state_adapter, "tpl-1", "teacher-2")

    assert copy.id != "tpl-1"
    assert copy.title == "Algebra (copy)"
    assert copy.createdByTeacherId == "teacher-2"
    state = await state_adapter.read_state()
    assert len(state.templates) == 2


async def test_delete_blocked_by_purchase(state_adapter) -> None:
    template = make_template("tpl-1")
    await _seed(
        state_adapter,
        templates=[template],
        courseContent={COURSE_ID: [make_test_item("t1", 1, template=template)]},
    )

    with pytest.raises(AssessmentConflictError) as exc_info:
        await template_service.delete_template(
            state_adapter, StaticPurchases([COURSE_ID]), "tpl-1", TEACHER_ID
        )
    assert exc_info.value.extra == {"course_ids": [COURSE_ID]}

    state = await state_adapter.read_state()
    assert state.templates[0].deletedAt is None
    assert state.courseContent[COURSE_ID][0].templateSnapshot is None


async def test_delete_freezes_placements(state_adapter) -> None:
    template = make_template("tpl-1", title="Before delete")
    await _seed(
        state_adapter,
        templates=[template],
        courseContent={COURSE_ID: [make_test_item("t1", 1, template=template)]},
    )

    deleted = await template_service.delete_template(
        state_adapter, StaticPurchases(["another-course"]), "tpl-1", TEACHER_ID
    )

    assert deleted.deletedAt
    state = await state_adapter.read_state()
    assert state.courseContent[COURSE_ID][0].templateSnapshot.title == "Before delete"
    assert await template_service.get_templates_by_teacher(state_adapter, TEACHER_ID) == []


async def test_hide_ignores_purchases(state_adapter) -> None:
    template = make_template("tpl-1")
    await _seed(
        state_adapter,
        templates=[template],
        courseContent={COURSE_ID: [make_test_item("t1", 1, template=template)]},
    )
    hidden = await template_service.hide_template(state_adapter, "tpl-1", TEACHER_ID)
    assert hidden.deletedAt


async def test_delete_missing_template(state_adapter, purchases) -> None:
    with pytest.raises(TemplateNotFoundError):
        await template_service.delete_template(state_adapter, purchases, "missing", TEACHER_ID)
