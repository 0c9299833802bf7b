"""Template snapshots embedded in course placements."""
from assessment_api.models.content import CourseContentItem, TestContentItem
from assessment_api.models.templates import TestTemplate, TestTemplateSnapshot

CourseContentMap = dict[str, list[CourseContentItem]]


def to_template_snapshot(template: TestTemplate | TestTemplateSnapshot) -> TestTemplateSnapshot:
    """Deep, self-contained copy of a template's gradeable content."""
    return TestTemplateSnapshot(
        title=template.title,
        description=template.description or "",
        durationMinutes=template.durationMinutes,
        assessmentKind=template.assessmentKind,
        questions=[question.model_copy(deep=True) for question in template.questions],
        recommendationMap=(
            [item.model_copy(deep=True) for item in template.recommendationMap]
            if template.recommendationMap is not None
            else None
        ),
    )


def with_snapshot(item: TestContentItem, template: TestTemplate) -> TestContentItem:
    """Copy of the item carrying a snapshot of the template."""
    return item.model_copy(
        update={
            "templateSnapshot": to_template_snapshot(template),
            "titleSnapshot": item.titleSnapshot or template.title,
        }
    )


def freeze_course_content(
    course_content: CourseContentMap, template: TestTemplate
) -> CourseContentMap:
    """
    Freeze every placement of the template that has no snapshot yet.

    `template` must be the version students could see so far, i.e. the state
    before an edit or deletion is applied. Items already carrying a snapshot
    keep it.
    """
    frozen: CourseContentMap = {}
    for course_id, items in course_content.items():
        next_items: list[CourseContentItem] = []
        for item in items:
            if (
                isinstance(item, TestContentItem)
                and item.templateId == template.id
                and item.templateSnapshot is None
            ):
                next_items.append(with_snapshot(item, template))
            else:
                next_items.append(item)
        frozen[course_id] = next_items
    return frozen


def snapshot_as_template(item: TestContentItem) -> TestTemplate | None:
    """Template view of an item's frozen snapshot."""
    snapshot = item.templateSnapshot
    if snapshot is None:
        return None
    return TestTemplate(
        id=item.templateId,
        title=snapshot.title,
        description=snapshot.description,
        durationMinutes=snapshot.durationMinutes,
        assessmentKind=snapshot.assessmentKind,
        createdByTeacherId="",
        createdAt=item.createdAt,
        updatedAt=item.createdAt,
        questions=snapshot.questions,
        recommendationMap=snapshot.recommendationMap,
        status="published",
    )


def resolve_template_for_test_item(
    templates: list[TestTemplate], item: TestContentItem
) -> TestTemplate | None:
    """Frozen snapshot first, live template by id otherwise."""
    frozen = snapshot_as_template(item)
    if frozen is not None:
        return frozen
    return next((template for template in templates if template.id == item.templateId), None)
