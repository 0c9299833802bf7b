"""Course content queue and block normalization.

Pure functions over one course. Queue and block `order` values always come
out as contiguous 1-based sequences.
"""
from typing import TypeVar

from assessment_api.config import DEFAULT_BLOCK_TITLE
from assessment_api.errors import AssessmentValidationError
from assessment_api.models.content import (
    CourseContentItem,
    CourseMaterialBlock,
    Lesson,
    LessonContentItem,
    TestContentItem,
)
from assessment_api.models.templates import TestTemplate
from assessment_api.services.snapshot_service import with_snapshot
from assessment_api.utils.time_utils import utc_now

T = TypeVar("T")


def default_block_id(course_id: str) -> str:
    return f"course-block-default-{course_id}"


def create_default_block(course_id: str) -> CourseMaterialBlock:
    return CourseMaterialBlock(
        id=default_block_id(course_id),
        courseId=course_id,
        title=DEFAULT_BLOCK_TITLE,
        description="",
        order=1,
    )


def lesson_item_id(lesson_id: str) -> str:
    return f"lesson-item-{lesson_id}"


def normalize_blocks(
    course_id: str, blocks: list[CourseMaterialBlock] | None
) -> list[CourseMaterialBlock]:
    """Drop blocks without id or title, sort and renumber. Never empty."""
    valid = [block for block in blocks or [] if block.id and block.title.strip()]
    ordered = sorted(valid, key=lambda block: block.order)
    normalized = [
        CourseMaterialBlock(
            id=block.id,
            courseId=course_id,
            title=block.title.strip(),
            description=(block.description or "").strip(),
            order=index,
        )
        for index, block in enumerate(ordered, start=1)
    ]
    return normalized or [create_default_block(course_id)]


def normalize_queue(items: list[CourseContentItem]) -> list[CourseContentItem]:
    """Sort by order and renumber 1..N, keeping relative order."""
    ordered = sorted(items, key=lambda item: item.order)
    return [
        item if item.order == index else item.model_copy(update={"order": index})
        for index, item in enumerate(ordered, start=1)
    ]


def normalize_queue_with_blocks(
    course_id: str,
    items: list[CourseContentItem],
    blocks: list[CourseMaterialBlock] | None,
) -> tuple[list[CourseMaterialBlock], list[CourseContentItem]]:
    """Normalize blocks and queue together; unknown block refs go to the first block."""
    normalized_blocks = normalize_blocks(course_id, blocks)
    first_block_id = normalized_blocks[0].id
    block_ids = {block.id for block in normalized_blocks}

    queue = [
        item if item.blockId in block_ids else item.model_copy(update={"blockId": first_block_id})
        for item in normalize_queue(items)
    ]
    return normalized_blocks, queue


def _lesson_item(
    course_id: str, lesson: Lesson, block_id: str, order: int, created_at: str
) -> LessonContentItem:
    return LessonContentItem(
        id=lesson_item_id(lesson.id),
        courseId=course_id,
        blockId=block_id,
        lessonId=lesson.id,
        createdAt=created_at,
        order=order,
    )


def build_lesson_only_queue(
    course_id: str,
    lessons: list[Lesson],
    blocks: list[CourseMaterialBlock] | None = None,
) -> list[CourseContentItem]:
    """Initial queue of a course: its lessons in lesson order."""
    block_id = normalize_blocks(course_id, blocks)[0].id
    created_at = utc_now()
    return [
        _lesson_item(course_id, lesson, block_id, index, created_at)
        for index, lesson in enumerate(sorted(lessons, key=lambda lesson: lesson.order), start=1)
    ]


def sync_queue_with_lessons(
    course_id: str,
    items: list[CourseContentItem],
    lessons: list[Lesson],
    blocks: list[CourseMaterialBlock] | None,
) -> list[CourseContentItem]:
    """
    Make lesson items match the course's lessons.

    Items of removed lessons are dropped, missing lessons are appended in
    lesson order to the first block. Test items are left alone.
    """
    normalized_blocks, base_queue = normalize_queue_with_blocks(course_id, items, blocks)
    default_id = normalized_blocks[0].id
    lesson_ids = {lesson.id for lesson in lessons}

    queue = [
        item
        for item in base_queue
        if not isinstance(item, LessonContentItem) or item.lessonId in lesson_ids
    ]
    existing = {item.lessonId for item in queue if isinstance(item, LessonContentItem)}

    created_at = utc_now()
    missing = [
        lesson
        for lesson in sorted(lessons, key=lambda lesson: lesson.order)
        if lesson.id not in existing
    ]
    appended = [
        _lesson_item(course_id, lesson, default_id, len(queue) + offset, created_at)
        for offset, lesson in enumerate(missing, start=1)
    ]
    return normalize_queue(queue + appended)


def backfill_template_snapshots(
    queue: list[CourseContentItem], templates: list[TestTemplate]
) -> list[CourseContentItem]:
    """Read-time view: fill missing snapshots from live templates."""
    templates_by_id = {template.id: template for template in templates}
    result: list[CourseContentItem] = []
    for item in queue:
        if isinstance(item, TestContentItem) and item.templateSnapshot is None:
            template = templates_by_id.get(item.templateId)
            if template is not None:
                result.append(with_snapshot(item, template))
                continue
        result.append(item)
    return result


def move_item(items: list[T], from_index: int, to_index: int) -> list[T]:
    """Move one element, returning a new list."""
    if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
        raise AssessmentValidationError("Position is out of range.")
    moved = list(items)
    moved.insert(to_index, moved.pop(from_index))
    return moved


def move_queue_item(
    items: list[CourseContentItem], from_index: int, to_index: int
) -> list[CourseContentItem]:
    """Splice one queue item to a new position and renumber."""
    moved = move_item(normalize_queue(items), from_index, to_index)
    return [item.model_copy(update={"order": index}) for index, item in enumerate(moved, start=1)]


def move_block(
    blocks: list[CourseMaterialBlock], from_index: int, to_index: int
) -> list[CourseMaterialBlock]:
    """Splice one block to a new position and renumber."""
    ordered = sorted(blocks, key=lambda block: block.order)
    moved = move_item(ordered, from_index, to_index)
    return [block.model_copy(update={"order": index}) for index, block in enumerate(moved, start=1)]


def same_models(left: list, right: list) -> bool:
    """Structural equality of two model lists (field values, not serialization)."""
    if len(left) != len(right):
        return False
    return all(
        type(a) is type(b) and a.model_dump() == b.model_dump() for a, b in zip(left, right)
    )
