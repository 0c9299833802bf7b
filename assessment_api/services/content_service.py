"""Service layer for course content queues and material blocks."""
import logging

from assessment_api.errors import AssessmentValidationError, TemplateNotFoundError
from assessment_api.models.content import (
    CourseContentItem,
    CourseMaterialBlock,
    Lesson,
    TestContentItem,
)
from assessment_api.services.queue_service import (
    backfill_template_snapshots,
    build_lesson_only_queue,
    move_block,
    move_queue_item,
    normalize_blocks,
    normalize_queue_with_blocks,
    same_models,
    sync_queue_with_lessons,
)
from assessment_api.services.session_service import clear_course_sessions
from assessment_api.storage.adapters import AssessmentsStateAdapter, SessionsAdapter
from assessment_api.utils.time_utils import utc_now
from assessment_api.utils.validation import generate_id

logger = logging.getLogger(__name__)


def _keep_stored_snapshots(
    items: list[CourseContentItem], stored: list[CourseContentItem]
) -> list[CourseContentItem]:
    """Snapshots are only ever set by freezing; take them from the stored queue."""
    stored_snapshots = {
        item.id: item.templateSnapshot
        for item in stored
        if isinstance(item, TestContentItem)
    }
    result: list[CourseContentItem] = []
    for item in items:
        if isinstance(item, TestContentItem):
            item = item.model_copy(
                update={"templateSnapshot": stored_snapshots.get(item.id)}
            )
        result.append(item)
    return result


async def get_course_content_items(
    store: AssessmentsStateAdapter, course_id: str, lessons: list[Lesson]
) -> list[CourseContentItem]:
    """
    Course queue synced with its lessons.

    The corrected queue and blocks are written back when they differ from the
    stored ones. Test items without a snapshot are returned with one built
    from the live template, without persisting it.
    """
    state = await store.read_state()
    stored_blocks = state.courseBlocks.get(course_id, [])
    stored_queue = state.courseContent.get(course_id, [])

    if stored_queue:
        synced = sync_queue_with_lessons(course_id, stored_queue, lessons, stored_blocks)
    else:
        synced = build_lesson_only_queue(course_id, lessons, stored_blocks)
    blocks, queue = normalize_queue_with_blocks(course_id, synced, stored_blocks)

    if not same_models(queue, stored_queue) or not same_models(blocks, stored_blocks):
        logger.debug("Healing content queue of course %s", course_id)
        state.courseContent = {**state.courseContent, course_id: queue}
        state.courseBlocks = {**state.courseBlocks, course_id: blocks}
        await store.write_state(state, "assessment-course-content-sync")

    return backfill_template_snapshots(queue, state.templates)


async def save_course_content_items(
    store: AssessmentsStateAdapter, course_id: str, items: list[CourseContentItem]
) -> list[CourseContentItem]:
    """Replace a course queue."""
    state = await store.read_state()
    own_items = [
        item if item.courseId == course_id else item.model_copy(update={"courseId": course_id})
        for item in items
    ]
    own_items = _keep_stored_snapshots(own_items, state.courseContent.get(course_id, []))
    blocks, queue = normalize_queue_with_blocks(
        course_id, own_items, state.courseBlocks.get(course_id, [])
    )

    state.courseContent = {**state.courseContent, course_id: queue}
    state.courseBlocks = {**state.courseBlocks, course_id: blocks}
    await store.write_state(state, "assessment-course-content-save")
    return backfill_template_snapshots(queue, state.templates)


async def get_course_material_blocks(
    store: AssessmentsStateAdapter, course_id: str
) -> list[CourseMaterialBlock]:
    state = await store.read_state()
    stored = state.courseBlocks.get(course_id, [])
    blocks = normalize_blocks(course_id, stored)
    if not same_models(blocks, stored):
        state.courseBlocks = {**state.courseBlocks, course_id: blocks}
        await store.write_state(state, "assessment-course-blocks-sync")
    return blocks


async def save_course_material_blocks(
    store: AssessmentsStateAdapter, course_id: str, blocks: list[CourseMaterialBlock]
) -> list[CourseMaterialBlock]:
    """Replace course blocks; queue items of removed blocks move to the first block."""
    state = await store.read_state()
    normalized_blocks, queue = normalize_queue_with_blocks(
        course_id,
        state.courseContent.get(course_id, []),
        normalize_blocks(course_id, blocks),
    )
    state.courseContent = {**state.courseContent, course_id: queue}
    state.courseBlocks = {**state.courseBlocks, course_id: normalized_blocks}
    await store.write_state(state, "assessment-course-blocks-save")
    return normalized_blocks


async def move_course_material_block(
    store: AssessmentsStateAdapter, course_id: str, from_index: int, to_index: int
) -> list[CourseMaterialBlock]:
    """Move one block to a new position."""
    current = await get_course_material_blocks(store, course_id)
    return await save_course_material_blocks(
        store, course_id, move_block(current, from_index, to_index)
    )


async def add_test_item_to_course_content(
    store: AssessmentsStateAdapter,
    course_id: str,
    template_id: str,
    block_id: str | None = None,
) -> list[CourseContentItem]:
    """Append a placement of a published template to the course queue."""
    state = await store.read_state()
    template = next((item for item in state.templates if item.id == template_id), None)
    if template is None or template.deletedAt:
        raise TemplateNotFoundError(template_id)
    if template.status != "published":
        raise AssessmentValidationError("Publish the test before adding it to a course.")

    blocks = normalize_blocks(course_id, state.courseBlocks.get(course_id, []))
    items = state.courseContent.get(course_id, [])
    target_block_id = (
        block_id if block_id and any(block.id == block_id for block in blocks) else blocks[0].id
    )
    test_item = TestContentItem(
        id=generate_id(),
        courseId=course_id,
        blockId=target_block_id,
        templateId=template.id,
        titleSnapshot=template.title,
        createdAt=utc_now(),
        order=max((item.order for item in items), default=0) + 1,
    )
    return await save_course_content_items(store, course_id, [*items, test_item])


async def move_course_content_item(
    store: AssessmentsStateAdapter,
    course_id: str,
    lessons: list[Lesson],
    from_index: int,
    to_index: int,
) -> list[CourseContentItem]:
    """Move one queue item to a new position."""
    current = await get_course_content_items(store, course_id, lessons)
    return await save_course_content_items(
        store, course_id, move_queue_item(current, from_index, to_index)
    )


async def delete_course_content_items(
    store: AssessmentsStateAdapter, sessions: SessionsAdapter, course_id: str
) -> None:
    """Drop a course's queue, blocks, attempts and sessions."""
    state = await store.read_state()
    if course_id not in state.courseContent and course_id not in state.courseBlocks:
        return

    state.courseContent = {
        key: items for key, items in state.courseContent.items() if key != course_id
    }
    state.courseBlocks = {
        key: blocks for key, blocks in state.courseBlocks.items() if key != course_id
    }
    state.attempts = [attempt for attempt in state.attempts if attempt.courseId != course_id]
    await store.write_state(state, "assessment-course-content-delete")
    await clear_course_sessions(sessions, course_id)
    logger.info("Deleted assessment content of course %s", course_id)


async def get_course_test_item_ids(store: AssessmentsStateAdapter, course_id: str) -> list[str]:
    """Ids of the test items in a course queue, in queue order."""
    state = await store.read_state()
    queue = sorted(state.courseContent.get(course_id, []), key=lambda item: item.order)
    return [item.id for item in queue if isinstance(item, TestContentItem)]
