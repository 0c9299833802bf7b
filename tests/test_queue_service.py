from itertools import permutations

import pytest

from assessment_api.config import DEFAULT_BLOCK_TITLE
from assessment_api.errors import AssessmentValidationError
from assessment_api.models import CourseMaterialBlock, Lesson, TestContentItem
from assessment_api.services import queue_service
from factories import COURSE_ID, lesson_item, make_block, make_template, make_test_item


def _orders(items: list) -> list[int]:
    return [item.order for item in items]


def test_normalize_blocks_synthesizes_default() -> None:
    blocks = queue_service.normalize_blocks(COURSE_ID, [])
    assert len(blocks) == 1
    assert blocks[0].id == f"course-block-default-{COURSE_ID}"
    assert blocks[0].title == DEFAULT_BLOCK_TITLE
    assert blocks[0].order == 1


def test_normalize_blocks_sorts_and_renumbers() -> None:
    blocks = queue_service.normalize_blocks(
        COURSE_ID,
        [
            make_block("b2", order=7, title="  Second "),
            CourseMaterialBlock(id="blank", courseId=COURSE_ID, title="   ", order=1),
            make_block("b1", order=3, title="First"),
        ],
    )
    assert [block.id for block in blocks] == ["b1", "b2"]
    assert _orders(blocks) == [1, 2]
    assert blocks[1].title == "Second"


def test_normalize_queue_with_blocks_reassigns_unknown_blocks() -> None:
    items = [
        lesson_item("l2", order=5, block_id="gone"),
        lesson_item("l1", order=2, block_id="block-2"),
    ]
    blocks, queue = queue_service.normalize_queue_with_blocks(
        COURSE_ID, items, [make_block("block-1"), make_block("block-2", order=2)]
    )
    assert [block.id for block in blocks] == ["block-1", "block-2"]
    assert [item.lessonId for item in queue] == ["l1", "l2"]
    assert _orders(queue) == [1, 2]
    assert [item.blockId for item in queue] == ["block-2", "block-1"]


_RAW_ORDERS = [("l1", 3), ("l2", -1), ("l3", 3), ("l4", 0)]


@pytest.mark.parametrize("raw", list(permutations(_RAW_ORDERS)))
def test_normalize_queue_orders_are_contiguous(raw: tuple) -> None:
    items = [lesson_item(lesson_id, order) for lesson_id, order in raw]
    queue = queue_service.normalize_queue(items)

    assert _orders(queue) == [1, 2, 3, 4]
    # Stable by original order; equal orders keep their input sequence
    expected = [lesson_id for lesson_id, _ in sorted(raw, key=lambda pair: pair[1])]
    assert [item.lessonId for item in queue] == expected


def test_normalize_queue_with_blocks_is_idempotent() -> None:
    items = [
        make_test_item("t1", order=9, block_id="gone"),
        lesson_item("l1", order=-2, block_id="block-2"),
        lesson_item("l2", order=9),
    ]
    blocks = [
        make_block("block-2", order=4, title=" Practice "),
        make_block("block-1", order=4),
        CourseMaterialBlock(id="blank", courseId=COURSE_ID, title="", order=1),
    ]

    once_blocks, once_queue = queue_service.normalize_queue_with_blocks(COURSE_ID, items, blocks)
    twice_blocks, twice_queue = queue_service.normalize_queue_with_blocks(
        COURSE_ID, once_queue, once_blocks
    )

    assert [block.model_dump() for block in twice_blocks] == [
        block.model_dump() for block in once_blocks
    ]
    assert [item.model_dump() for item in twice_queue] == [
        item.model_dump() for item in once_queue
    ]


def test_build_lesson_only_queue_uses_lesson_order() -> None:
    lessons = [
        Lesson(id="l2", courseId=COURSE_ID, order=2),
        Lesson(id="l1", courseId=COURSE_ID, order=1),
    ]
    queue = queue_service.build_lesson_only_queue(COURSE_ID, lessons)
    assert [item.id for item in queue] == ["lesson-item-l1", "lesson-item-l2"]
    assert _orders(queue) == [1, 2]
    assert {item.blockId for item in queue} == {f"course-block-default-{COURSE_ID}"}


def test_sync_queue_with_lessons() -> None:
    items = [
        lesson_item("l1", order=1),
        make_test_item("t1", order=2),
        lesson_item("l2", order=3),
    ]
    lessons = [
        Lesson(id="l1", courseId=COURSE_ID, order=1),
        Lesson(id="l3", courseId=COURSE_ID, order=3),
    ]
    queue = queue_service.sync_queue_with_lessons(COURSE_ID, items, lessons, [make_block()])

    assert [item.id for item in queue] == ["lesson-item-l1", "t1", "lesson-item-l3"]
    assert _orders(queue) == [1, 2, 3]
    assert isinstance(queue[1], TestContentItem)
    assert queue[2].blockId == "block-1"


def test_sync_is_stable_for_synced_queue() -> None:
    items = [lesson_item("l1", order=1), make_test_item("t1", order=2)]
    lessons = [Lesson(id="l1", courseId=COURSE_ID, order=1)]
    queue = queue_service.sync_queue_with_lessons(COURSE_ID, items, lessons, [make_block()])
    assert queue_service.same_models(queue, items)


def test_move_queue_item_renumbers() -> None:
    items = [lesson_item("l1", 1), lesson_item("l2", 2), make_test_item("t1", 3)]
    moved = queue_service.move_queue_item(items, 2, 0)
    assert [item.id for item in moved] == ["t1", "lesson-item-l1", "lesson-item-l2"]
    assert _orders(moved) == [1, 2, 3]


def test_move_out_of_range_is_rejected() -> None:
    with pytest.raises(AssessmentValidationError):
        queue_service.move_queue_item([lesson_item("l1", 1)], 0, 3)
    with pytest.raises(AssessmentValidationError):
        queue_service.move_block([make_block()], -1, 0)


def test_move_block() -> None:
    blocks = [make_block("a", 1), make_block("b", 2), make_block("c", 3)]
    moved = queue_service.move_block(blocks, 0, 2)
    assert [block.id for block in moved] == ["b", "c", "a"]
    assert _orders(moved) == [1, 2, 3]


def test_backfill_template_snapshots() -> None:
    live = make_template("tpl-1", title="Live")
    frozen_source = make_template("tpl-2", title="Old title")
    queue = [
        make_test_item("t1", 1, template=live),
        make_test_item("t2", 2, template=frozen_source, frozen=True),
        make_test_item("t3", 3, template_id="missing"),
    ]
    renamed = frozen_source.model_copy(update={"title": "New title"})

    view = queue_service.backfill_template_snapshots(queue, [live, renamed])

    assert view[0].templateSnapshot is not None
    assert view[0].templateSnapshot.title == "Live"
    assert view[1].templateSnapshot.title == "Old title"
    assert view[2].templateSnapshot is None
    assert queue[0].templateSnapshot is None
