"""Course content queue and block endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends

from assessment_api.dependencies import (
    get_course_catalog,
    get_sessions_adapter,
    get_state_adapter,
)
from assessment_api.models import (
    AddTestItemRequest,
    BlocksSaveRequest,
    ContentSaveRequest,
    CourseContentItem,
    CourseMaterialBlock,
    MoveItemRequest,
)
from assessment_api.services import content_service
from assessment_api.services.providers import CourseCatalog
from assessment_api.storage import AssessmentsStateAdapter, SessionsAdapter

router = APIRouter(prefix="/api/courses/{course_id}", tags=["content"])

StateDep = Annotated[AssessmentsStateAdapter, Depends(get_state_adapter)]
CatalogDep = Annotated[CourseCatalog, Depends(get_course_catalog)]


@router.get("/content")
async def get_content(
    course_id: str, store: StateDep, catalog: CatalogDep
) -> list[CourseContentItem]:
    """Course queue synced with the course's lessons."""
    lessons = await catalog.get_lessons(course_id)
    return await content_service.get_course_content_items(store, course_id, lessons)


@router.put("/content")
async def save_content(
    course_id: str, payload: ContentSaveRequest, store: StateDep
) -> list[CourseContentItem]:
    return await content_service.save_course_content_items(store, course_id, payload.items)


@router.delete("/content")
async def delete_content(
    course_id: str,
    store: StateDep,
    sessions: Annotated[SessionsAdapter, Depends(get_sessions_adapter)],
) -> dict[str, object]:
    """Drop everything the assessment engine holds for a course."""
    await content_service.delete_course_content_items(store, sessions, course_id)
    return {"status": "deleted", "courseId": course_id}


@router.post("/content/tests")
async def add_test_item(
    course_id: str, payload: AddTestItemRequest, store: StateDep
) -> list[CourseContentItem]:
    """Place a published template at the end of the queue."""
    return await content_service.add_test_item_to_course_content(
        store, course_id, payload.templateId, payload.blockId
    )


@router.post("/content/move")
async def move_content_item(
    course_id: str, payload: MoveItemRequest, store: StateDep, catalog: CatalogDep
) -> list[CourseContentItem]:
    lessons = await catalog.get_lessons(course_id)
    return await content_service.move_course_content_item(
        store, course_id, lessons, payload.fromIndex, payload.toIndex
    )


@router.get("/blocks")
async def get_blocks(course_id: str, store: StateDep) -> list[CourseMaterialBlock]:
    return await content_service.get_course_material_blocks(store, course_id)


@router.put("/blocks")
async def save_blocks(
    course_id: str, payload: BlocksSaveRequest, store: StateDep
) -> list[CourseMaterialBlock]:
    """Replace blocks; items of removed blocks move to the first block."""
    return await content_service.save_course_material_blocks(store, course_id, payload.blocks)


@router.post("/blocks/move")
async def move_block(
    course_id: str, payload: MoveItemRequest, store: StateDep
) -> list[CourseMaterialBlock]:
    return await content_service.move_course_material_block(
        store, course_id, payload.fromIndex, payload.toIndex
    )
