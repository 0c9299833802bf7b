"""In-progress session endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from assessment_api.dependencies import get_sessions_adapter
from assessment_api.models import AssessmentSession, SessionDraft, SessionUpsertRequest
from assessment_api.services import session_service
from assessment_api.storage import SessionsAdapter
from assessment_api.utils import validate_id

router = APIRouter(prefix="/api/courses/{course_id}/sessions", tags=["sessions"])

SessionsDep = Annotated[SessionsAdapter, Depends(get_sessions_adapter)]
StudentQuery = Annotated[str, Query(alias="studentId")]


@router.get("/{test_item_id}")
async def get_session(
    course_id: str, test_item_id: str, sessions: SessionsDep, student_id: StudentQuery
) -> AssessmentSession | None:
    """Live session or null when absent or expired."""
    student_id = validate_id("studentId", student_id)
    return await session_service.get_assessment_session(
        sessions, student_id, course_id, test_item_id
    )


@router.put("/{test_item_id}")
async def save_session(
    course_id: str,
    test_item_id: str,
    payload: SessionUpsertRequest,
    sessions: SessionsDep,
) -> AssessmentSession:
    """Autosave answers, cursor and remaining time."""
    draft = SessionDraft(courseId=course_id, testItemId=test_item_id, **payload.model_dump())
    return await session_service.save_assessment_session(sessions, draft)


@router.delete("/{test_item_id}")
async def clear_session(
    course_id: str, test_item_id: str, sessions: SessionsDep, student_id: StudentQuery
) -> dict[str, object]:
    student_id = validate_id("studentId", student_id)
    await session_service.clear_assessment_session(sessions, student_id, course_id, test_item_id)
    return {"status": "cleared", "testItemId": test_item_id}
