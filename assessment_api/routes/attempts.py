"""Attempt and progress endpoints."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from assessment_api.dependencies import get_sessions_adapter, get_state_adapter
from assessment_api.errors import AssessmentValidationError
from assessment_api.models import AssessmentAttempt, SubmitAttemptRequest, SubmitAttemptResult
from assessment_api.services import attempt_service, content_service, session_service
from assessment_api.storage import AssessmentsStateAdapter, SessionsAdapter
from assessment_api.utils import validate_id

router = APIRouter(prefix="/api/courses/{course_id}", tags=["attempts"])

StateDep = Annotated[AssessmentsStateAdapter, Depends(get_state_adapter)]
StudentQuery = Annotated[str, Query(alias="studentId")]


@router.post("/attempts")
async def submit_attempt(
    course_id: str,
    payload: SubmitAttemptRequest,
    store: StateDep,
    sessions: Annotated[SessionsAdapter, Depends(get_sessions_adapter)],
) -> SubmitAttemptResult:
    """Grade and record an attempt, then drop the in-progress session."""
    if payload.courseId != course_id:
        raise AssessmentValidationError("Mismatched courseId")
    result = await attempt_service.submit_assessment_attempt(store, payload)
    await session_service.clear_assessment_session(
        sessions, payload.studentId, course_id, payload.testItemId
    )
    return result


@router.get("/attempts")
async def list_attempts(
    course_id: str,
    store: StateDep,
    student_id: StudentQuery,
    test_item_id: Annotated[str | None, Query(alias="testItemId")] = None,
) -> list[AssessmentAttempt]:
    """A student's attempts, newest first."""
    student_id = validate_id("studentId", student_id)
    return await attempt_service.get_assessment_attempts(
        store, student_id, course_id, test_item_id
    )


@router.get("/attempts/latest")
async def latest_attempts(
    course_id: str, store: StateDep, student_id: StudentQuery
) -> dict[str, AssessmentAttempt]:
    student_id = validate_id("studentId", student_id)
    return await attempt_service.get_latest_assessment_attempts_map(store, student_id, course_id)


@router.get("/attempts/best")
async def best_attempts(
    course_id: str, store: StateDep, student_id: StudentQuery
) -> dict[str, AssessmentAttempt]:
    student_id = validate_id("studentId", student_id)
    return await attempt_service.get_best_assessment_attempts_map(store, student_id, course_id)


@router.get("/progress")
async def course_progress(
    course_id: str, store: StateDep, student_id: StudentQuery
) -> dict[str, object]:
    """Progress over latest attempts and knowledge over best attempts."""
    student_id = validate_id("studentId", student_id)
    test_item_ids = await content_service.get_course_test_item_ids(store, course_id)
    progress = await attempt_service.get_assessment_course_progress(
        store, student_id, course_id, test_item_ids
    )
    knowledge = await attempt_service.get_assessment_knowledge_progress(
        store, student_id, course_id, test_item_ids
    )
    return {"course": progress.model_dump(), "knowledge": knowledge.model_dump()}
