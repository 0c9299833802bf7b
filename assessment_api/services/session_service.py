"""Service layer for in-progress test sessions.

A session exists from the first autosave until it is cleared on submission
or outlives its TTL. Completion is recorded by attempts, not sessions.
"""
import logging

from assessment_api.models.sessions import AssessmentSession, SessionDraft, make_session_key
from assessment_api.storage.adapters import SessionsAdapter
from assessment_api.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


async def save_assessment_session(
    sessions: SessionsAdapter, draft: SessionDraft
) -> AssessmentSession:
    """Upsert a session with a fresh updatedAt."""
    session_map = await sessions.read_sessions()
    key = make_session_key(draft.studentId, draft.courseId, draft.testItemId)
    session = AssessmentSession(key=key, updatedAt=utc_now(), **draft.model_dump())
    session_map[key] = session
    await sessions.write_sessions(session_map)
    return session


async def get_assessment_session(
    sessions: SessionsAdapter, student_id: str, course_id: str, test_item_id: str
) -> AssessmentSession | None:
    session_map = await sessions.read_sessions()
    return session_map.get(make_session_key(student_id, course_id, test_item_id))


async def clear_assessment_session(
    sessions: SessionsAdapter, student_id: str, course_id: str, test_item_id: str
) -> None:
    session_map = await sessions.read_sessions()
    key = make_session_key(student_id, course_id, test_item_id)
    if key not in session_map:
        return
    del session_map[key]
    await sessions.write_sessions(session_map)


async def clear_course_sessions(sessions: SessionsAdapter, course_id: str) -> int:
    """Drop every session of a course. Returns how many were removed."""
    session_map = await sessions.read_sessions()
    remaining = {
        key: session for key, session in session_map.items() if session.courseId != course_id
    }
    removed = len(session_map) - len(remaining)
    if removed:
        await sessions.write_sessions(remaining)
        logger.info("Cleared %d sessions of course %s", removed, course_id)
    return removed
