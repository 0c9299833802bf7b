"""Aggregate document persisted as a whole."""
import logging
from typing import Any

from pydantic import BaseModel, TypeAdapter, ValidationError, field_validator

from assessment_api.models.attempts import AssessmentAttempt
from assessment_api.models.common import valid_entries
from assessment_api.models.content import CourseContentItem, CourseMaterialBlock
from assessment_api.models.sessions import AssessmentSession
from assessment_api.models.templates import TestTemplate

logger = logging.getLogger(__name__)

_content_item_adapter: TypeAdapter = TypeAdapter(CourseContentItem)


def _valid_course_map(raw: object, validate: Any, label: str) -> dict[str, list[Any]]:
    if not isinstance(raw, dict):
        return {}
    return {
        str(course_id): valid_entries(items, validate, label)
        for course_id, items in raw.items()
    }


class AssessmentsState(BaseModel):
    """Templates, course queues, course blocks and attempts."""

    templates: list[TestTemplate] = []
    courseContent: dict[str, list[CourseContentItem]] = {}
    courseBlocks: dict[str, list[CourseMaterialBlock]] = {}
    attempts: list[AssessmentAttempt] = []

    @field_validator("templates", mode="before")
    @classmethod
    def _templates(cls, value: object) -> list[Any]:
        return valid_entries(value, TestTemplate.model_validate, "template")

    @field_validator("courseContent", mode="before")
    @classmethod
    def _course_content(cls, value: object) -> dict[str, list[Any]]:
        return _valid_course_map(value, _content_item_adapter.validate_python, "queue item")

    @field_validator("courseBlocks", mode="before")
    @classmethod
    def _course_blocks(cls, value: object) -> dict[str, list[Any]]:
        return _valid_course_map(value, CourseMaterialBlock.model_validate, "block")

    @field_validator("attempts", mode="before")
    @classmethod
    def _attempts(cls, value: object) -> list[Any]:
        return valid_entries(value, AssessmentAttempt.model_validate, "attempt")

    def is_empty(self) -> bool:
        return (
            not self.templates
            and not self.attempts
            and not self.courseContent
            and not self.courseBlocks
        )

    def to_document(self) -> dict[str, Any]:
        """JSON body written to the document store."""
        return self.model_dump(mode="json", exclude_none=True)


def parse_sessions_map(raw: object) -> dict[str, AssessmentSession]:
    """Parse the session map document, skipping malformed entries."""
    if not isinstance(raw, dict):
        return {}
    sessions: dict[str, AssessmentSession] = {}
    for key, entry in raw.items():
        try:
            sessions[str(key)] = AssessmentSession.model_validate(entry)
        except ValidationError as exc:
            logger.warning("Dropping malformed session %s: %s", key, exc.errors()[:1])
    return sessions
