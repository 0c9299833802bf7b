"""Course catalog and purchase collaborators."""
from typing import Protocol

from assessment_api.config import COURSES_PATH, LESSONS_PATH, PURCHASES_PATH
from assessment_api.errors import CourseNotFoundError
from assessment_api.models.common import valid_entries
from assessment_api.models.content import Course, Lesson, Purchase
from assessment_api.storage.document_store import DocumentStore


class CourseCatalog(Protocol):
    async def get_lessons(self, course_id: str) -> list[Lesson]: ...


class PurchaseProvider(Protocol):
    async def get_purchases(self) -> list[Purchase]: ...


class StoreCourseCatalog:
    """Courses and lessons read from their documents in the store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_courses(self) -> list[Course]:
        raw = await self.store.get(COURSES_PATH)
        return valid_entries(raw, Course.model_validate, "course")

    async def get_lessons(self, course_id: str) -> list[Lesson]:
        """Lessons of a course; unknown courses raise not found."""
        courses = await self.get_courses()
        if not any(course.id == course_id for course in courses):
            raise CourseNotFoundError(course_id)
        raw = await self.store.get(LESSONS_PATH)
        lessons = valid_entries(raw, Lesson.model_validate, "lesson")
        return [lesson for lesson in lessons if lesson.courseId == course_id]


class StorePurchaseProvider:
    """Purchases read from their document in the store."""

    def __init__(self, store: DocumentStore):
        self.store = store

    async def get_purchases(self) -> list[Purchase]:
        raw = await self.store.get(PURCHASES_PATH)
        return valid_entries(raw, Purchase.model_validate, "purchase")
