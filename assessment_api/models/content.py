"""Course content queue and material block models."""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from assessment_api.models.common import SortOrder, Text
from assessment_api.models.templates import TestTemplateSnapshot


class CourseMaterialBlock(BaseModel):
    """Named group of queue items inside a course."""

    id: Text = ""
    courseId: Text = ""
    title: Text = ""
    description: Text = ""
    order: SortOrder = 0


class LessonContentItem(BaseModel):
    id: str
    courseId: Text = ""
    blockId: Text = ""
    type: Literal["lesson"] = "lesson"
    lessonId: str
    createdAt: Text = ""
    order: SortOrder = 0


class TestContentItem(BaseModel):
    id: str
    courseId: Text = ""
    blockId: Text = ""
    type: Literal["test"] = "test"
    templateId: str
    titleSnapshot: Text = ""
    templateSnapshot: TestTemplateSnapshot | None = None
    createdAt: Text = ""
    order: SortOrder = 0


CourseContentItem = Annotated[
    Union[LessonContentItem, TestContentItem], Field(discriminator="type")
]


class Lesson(BaseModel):
    """Lesson as supplied by the course catalog."""

    id: str
    courseId: Text = ""
    title: Text = ""
    order: SortOrder = 0


class Course(BaseModel):
    id: str
    title: Text = ""


class Purchase(BaseModel):
    id: Text = ""
    userId: Text = ""
    courseId: str
    purchasedAt: Text = ""


class ContentSaveRequest(BaseModel):
    """Model for replacing a course queue."""

    items: list[CourseContentItem]


class BlocksSaveRequest(BaseModel):
    """Model for replacing course blocks."""

    blocks: list[CourseMaterialBlock]


class AddTestItemRequest(BaseModel):
    """Model for placing a template into a course queue."""

    templateId: str = Field(..., min_length=1)
    blockId: str | None = None


class MoveItemRequest(BaseModel):
    """Model for moving a queue item."""

    fromIndex: int
    toIndex: int
