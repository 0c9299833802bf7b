"""Shared field types that coerce persisted values to safe defaults."""
import logging
import math
from typing import Annotated, Any, Callable, Literal

from pydantic import BeforeValidator, ValidationError

from assessment_api.utils.validation import clamp_non_negative_int

logger = logging.getLogger(__name__)


def _coerce_kind(value: object) -> str:
    return "exam" if value == "exam" else "credit"


def _coerce_status(value: object) -> str:
    return "published" if value == "published" else "draft"


def _coerce_order(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return math.floor(value)


def _coerce_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


NonNegativeInt = Annotated[int, BeforeValidator(clamp_non_negative_int)]
SortOrder = Annotated[int, BeforeValidator(_coerce_order)]
AssessmentKind = Annotated[Literal["credit", "exam"], BeforeValidator(_coerce_kind)]
TemplateStatus = Annotated[Literal["draft", "published"], BeforeValidator(_coerce_status)]
Text = Annotated[str, BeforeValidator(_coerce_text)]


def valid_entries(raw: object, validate: Callable[[Any], Any], label: str) -> list[Any]:
    """Validate list entries one by one, skipping malformed ones."""
    if not isinstance(raw, list):
        return []
    entries = []
    for entry in raw:
        try:
            entries.append(validate(entry))
        except ValidationError as exc:
            logger.warning("Dropping malformed %s: %s", label, exc.errors()[:1])
    return entries
