"""Validation utilities."""
import math
import uuid

from assessment_api.errors import AssessmentValidationError


def validate_id(name: str, value: str) -> str:
    """Validate a required identifier string."""
    if not isinstance(value, str):
        raise AssessmentValidationError(f"{name} is required")
    cleaned = value.strip()
    if not cleaned:
        raise AssessmentValidationError(f"{name} is required")
    return cleaned


def generate_id() -> str:
    """Generate a new random identifier."""
    return uuid.uuid4().hex


def clamp_non_negative_int(value: object) -> int:
    """Floor a finite number to a non-negative int; anything else becomes 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value):
        return 0
    return max(0, math.floor(value))


def round_half_up(value: float) -> int:
    """Round to the nearest int, halves away from zero."""
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)
