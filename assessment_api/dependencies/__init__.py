"""FastAPI dependencies."""
from assessment_api.dependencies.stores import (
    get_course_catalog,
    get_document_store,
    get_legacy_store,
    get_purchase_provider,
    get_sessions_adapter,
    get_state_adapter,
)

__all__ = [
    "get_course_catalog",
    "get_document_store",
    "get_legacy_store",
    "get_purchase_provider",
    "get_sessions_adapter",
    "get_state_adapter",
]
