"""Store and adapter dependencies for FastAPI.

One instance of each per process, so legacy migrations run once and the
document cache is shared between requests.
"""
from functools import lru_cache

from assessment_api.config import DOCUMENT_CACHE_TTL_MS, LEGACY_STORE_DIR
from assessment_api.database import SessionLocal
from assessment_api.services.providers import StoreCourseCatalog, StorePurchaseProvider
from assessment_api.storage import (
    AssessmentsStateAdapter,
    CachedDocumentStore,
    DocumentStore,
    JsonFileKeyValueStore,
    SessionsAdapter,
    SqlDocumentStore,
)


@lru_cache
def get_document_store() -> DocumentStore:
    return CachedDocumentStore(SqlDocumentStore(SessionLocal), DOCUMENT_CACHE_TTL_MS)


@lru_cache
def get_legacy_store() -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(LEGACY_STORE_DIR)


@lru_cache
def get_state_adapter() -> AssessmentsStateAdapter:
    return AssessmentsStateAdapter(get_document_store(), get_legacy_store())


@lru_cache
def get_sessions_adapter() -> SessionsAdapter:
    return SessionsAdapter(get_document_store(), get_legacy_store())


@lru_cache
def get_course_catalog() -> StoreCourseCatalog:
    return StoreCourseCatalog(get_document_store())


@lru_cache
def get_purchase_provider() -> StorePurchaseProvider:
    return StorePurchaseProvider(get_document_store())
