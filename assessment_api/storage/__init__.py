"""Document stores and persisted-state adapters."""
from assessment_api.storage.adapters import AssessmentsStateAdapter, SessionsAdapter
from assessment_api.storage.document_store import (
    CachedDocumentStore,
    DocumentStore,
    MemoryDocumentStore,
    SqlDocumentStore,
)
from assessment_api.storage.legacy_store import JsonFileKeyValueStore, LegacyKeyValueStore

__all__ = [
    "AssessmentsStateAdapter",
    "CachedDocumentStore",
    "DocumentStore",
    "JsonFileKeyValueStore",
    "LegacyKeyValueStore",
    "MemoryDocumentStore",
    "SessionsAdapter",
    "SqlDocumentStore",
]
