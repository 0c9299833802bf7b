from pathlib import Path

import pytest

from assessment_api.storage import (
    AssessmentsStateAdapter,
    JsonFileKeyValueStore,
    MemoryDocumentStore,
    SessionsAdapter,
)
from factories import StaticPurchases


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def document_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def legacy_store(tmp_path: Path) -> JsonFileKeyValueStore:
    return JsonFileKeyValueStore(tmp_path / "legacy")


@pytest.fixture
def state_adapter(
    document_store: MemoryDocumentStore, legacy_store: JsonFileKeyValueStore
) -> AssessmentsStateAdapter:
    return AssessmentsStateAdapter(document_store, legacy_store)


@pytest.fixture
def sessions_adapter(
    document_store: MemoryDocumentStore, legacy_store: JsonFileKeyValueStore
) -> SessionsAdapter:
    return SessionsAdapter(document_store, legacy_store)


@pytest.fixture
def purchases() -> StaticPurchases:
    return StaticPurchases()
