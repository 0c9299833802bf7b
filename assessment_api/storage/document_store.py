"""Remote JSON document stores.

The engine only ever reads and writes whole documents addressed by a path.
"""
from __future__ import annotations

import asyncio
import copy
import logging
import time
from typing import Any, Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session as DBSession, sessionmaker

from assessment_api.config import DOCUMENT_CACHE_TTL_MS, MAX_DOCUMENT_CACHE_TTL_MS
from assessment_api.models.db.document import StoredDocument

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """get/put API of the authoritative document store."""

    async def get(
        self,
        path: str,
        *,
        cache_ttl_ms: int | None = None,
        dedupe: bool = True,
    ) -> Any: ...

    async def put(self, path: str, body: Any) -> None: ...


class MemoryDocumentStore:
    """Process-local store. Values are deep-copied on the way in and out."""

    def __init__(self, documents: dict[str, Any] | None = None):
        self._documents: dict[str, Any] = copy.deepcopy(documents or {})
        self.put_count = 0

    async def get(
        self,
        path: str,
        *,
        cache_ttl_ms: int | None = None,
        dedupe: bool = True,
    ) -> Any:
        return copy.deepcopy(self._documents.get(path))

    async def put(self, path: str, body: Any) -> None:
        self._documents[path] = copy.deepcopy(body)
        self.put_count += 1


class SqlDocumentStore:
    """Documents stored one row per path through SQLAlchemy."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_sync(self, path: str) -> Any:
        db: DBSession = self._session_factory()
        try:
            document = db.get(StoredDocument, path)
            return document.body if document else None
        finally:
            db.close()

    def _put_sync(self, path: str, body: Any) -> None:
        db: DBSession = self._session_factory()
        try:
            document = db.get(StoredDocument, path)
            if document is None:
                document = StoredDocument(path=path)
                db.add(document)
            document.body = body
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    async def get(
        self,
        path: str,
        *,
        cache_ttl_ms: int | None = None,
        dedupe: bool = True,
    ) -> Any:
        return await run_in_threadpool(self._get_sync, path)

    async def put(self, path: str, body: Any) -> None:
        await run_in_threadpool(self._put_sync, path, body)


class CachedDocumentStore:
    """
    Short-lived GET cache with in-flight request de-duplication.

    `cache_ttl_ms=0` skips the cache and `dedupe=False` skips sharing an
    in-flight read. A put drops the cached copy of its path, and reads that
    were in flight when it started are not cached.
    """

    def __init__(
        self,
        inner: DocumentStore,
        default_ttl_ms: int = DOCUMENT_CACHE_TTL_MS,
        clock=time.monotonic,
    ):
        self._inner = inner
        self._default_ttl_ms = default_ttl_ms
        self._clock = clock
        self._cache: dict[str, tuple[float, Any]] = {}
        self._inflight: dict[str, asyncio.Future] = {}
        self._generations: dict[str, int] = {}

    def _ttl_ms(self, cache_ttl_ms: int | None) -> int:
        ttl = self._default_ttl_ms if cache_ttl_ms is None else cache_ttl_ms
        return max(0, min(ttl, MAX_DOCUMENT_CACHE_TTL_MS))

    async def get(
        self,
        path: str,
        *,
        cache_ttl_ms: int | None = None,
        dedupe: bool = True,
    ) -> Any:
        ttl_ms = self._ttl_ms(cache_ttl_ms)
        if ttl_ms > 0:
            cached = self._cache.get(path)
            if cached and cached[0] > self._clock():
                return copy.deepcopy(cached[1])

        if not dedupe:
            return await self._fetch(path, ttl_ms)

        pending = self._inflight.get(path)
        while pending is not None:
            try:
                return copy.deepcopy(await asyncio.shield(pending))
            except asyncio.CancelledError:
                # Only a cancelled leading read is retried; our own cancellation propagates
                if not pending.cancelled():
                    raise
            pending = self._inflight.get(path)

        future = asyncio.get_running_loop().create_future()
        self._inflight[path] = future
        try:
            value = await self._fetch(path, ttl_ms)
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited future does not log a warning
            future.exception()
            raise
        else:
            future.set_result(value)
        finally:
            if self._inflight.get(path) is future:
                del self._inflight[path]
            if not future.done():
                future.cancel()
        return copy.deepcopy(value)

    async def _fetch(self, path: str, ttl_ms: int) -> Any:
        generation = self._generations.get(path, 0)
        value = await self._inner.get(path, cache_ttl_ms=0, dedupe=False)
        # A put that started during the read makes the value stale
        if ttl_ms > 0 and self._generations.get(path, 0) == generation:
            self._cache[path] = (self._clock() + ttl_ms / 1000, copy.deepcopy(value))
        return value

    def _invalidate(self, path: str) -> None:
        self._generations[path] = self._generations.get(path, 0) + 1
        self._cache.pop(path, None)
        self._inflight.pop(path, None)

    async def put(self, path: str, body: Any) -> None:
        self._invalidate(path)
        try:
            await self._inner.put(path, body)
        finally:
            self._invalidate(path)
        logger.debug("Stored document %s", path)
