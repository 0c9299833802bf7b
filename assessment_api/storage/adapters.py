"""Persisted-state adapters.

The only components that talk to the document store. Each adapter runs its
legacy migration check once per instance lifetime.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from assessment_api.config import (
    ASSESSMENT_SESSION_TTL_DAYS,
    ASSESSMENTS_LEGACY_KEY,
    ASSESSMENTS_SESSIONS_PATH,
    ASSESSMENTS_STATE_PATH,
    SESSIONS_LEGACY_KEY,
)
from assessment_api.models.sessions import AssessmentSession
from assessment_api.models.state import AssessmentsState, parse_sessions_map
from assessment_api.storage.document_store import DocumentStore
from assessment_api.storage.legacy_store import LegacyKeyValueStore
from assessment_api.utils.time_utils import parse_iso_timestamp

logger = logging.getLogger(__name__)

SessionsMap = dict[str, AssessmentSession]


class AssessmentsStateAdapter:
    """Reads and writes the aggregate assessments document."""

    def __init__(
        self,
        store: DocumentStore,
        legacy: LegacyKeyValueStore,
        path: str = ASSESSMENTS_STATE_PATH,
        legacy_key: str = ASSESSMENTS_LEGACY_KEY,
    ):
        self.store = store
        self.legacy = legacy
        self.path = path
        self.legacy_key = legacy_key
        self._migration_checked = False

    def reset(self) -> None:
        """Re-arm the one-shot legacy migration check. For test harnesses."""
        self._migration_checked = False

    async def read_state(self) -> AssessmentsState:
        raw = await self.store.get(self.path, cache_ttl_ms=0, dedupe=False)
        state = AssessmentsState.model_validate(raw if isinstance(raw, dict) else {})
        return await self._migrate_legacy_if_needed(state)

    async def write_state(self, state: AssessmentsState, reason: str) -> None:
        logger.debug("Writing assessments state (%s)", reason)
        normalized = AssessmentsState.model_validate(state.to_document())
        await self.store.put(self.path, normalized.to_document())

    async def _migrate_legacy_if_needed(
        self, current: AssessmentsState
    ) -> AssessmentsState:
        if self._migration_checked:
            return current
        self._migration_checked = True

        raw_legacy = self.legacy.read(self.legacy_key, {})
        legacy = AssessmentsState.model_validate(
            raw_legacy if isinstance(raw_legacy, dict) else {}
        )
        if current.is_empty() and not legacy.is_empty():
            await self.store.put(self.path, legacy.to_document())
            self.legacy.remove(self.legacy_key)
            logger.info(
                "Migrated legacy assessments state: %d templates, %d attempts",
                len(legacy.templates),
                len(legacy.attempts),
            )
            return legacy
        return current


class SessionsAdapter:
    """Reads and writes the in-progress session map with TTL filtering."""

    def __init__(
        self,
        store: DocumentStore,
        legacy: LegacyKeyValueStore,
        ttl: timedelta = timedelta(days=ASSESSMENT_SESSION_TTL_DAYS),
        path: str = ASSESSMENTS_SESSIONS_PATH,
        legacy_key: str = SESSIONS_LEGACY_KEY,
    ):
        self.store = store
        self.legacy = legacy
        self.ttl = ttl
        self.path = path
        self.legacy_key = legacy_key
        self._migration_checked = False

    def reset(self) -> None:
        """Re-arm the one-shot legacy migration check. For test harnesses."""
        self._migration_checked = False

    def drop_expired(
        self, sessions: SessionsMap, now: datetime | None = None
    ) -> SessionsMap:
        """Keep sessions updated within the TTL window."""
        now = now or datetime.now(timezone.utc)
        alive: SessionsMap = {}
        for key, session in sessions.items():
            updated_at = parse_iso_timestamp(session.updatedAt)
            if updated_at is None:
                continue
            if now - updated_at <= self.ttl:
                alive[key] = session
        return alive

    async def read_sessions(self) -> SessionsMap:
        raw = await self.store.get(self.path, cache_ttl_ms=0, dedupe=False)
        sessions = self.drop_expired(parse_sessions_map(raw))
        return await self._migrate_legacy_if_needed(sessions)

    async def write_sessions(self, sessions: SessionsMap) -> None:
        # Expired entries are pruned on write so they do not pile up
        alive = self.drop_expired(sessions)
        await self.store.put(
            self.path,
            {key: session.model_dump(mode="json") for key, session in alive.items()},
        )

    async def _migrate_legacy_if_needed(self, current: SessionsMap) -> SessionsMap:
        if self._migration_checked:
            return current
        self._migration_checked = True

        legacy = self.drop_expired(parse_sessions_map(self.legacy.read(self.legacy_key, {})))
        if not current and legacy:
            await self.store.put(
                self.path,
                {key: session.model_dump(mode="json") for key, session in legacy.items()},
            )
            self.legacy.remove(self.legacy_key)
            logger.info("Migrated %d legacy assessment sessions", len(legacy))
            return legacy
        return current
