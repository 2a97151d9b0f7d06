"""
In-memory stores.

Used in tests and single-process deployments. Stored models are copied in
and out so callers never share mutable state with the store.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from stylist_ai.errors import ConcurrentModificationError, NotFoundError
from stylist_ai.storage.base import AnalysisStore, SessionStore
from stylist_ai.types import AnalysisRecord, ConversationSession


class MemorySessionStore(SessionStore):
    """In-memory session store with version-checked updates."""

    def __init__(self) -> None:
        self._sessions: dict[tuple[str, str], ConversationSession] = {}
        self._lock = asyncio.Lock()

    async def get_session(self, user_id: str, session_id: str) -> ConversationSession | None:
        async with self._lock:
            session = self._sessions.get((user_id, session_id))
            return session.model_copy(deep=True) if session else None

    async def create_session(self, session: ConversationSession) -> ConversationSession:
        key = (session.user_id, session.session_id)
        async with self._lock:
            existing = self._sessions.get(key)
            if existing is not None:
                raise ConcurrentModificationError(session.session_id, 0, existing.version)
            stored = session.model_copy(update={"version": 1}, deep=True)
            self._sessions[key] = stored
            return stored.model_copy(deep=True)

    async def update_session(
        self,
        user_id: str,
        session_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> ConversationSession:
        key = (user_id, session_id)
        async with self._lock:
            current = self._sessions.get(key)
            if current is None:
                raise NotFoundError("Session")
            if expected_version is not None and expected_version != current.version:
                raise ConcurrentModificationError(session_id, expected_version, current.version)

            data = current.model_dump()
            for name, value in fields.items():
                data[name] = value
            data["version"] = current.version + 1
            data["updated_at"] = datetime.now(timezone.utc)

            stored = ConversationSession.model_validate(data)
            self._sessions[key] = stored
            return stored.model_copy(deep=True)

    async def count(self) -> int:
        async with self._lock:
            return len(self._sessions)


class MemoryAnalysisStore(AnalysisStore):
    """In-memory analysis record store."""

    def __init__(self) -> None:
        self._records: dict[tuple[str, str], AnalysisRecord] = {}
        self._lock = asyncio.Lock()

    async def put_analysis(self, record: AnalysisRecord) -> None:
        async with self._lock:
            self._records[(record.user_id, record.analysis_id)] = record.model_copy(deep=True)

    async def get_analysis(self, user_id: str, analysis_id: str) -> AnalysisRecord | None:
        async with self._lock:
            record = self._records.get((user_id, analysis_id))
            return record.model_copy(deep=True) if record else None

    async def list_analyses(self, user_id: str) -> list[AnalysisRecord]:
        async with self._lock:
            return [
                record.model_copy(deep=True)
                for (owner, _), record in self._records.items()
                if owner == user_id
            ]
