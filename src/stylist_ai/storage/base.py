"""
Storage interfaces.

Sessions and analysis records live in a key-value store keyed by user;
images are fetched from object storage by URL.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stylist_ai.types import AnalysisRecord, ConversationSession


class SessionStore(ABC):
    """Abstract base class for onboarding session stores."""

    @abstractmethod
    async def get_session(self, user_id: str, session_id: str) -> ConversationSession | None:
        """Load a session.

        Args:
            user_id: Owner of the session
            session_id: Session identifier

        Returns:
            The session, or None if it does not exist
        """
        raise NotImplementedError

    @abstractmethod
    async def create_session(self, session: ConversationSession) -> ConversationSession:
        """Store a new session.

        Returns:
            The stored session with its initial version

        Raises:
            ConcurrentModificationError: If the session id is already taken
        """
        raise NotImplementedError

    @abstractmethod
    async def update_session(
        self,
        user_id: str,
        session_id: str,
        fields: dict[str, Any],
        expected_version: int | None = None,
    ) -> ConversationSession:
        """Merge *fields* into an existing session.

        Args:
            user_id: Owner of the session
            session_id: Session identifier
            fields: Fields to overwrite; others are left as stored
            expected_version: Version the caller loaded; None skips the check

        Returns:
            The updated session

        Raises:
            NotFoundError: If the session does not exist
            ConcurrentModificationError: If the stored version differs
        """
        raise NotImplementedError


class AnalysisStore(ABC):
    """Abstract base class for photo analysis record stores."""

    @abstractmethod
    async def put_analysis(self, record: AnalysisRecord) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_analysis(self, user_id: str, analysis_id: str) -> AnalysisRecord | None:
        raise NotImplementedError


class ObjectStorage(ABC):
    """Abstract base class for image object storage."""

    @abstractmethod
    async def download(self, url: str) -> bytes:
        """Fetch an object's bytes.

        Raises:
            StorageError: With kind NOT_FOUND, FORBIDDEN, SERVER_ERROR,
                NETWORK or TIMEOUT
        """
        raise NotImplementedError

    async def close(self) -> None:  # noqa: B027
        """Release storage resources."""
