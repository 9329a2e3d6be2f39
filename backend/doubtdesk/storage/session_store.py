"""
Session Store - File-backed persistence for doubt sessions and messages.

Layout under the storage root:
    doubts/sessions/<session_id>.json    session record
    doubts/messages/<session_id>.jsonl   one message per line, append-only
"""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Optional, List

from .interface import StorageInterface, SessionStoreInterface
from ..models import DoubtSession, DoubtMessage, SessionStatus, MessageRole

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """Raised when the store cannot complete an operation."""


class SessionNotFoundError(SessionStoreError):
    """Raised when a session id is unknown."""


class InvalidStatusTransition(SessionStoreError):
    """Raised on any status change other than open -> resolved."""


class SessionStore(SessionStoreInterface):
    """
    Stores sessions and messages through a StorageInterface.
    """

    def __init__(self, storage: StorageInterface):
        """
        Args:
            storage: StorageInterface implementation (typically LocalStorage)
        """
        self.storage = storage
        self.sessions_dir = "doubts/sessions"
        self.messages_dir = "doubts/messages"
        self._lock = asyncio.Lock()

    def _session_path(self, session_id: str) -> str:
        return f"{self.sessions_dir}/{session_id}.json"

    def _messages_path(self, session_id: str) -> str:
        return f"{self.messages_dir}/{session_id}.jsonl"

    async def _write_session(self, session: DoubtSession) -> None:
        ok = await self.storage.save(self._session_path(session.id), session.model_dump_json(indent=2))
        if not ok:
            raise SessionStoreError(f"Failed to write session {session.id}")

    async def _read_session(self, path: str) -> Optional[DoubtSession]:
        content = await self.storage.load(path)
        if content is None:
            return None
        try:
            return DoubtSession.model_validate_json(content)
        except ValueError as e:
            logger.warning(f"Skipping unreadable session file {path}: {e}")
            return None

    async def create_session(
        self,
        user_id: str,
        title: Optional[str] = None,
        status: SessionStatus = SessionStatus.OPEN
    ) -> DoubtSession:
        """Create and persist a new session."""
        session = DoubtSession(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=title,
            status=status,
        )
        await self._write_session(session)

        logger.info(
            f"Session created: {session.id}",
            extra={"extra_fields": {"session_id": session.id, "user_id": user_id}}
        )
        return session

    async def get_session(self, session_id: str) -> Optional[DoubtSession]:
        """Get a session by id."""
        return await self._read_session(self._session_path(session_id))

    async def set_status(self, session_id: str, status: SessionStatus) -> DoubtSession:
        """Change a session's status. Resolved sessions are never reopened."""
        async with self._lock:
            session = await self.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(f"Session {session_id} not found")

            if session.status == status:
                return session
            if session.status == SessionStatus.RESOLVED:
                raise InvalidStatusTransition(
                    f"Session {session_id} is resolved and cannot move to {status.value}"
                )

            session.status = status
            session.updated_at = datetime.now(timezone.utc)
            await self._write_session(session)

        logger.info(
            f"Session {session_id} status -> {status.value}",
            extra={"extra_fields": {"session_id": session_id, "status": status.value}}
        )
        return session

    async def append_message(
        self,
        session_id: str,
        role: MessageRole,
        content: str
    ) -> DoubtMessage:
        """Persist a message and bump the session's updated_at."""
        async with self._lock:
            session = await self.get_session(session_id)
            if session is None:
                raise SessionNotFoundError(f"Session {session_id} not found")

            message = DoubtMessage(
                id=str(uuid.uuid4()),
                session_id=session_id,
                role=role,
                content=content,
            )
            line = message.model_dump_json(include={"id", "session_id", "role", "content", "created_at"})
            if not await self.storage.append(self._messages_path(session_id), line + "\n"):
                raise SessionStoreError(f"Failed to append message to session {session_id}")

            session.updated_at = message.created_at
            await self._write_session(session)

        return message

    async def list_messages(self, session_id: str) -> List[DoubtMessage]:
        """All messages of a session, ordered by creation time ascending."""
        content = await self.storage.load(self._messages_path(session_id))
        if content is None:
            return []

        messages = []
        for line in content.decode('utf-8').splitlines():
            if not line.strip():
                continue
            try:
                messages.append(DoubtMessage.model_validate(json.loads(line)))
            except ValueError as e:
                logger.warning(f"Skipping corrupt message line in session {session_id}: {e}")

        # sorted() is stable, so equal timestamps keep append order
        return sorted(messages, key=lambda m: m.created_at)

    async def list_sessions(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None
    ) -> List[DoubtSession]:
        """A user's sessions, most recently updated first."""
        files = await self.storage.list(self.sessions_dir, pattern="*.json")

        sessions = []
        for file_path in files:
            session = await self._read_session(file_path)
            if session is None or session.user_id != user_id:
                continue
            if status is not None and session.status != status:
                continue
            sessions.append(session)

        sessions.sort(key=lambda s: s.updated_at, reverse=True)
        if limit is not None:
            sessions = sessions[:limit]
        return sessions


# Global session store instance
_session_store: Optional[SessionStore] = None


def init_session_store(storage: Optional[StorageInterface] = None) -> SessionStore:
    """
    Initialize the global session store instance.

    Args:
        storage: Optional StorageInterface implementation. If None, creates LocalStorage.
    """
    global _session_store
    if storage is None:
        from .local_storage import LocalStorage
        storage = LocalStorage()
    _session_store = SessionStore(storage)
    return _session_store


def get_session_store() -> SessionStore:
    """
    Get the global session store instance.

    Raises:
        RuntimeError: If the store has not been initialized
    """
    if _session_store is None:
        raise RuntimeError("Session store not initialized. Call init_session_store() first.")
    return _session_store
