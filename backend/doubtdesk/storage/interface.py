"""
Storage Interfaces - Abstract contracts for persistence.

``StorageInterface`` is the low-level file contract (local disk today, object
storage later). ``SessionStoreInterface`` is the doubt session/message
contract the answer service and the conversation manager depend on.
"""

from abc import ABC, abstractmethod
from typing import Optional, List

from ..models import DoubtSession, DoubtMessage, SessionStatus, MessageRole


class StorageInterface(ABC):
    """
    Abstract file storage that all storage backends implement.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Replace the file at ``path`` with ``content``.

        Readers never observe a half-written file.

        Args:
            path: Relative path (e.g., "doubts/sessions/<id>.json")
            content: Content to save; str is written as UTF-8

        Returns:
            bool: True if save was successful, False otherwise
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: File content, or None if the file doesn't exist
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a file exists at the specified path."""
        pass

    @abstractmethod
    async def list(self, path: str, pattern: str = "*") -> List[str]:
        """
        List the files directly inside a directory.

        Args:
            path: Directory path to list
            pattern: Glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths
        """
        pass

    @abstractmethod
    async def append(self, path: str, content: str) -> bool:
        """
        Append content to a file, creating it if needed.

        Returns:
            bool: True if append was successful
        """
        pass


class SessionStoreInterface(ABC):
    """
    Persistence contract for doubt sessions and their messages.
    """

    @abstractmethod
    async def create_session(
        self,
        user_id: str,
        title: Optional[str] = None,
        status: SessionStatus = SessionStatus.OPEN
    ) -> DoubtSession:
        """Create and persist a new session."""
        pass

    @abstractmethod
    async def get_session(self, session_id: str) -> Optional[DoubtSession]:
        """Get a session by id, or None if it doesn't exist."""
        pass

    @abstractmethod
    async def set_status(self, session_id: str, status: SessionStatus) -> DoubtSession:
        """
        Change a session's status.

        Raises:
            SessionNotFoundError: unknown session
            InvalidStatusTransition: attempt to reopen a resolved session
        """
        pass

    @abstractmethod
    async def append_message(
        self,
        session_id: str,
        role: MessageRole,
        content: str
    ) -> DoubtMessage:
        """Persist a message at the end of a session."""
        pass

    @abstractmethod
    async def list_messages(self, session_id: str) -> List[DoubtMessage]:
        """All messages of a session, oldest first."""
        pass

    @abstractmethod
    async def list_sessions(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None
    ) -> List[DoubtSession]:
        """A user's sessions, most recently updated first."""
        pass
