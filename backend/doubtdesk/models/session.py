"""
Session Models - Defines structures for doubt sessions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field


class SessionStatus(str, Enum):
    """Lifecycle of a doubt session. Only moves open -> resolved."""
    OPEN = "open"
    RESOLVED = "resolved"


class DoubtSession(BaseModel):
    """A persisted conversation thread."""
    id: str
    user_id: str
    title: Optional[str] = None
    status: SessionStatus = SessionStatus.OPEN
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_resolved(self) -> bool:
        return self.status == SessionStatus.RESOLVED


class SessionCreate(BaseModel):
    """Session creation payload."""
    title: Optional[str] = None
    status: SessionStatus = SessionStatus.OPEN


class SessionStatusUpdate(BaseModel):
    """Session status change payload."""
    status: SessionStatus


class SessionList(BaseModel):
    """List of sessions for the history sidebar."""
    sessions: List[DoubtSession]
