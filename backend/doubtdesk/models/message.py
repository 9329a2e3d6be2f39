"""
Message Models - Chat messages exchanged inside a doubt session.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    USER = "user"
    MENTOR = "mentor"


class FeedbackType(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    REPORT = "report"


class DoubtMessage(BaseModel):
    """
    A chat message.

    User messages shown before persistence carry a local id (``local-...``);
    messages loaded from the store carry the store id.
    """
    id: str
    session_id: Optional[str] = None
    role: MessageRole
    content: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Client-side feedback state
    feedback_submitted: bool = False
    feedback_type: Optional[FeedbackType] = None


class HistoryItem(BaseModel):
    """A prior message as sent to the answer service."""
    role: str
    content: str = ""


class MessageCreate(BaseModel):
    """Message creation payload."""
    role: MessageRole
    content: str
