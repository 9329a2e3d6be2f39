"""Models module."""

from .session import DoubtSession, SessionStatus, SessionCreate, SessionStatusUpdate, SessionList
from .message import DoubtMessage, MessageRole, FeedbackType, HistoryItem, MessageCreate
from .doubt import LectureSuggestion, ChapterInfo, AskRequest, AskResponse
from .user import TokenData

__all__ = [
    'DoubtSession', 'SessionStatus', 'SessionCreate', 'SessionStatusUpdate', 'SessionList',
    'DoubtMessage', 'MessageRole', 'FeedbackType', 'HistoryItem', 'MessageCreate',
    'LectureSuggestion', 'ChapterInfo', 'AskRequest', 'AskResponse',
    'TokenData',
]
