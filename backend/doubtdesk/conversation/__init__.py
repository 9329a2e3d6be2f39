"""Conversation module - client-side state of a doubt chat."""

from .errors import ConversationError, NotAuthenticatedError, SessionCreationError, AnswerServiceError
from .credentials import Credentials, CredentialProvider, static_credentials
from .answer_client import AnswerServiceInterface, AnswerClient
from .remote_store import RemoteSessionStore
from .manager import ConversationManager, TurnState, PendingContextSwitch
from .factory import create_remote_manager

__all__ = [
    'ConversationError', 'NotAuthenticatedError', 'SessionCreationError', 'AnswerServiceError',
    'Credentials', 'CredentialProvider', 'static_credentials',
    'AnswerServiceInterface', 'AnswerClient',
    'RemoteSessionStore',
    'ConversationManager', 'TurnState', 'PendingContextSwitch',
    'create_remote_manager',
]
