"""
Conversation Manager Factory - Wires a manager to the HTTP collaborators.
"""

from typing import Optional

from .answer_client import AnswerClient
from .credentials import CredentialProvider
from .manager import ConversationManager, SessionSelectedCallback
from .remote_store import RemoteSessionStore
from ..config import settings


def create_remote_manager(
    credentials: CredentialProvider,
    base_url: Optional[str] = None,
    on_session_selected: Optional[SessionSelectedCallback] = None,
) -> ConversationManager:
    """
    Create a manager that talks to a running DoubtDesk backend.

    Args:
        credentials: Provider of the signed-in user's credentials
        base_url: Backend root URL (defaults to ANSWER_SERVICE_URL)
        on_session_selected: Called when the manager binds a session it created
    """
    url = base_url or settings.answer_service_url
    return ConversationManager(
        store=RemoteSessionStore(url, credentials),
        answer_service=AnswerClient(url, timeout=settings.llm_timeout),
        credentials=credentials,
        on_session_selected=on_session_selected,
    )
