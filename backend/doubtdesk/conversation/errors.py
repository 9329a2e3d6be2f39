"""
Conversation errors.

Collaborators of the conversation manager raise these; the manager turns
them into mentor-role error messages at the turn boundary.
"""

from typing import Optional


class ConversationError(Exception):
    """Base error for a failed turn."""

    def __init__(self, description: str):
        super().__init__(description)
        self.description = description


class NotAuthenticatedError(ConversationError):
    """No user credential is available."""


class SessionCreationError(ConversationError):
    """The session store could not create a session."""


class AnswerServiceError(ConversationError):
    """The answer service failed or answered with an error body."""

    def __init__(self, description: str, status_code: Optional[int] = None):
        super().__init__(description)
        self.status_code = status_code
