"""
Conversation Manager - State of one doubt chat view.

The manager owns the visible message list of a chat and keeps it bound to
exactly one session. User messages are shown optimistically with a local
id; the answer service persists both sides of every exchange, so the
manager itself only creates sessions, reads them back and resolves them.

Turn state machine:

    idle --submit_turn--> awaiting_answer --answer--> idle
                                          --different topic--> suspended
    suspended --resolve_pending_continue / resolve_pending_new_topic--> idle

Every in-flight call remembers the view generation and session it started
from. If the view was reset or rebound meanwhile, the result is dropped.
"""

import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from .answer_client import AnswerServiceInterface
from .credentials import CredentialProvider, Credentials
from .errors import ConversationError, NotAuthenticatedError, SessionCreationError
from ..models import (
    AskRequest,
    AskResponse,
    DoubtMessage,
    DoubtSession,
    FeedbackType,
    HistoryItem,
    LectureSuggestion,
    MessageRole,
    SessionStatus,
)
from ..services.lecture_search import find_related_lectures
from ..storage.interface import SessionStoreInterface
from ..storage.session_store import SessionStoreError

logger = logging.getLogger(__name__)

EMPTY_REPLY = "I'm having trouble connecting. Please try again."
CONTINUE_ACKNOWLEDGEMENT = (
    "Alright, let's continue with what we were discussing! "
    "What else would you like to know about this topic?"
)
NEED_MORE_HELP = "I need more help with this..."
NOT_LOGGED_IN = "You must be logged in to send a message."

SuggestionLookup = Callable[[str], List[LectureSuggestion]]
SessionSelectedCallback = Callable[[str], None]


class TurnState(str, Enum):
    IDLE = "idle"
    AWAITING_ANSWER = "awaiting_answer"
    SUSPENDED = "suspended"


@dataclass
class PendingContextSwitch:
    """A topic-switch verdict waiting for the user's decision."""
    reply: str
    user_message: str


def local_message_id() -> str:
    return f"local-{uuid.uuid4().hex}"


def session_title(text: str) -> str:
    return text[:30] + "..."


class ConversationManager:
    """
    Drives a doubt chat: sends turns, handles topic switches, loads
    sessions and records feedback.
    """

    def __init__(
        self,
        store: SessionStoreInterface,
        answer_service: AnswerServiceInterface,
        credentials: CredentialProvider,
        suggestion_lookup: Optional[SuggestionLookup] = None,
        on_session_selected: Optional[SessionSelectedCallback] = None,
    ):
        """
        Args:
            store: Session store (in-process or remote)
            answer_service: Answer service client
            credentials: Returns the signed-in user's credentials, or None
            suggestion_lookup: Text to lecture suggestions; keyword search by default
            on_session_selected: Called with a session id this manager bound itself
        """
        self.store = store
        self.answer_service = answer_service
        self.credentials = credentials
        self.suggestion_lookup = suggestion_lookup or find_related_lectures
        self.on_session_selected = on_session_selected

        self.messages: List[DoubtMessage] = []
        self.active_session_id: Optional[str] = None
        self.chat_closed = False
        self.pending: Optional[PendingContextSwitch] = None
        self.is_typing = False
        self.suggestions: List[LectureSuggestion] = []
        self.turn_state = TurnState.IDLE

        self._suppress_reload_for: Optional[str] = None
        self._generation = 0

    def _append(self, role: MessageRole, content: str) -> DoubtMessage:
        message = DoubtMessage(
            id=local_message_id(),
            session_id=self.active_session_id,
            role=role,
            content=content,
        )
        self.messages.append(message)
        return message

    def _append_error(self, description: str) -> None:
        self._append(MessageRole.MENTOR, f"Error: {description}")

    def _history(self) -> List[HistoryItem]:
        return [HistoryItem(role=m.role.value, content=m.content) for m in self.messages]

    def _reset_view(self) -> None:
        """Clear the visible state and invalidate every in-flight call."""
        self._generation += 1
        self.messages = []
        self.chat_closed = False
        self.suggestions = []

    def _is_stale(self, generation: int, session_id: Optional[str]) -> bool:
        return generation != self._generation or session_id != self.active_session_id

    def _bind(self, session_id: str) -> None:
        """Bind a session this manager created and announce it without a reload."""
        self.active_session_id = session_id
        self._suppress_reload_for = session_id
        if self.on_session_selected:
            self.on_session_selected(session_id)

    def _finish_turn(self, generation: int) -> None:
        if generation != self._generation:
            return
        self.is_typing = False
        if self.turn_state == TurnState.AWAITING_ANSWER:
            self.turn_state = TurnState.IDLE

    def _apply_answer(self, answer: AskResponse) -> None:
        self._append(MessageRole.MENTOR, answer.reply or EMPTY_REPLY)
        if answer.suggested_lectures:
            self.suggestions = list(answer.suggested_lectures)

    async def _require_credentials(self) -> Credentials:
        creds = await self.credentials()
        if creds is None:
            raise NotAuthenticatedError(NOT_LOGGED_IN)
        return creds

    async def _create_session(self, user_id: str, text: str, failure: str) -> DoubtSession:
        try:
            return await self.store.create_session(
                user_id, title=session_title(text), status=SessionStatus.OPEN
            )
        except SessionStoreError as e:
            logger.error(f"Session creation error: {e}", extra={"extra_fields": {"user_id": user_id}})
            raise SessionCreationError(failure) from e

    async def submit_turn(self, text: str) -> bool:
        """
        Send a user message.

        Returns:
            False when the turn was not accepted (blank text, closed chat,
            a turn already in flight or a pending topic decision)
        """
        if not text.strip() or self.chat_closed or self.turn_state != TurnState.IDLE:
            logger.debug(
                f"Turn ignored: closed={self.chat_closed}, state={self.turn_state.value}"
            )
            return False

        history = self._history()
        user_message = self._append(MessageRole.USER, text)
        self.turn_state = TurnState.AWAITING_ANSWER
        self.is_typing = True

        generation = self._generation
        session_id = self.active_session_id

        try:
            creds = await self._require_credentials()

            if session_id is None:
                session = await self._create_session(creds.user_id, text, "Failed to create session")
                if self._is_stale(generation, session_id):
                    logger.info(f"View changed while creating session {session.id}, dropping turn")
                    return True
                session_id = session.id
                user_message.session_id = session_id
                self._bind(session_id)

            answer = await self.answer_service.ask(
                AskRequest(message=text, session_id=session_id, history=history),
                creds.access_token,
            )
            if self._is_stale(generation, session_id):
                logger.info(f"Dropping late answer for session {session_id}")
                return True

            if answer.is_different_topic:
                self.pending = PendingContextSwitch(reply=answer.reply, user_message=text)
                self.turn_state = TurnState.SUSPENDED
                logger.info(f"Topic switch pending in session {session_id}")
                return True

            self._apply_answer(answer)

        except ConversationError as e:
            if not self._is_stale(generation, session_id):
                self._append_error(e.description)
        finally:
            self._finish_turn(generation)

        return True

    def resolve_pending_continue(self) -> bool:
        """Keep the current session and drop the off-topic question."""
        if self.pending is None:
            return False

        for i in range(len(self.messages) - 1, -1, -1):
            if self.messages[i].role == MessageRole.USER:
                del self.messages[i]
                break

        self._append(MessageRole.MENTOR, CONTINUE_ACKNOWLEDGEMENT)
        self.pending = None
        self.turn_state = TurnState.IDLE
        self.is_typing = False
        return True

    async def resolve_pending_new_topic(self) -> bool:
        """Move the off-topic question into a fresh session."""
        if self.pending is None:
            return False

        text = self.pending.user_message
        self.pending = None

        self._reset_view()
        # Not part of any session until the new one is bound
        self._append(MessageRole.USER, text).session_id = None
        self.turn_state = TurnState.AWAITING_ANSWER
        self.is_typing = True

        generation = self._generation
        origin_session_id = self.active_session_id

        try:
            creds = await self._require_credentials()
            session = await self._create_session(creds.user_id, text, "Failed to create new session")
            if self._is_stale(generation, origin_session_id):
                return True

            answer = await self.answer_service.ask(
                AskRequest(message=text, session_id=session.id, history=[], skip_context_check=True),
                creds.access_token,
            )
            if self._is_stale(generation, origin_session_id):
                logger.info(f"Dropping late answer for new session {session.id}")
                return True

            self._apply_answer(answer)
            for message in self.messages:
                message.session_id = session.id
            # Bound only after the reply is shown
            self._bind(session.id)

        except ConversationError as e:
            if not self._is_stale(generation, origin_session_id):
                # The view no longer shows the old session; the next turn starts a new one
                self.active_session_id = None
                self._suppress_reload_for = None
                self._append_error(e.description)
        finally:
            self._finish_turn(generation)

        return True

    async def load_session(self, session_id: Optional[str]) -> None:
        """
        Show a session selected from outside (history list, navigation).

        ``None`` resets to an empty chat. A session this manager bound
        itself is not reloaded.
        """
        suppressed = self._suppress_reload_for
        self._suppress_reload_for = None

        if session_id is not None and session_id == suppressed:
            logger.debug(f"Skipping reload of session {session_id}")
            return

        self._reset_view()
        self.pending = None
        self.is_typing = False
        self.turn_state = TurnState.IDLE
        self.active_session_id = session_id

        if session_id is None:
            return

        generation = self._generation
        session = await self.store.get_session(session_id)
        if self._is_stale(generation, session_id):
            return
        self.chat_closed = session is not None and session.status == SessionStatus.RESOLVED

        messages = await self.store.list_messages(session_id)
        if self._is_stale(generation, session_id):
            return
        self.messages = list(messages)

        first_user = next((m for m in messages if m.role == MessageRole.USER), None)
        if first_user is not None:
            self.suggestions = self.suggestion_lookup(first_user.content)

        logger.info(
            f"Session {session_id} loaded: {len(messages)} messages, closed={self.chat_closed}"
        )

    async def submit_feedback(self, message_id: str, feedback_type: FeedbackType) -> bool:
        """
        Record feedback on a mentor message.

        Positive feedback resolves the session and closes the chat; negative
        feedback asks for more help.

        Returns:
            False when the message is unknown, not a mentor message or already rated
        """
        message = next((m for m in self.messages if m.id == message_id), None)
        if message is None or message.role != MessageRole.MENTOR or message.feedback_submitted:
            return False

        message.feedback_submitted = True
        message.feedback_type = feedback_type

        if feedback_type == FeedbackType.POSITIVE:
            if self.active_session_id is not None:
                try:
                    await self.store.set_status(self.active_session_id, SessionStatus.RESOLVED)
                except SessionStoreError as e:
                    logger.error(f"Failed to resolve session {self.active_session_id}: {e}")
                    raise
            else:
                logger.warning("Positive feedback without a bound session")
            self.chat_closed = True

        elif feedback_type == FeedbackType.NEGATIVE:
            await self.submit_turn(NEED_MORE_HELP)

        return True
