"""
Unit tests for the HTTP collaborators of the conversation manager.
Tests AnswerClient, RemoteSessionStore and create_remote_manager against a mocked httpx client.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch

from doubtdesk.conversation import (
    AnswerClient,
    AnswerServiceError,
    NotAuthenticatedError,
    RemoteSessionStore,
    static_credentials,
    create_remote_manager,
)
from doubtdesk.models import AskRequest, HistoryItem, MessageRole, SessionStatus
from doubtdesk.storage import InvalidStatusTransition, SessionNotFoundError, SessionStoreError
from doubtdesk.config import settings

SESSION_JSON = {
    "id": "s-1",
    "user_id": "user-1",
    "title": "What is Newton's second law?...",
    "status": "open",
    "created_at": "2026-03-01T10:00:00Z",
    "updated_at": "2026-03-01T10:00:00Z",
}


def _response(status_code, body):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.json.return_value = body
    mock_response.text = str(body)
    return mock_response


def _client(mock_client, response=None, error=None):
    mock_instance = AsyncMock()
    if error is not None:
        mock_instance.post.side_effect = error
        mock_instance.request.side_effect = error
    else:
        mock_instance.post.return_value = response
        mock_instance.request.return_value = response
    mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
    mock_instance.__aexit__ = AsyncMock(return_value=False)
    mock_client.return_value = mock_instance
    return mock_instance


class TestAnswerClient:

    @pytest.mark.asyncio
    async def test_ask_success(self):
        client = AnswerClient("http://answers.local/")
        body = {
            "reply": "F = ma",
            "sessionId": "s-1",
            "suggestedLectures": [{
                "title": "Newton's Laws",
                "chapterTitle": "Laws of Motion",
                "subject": "Physics (JEE 11th)",
                "url": "/lectures/jee/physics-11/phy-u3/phy-u3-c1",
            }],
            "isFirstResponse": False,
            "isDifferentTopic": False,
        }

        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = _client(mock_client, _response(200, body))

            answer = await client.ask(
                AskRequest(
                    message="And the third law?",
                    session_id="s-1",
                    history=[HistoryItem(role="user", content="What is Newton's second law?")],
                ),
                "token-1",
            )

            assert answer.reply == "F = ma"
            assert answer.session_id == "s-1"
            assert answer.suggested_lectures[0].chapter_title == "Laws of Motion"

            url = mock_instance.post.call_args[0][0]
            kwargs = mock_instance.post.call_args.kwargs
            assert url == "http://answers.local/doubts/ask"
            assert kwargs["headers"]["Authorization"] == "Bearer token-1"
            assert kwargs["json"] == {
                "message": "And the third law?",
                "sessionId": "s-1",
                "history": [{"role": "user", "content": "What is Newton's second law?"}],
                "skipContextCheck": False,
            }

    @pytest.mark.asyncio
    async def test_ask_reply_only_body(self):
        client = AnswerClient()

        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(200, {"reply": "F = ma"}))

            answer = await client.ask(AskRequest(message="Newton's second law?"), "token-1")

            assert answer.reply == "F = ma"
            assert answer.session_id is None
            assert answer.suggested_lectures == []
            assert answer.is_different_topic is False

    @pytest.mark.asyncio
    async def test_error_body_surfaces(self):
        client = AnswerClient()

        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(429, {"error": "Daily limit (50) reached"}))

            with pytest.raises(AnswerServiceError) as exc_info:
                await client.ask(AskRequest(message="hi"), "token-1")

            assert exc_info.value.description == "Daily limit (50) reached"
            assert exc_info.value.status_code == 429

    @pytest.mark.asyncio
    async def test_error_without_body(self):
        client = AnswerClient()
        response = _response(502, None)
        response.json.side_effect = ValueError("no json")

        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, response)

            with pytest.raises(AnswerServiceError) as exc_info:
                await client.ask(AskRequest(message="hi"), "token-1")

            assert exc_info.value.description == "Failed to get response"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = AnswerClient()

        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, error=httpx.ConnectError("connection refused"))

            with pytest.raises(AnswerServiceError, match="Failed to get response"):
                await client.ask(AskRequest(message="hi"), "token-1")


class TestRemoteSessionStore:

    @pytest.fixture
    def store(self):
        return RemoteSessionStore("http://answers.local", static_credentials("user-1", "token-1"))

    @pytest.mark.asyncio
    async def test_create_session(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = _client(mock_client, _response(201, SESSION_JSON))

            session = await store.create_session("user-1", title="What is Newton's second law?...")

            assert session.id == "s-1"
            assert session.status == SessionStatus.OPEN
            method, url = mock_instance.request.call_args[0]
            assert (method, url) == ("POST", "http://answers.local/doubts/sessions")
            assert mock_instance.request.call_args.kwargs["json"] == {
                "title": "What is Newton's second law?...", "status": "open"
            }
            assert mock_instance.request.call_args.kwargs["headers"]["Authorization"] == "Bearer token-1"

    @pytest.mark.asyncio
    async def test_get_missing_session(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(404, {"error": "Session not found"}))
            assert await store.get_session("nope") is None

    @pytest.mark.asyncio
    async def test_reopen_conflict(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(409, {"error": "Session s-1 is resolved"}))

            with pytest.raises(InvalidStatusTransition):
                await store.set_status("s-1", SessionStatus.OPEN)

    @pytest.mark.asyncio
    async def test_set_status_missing(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(404, {"error": "Session not found"}))

            with pytest.raises(SessionNotFoundError):
                await store.set_status("nope", SessionStatus.RESOLVED)

    @pytest.mark.asyncio
    async def test_list_messages(self, store):
        messages = [
            {"id": "m-1", "session_id": "s-1", "role": "user", "content": "hi",
             "created_at": "2026-03-01T10:00:00Z"},
            {"id": "m-2", "session_id": "s-1", "role": "mentor", "content": "hello",
             "created_at": "2026-03-01T10:00:01Z"},
        ]
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(200, messages))

            result = await store.list_messages("s-1")

            assert [m.role for m in result] == [MessageRole.USER, MessageRole.MENTOR]

    @pytest.mark.asyncio
    async def test_list_sessions_params(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            mock_instance = _client(mock_client, _response(200, {"sessions": [SESSION_JSON]}))

            sessions = await store.list_sessions("user-1", status=SessionStatus.OPEN, limit=10)

            assert [s.id for s in sessions] == ["s-1"]
            assert mock_instance.request.call_args.kwargs["params"] == {"status": "open", "limit": 10}

    @pytest.mark.asyncio
    async def test_server_error(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(500, {"error": "Internal Error: boom"}))

            with pytest.raises(SessionStoreError, match="Internal Error: boom"):
                await store.create_session("user-1")

    @pytest.mark.asyncio
    async def test_malformed_session_body(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(201, {"unexpected": True}))

            with pytest.raises(SessionStoreError, match="unreadable"):
                await store.create_session("user-1", title="Newton")

    @pytest.mark.asyncio
    async def test_malformed_message_list(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, _response(200, {"messages": "nope"}))

            with pytest.raises(SessionStoreError):
                await store.list_messages("s-1")

    @pytest.mark.asyncio
    async def test_unreachable(self, store):
        with patch("httpx.AsyncClient") as mock_client:
            _client(mock_client, error=httpx.ConnectError("connection refused"))

            with pytest.raises(SessionStoreError):
                await store.get_session("s-1")

    @pytest.mark.asyncio
    async def test_requires_credentials(self):
        async def nobody():
            return None

        store = RemoteSessionStore("http://answers.local", nobody)
        with pytest.raises(NotAuthenticatedError):
            await store.get_session("s-1")


class TestRemoteManagerFactory:
    """Tests for create_remote_manager."""

    def test_uses_given_url(self):
        creds = static_credentials("user-1", "token")
        manager = create_remote_manager(creds, base_url="http://answers.local/")

        assert isinstance(manager.store, RemoteSessionStore)
        assert isinstance(manager.answer_service, AnswerClient)
        assert manager.store.base_url == "http://answers.local"
        assert manager.answer_service.base_url == "http://answers.local"

    def test_defaults_to_configured_url(self, monkeypatch):
        monkeypatch.setattr(settings, "answer_service_url", "http://backend:8000")
        manager = create_remote_manager(static_credentials("user-1", "token"))

        assert manager.store.base_url == "http://backend:8000"
        assert manager.answer_service.timeout == settings.llm_timeout
