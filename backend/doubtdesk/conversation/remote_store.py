"""
Remote Session Store - The session store contract over the session REST API.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from .credentials import CredentialProvider
from .errors import NotAuthenticatedError
from ..models import DoubtMessage, DoubtSession, MessageRole, SessionList, SessionStatus
from ..storage.interface import SessionStoreInterface
from ..storage.session_store import (
    InvalidStatusTransition,
    SessionNotFoundError,
    SessionStoreError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RemoteSessionStore(SessionStoreInterface):
    """
    Talks to ``/doubts/sessions`` with the signed-in user's bearer token.

    The server scopes every call to the token's user, so ``user_id``
    arguments are only used for logging.
    """

    def __init__(self, base_url: str, credentials: CredentialProvider, timeout: float = 30.0):
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.timeout = timeout

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        creds = await self.credentials()
        if creds is None:
            raise NotAuthenticatedError("You must be logged in to send a message.")

        url = f"{self.base_url}/doubts/sessions{path}"
        headers = {"Authorization": f"Bearer {creds.access_token}"}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                return await client.request(method, url, json=json, params=params, headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"Session service {method} {path} failed: {e}")
                raise SessionStoreError(f"Session service unreachable: {e}") from e

    @staticmethod
    def _raise_for_status(resp: httpx.Response, session_id: Optional[str] = None) -> None:
        if resp.status_code < 400:
            return
        try:
            body = resp.json()
        except ValueError:
            body = None
        detail = body.get("error", resp.text) if isinstance(body, dict) else resp.text

        if resp.status_code == 404:
            raise SessionNotFoundError(f"Session {session_id} not found")
        if resp.status_code == 409:
            raise InvalidStatusTransition(detail)
        raise SessionStoreError(f"Session service returned {resp.status_code}: {detail}")

    @staticmethod
    def _parse(resp: httpx.Response, parse: Callable[[Any], T]) -> T:
        """Read a successful response body; malformed bodies become SessionStoreError."""
        try:
            return parse(resp.json())
        except (ValueError, TypeError) as e:
            logger.error(f"Unreadable session service response: {e}")
            raise SessionStoreError("Session service returned an unreadable response") from e

    async def create_session(
        self,
        user_id: str,
        title: Optional[str] = None,
        status: SessionStatus = SessionStatus.OPEN
    ) -> DoubtSession:
        resp = await self._request("POST", "", json={"title": title, "status": status.value})
        self._raise_for_status(resp)
        session = self._parse(resp, DoubtSession.model_validate)
        logger.info(f"Remote session created: {session.id} (user {user_id})")
        return session

    async def get_session(self, session_id: str) -> Optional[DoubtSession]:
        resp = await self._request("GET", f"/{session_id}")
        if resp.status_code == 404:
            return None
        self._raise_for_status(resp, session_id)
        return self._parse(resp, DoubtSession.model_validate)

    async def set_status(self, session_id: str, status: SessionStatus) -> DoubtSession:
        resp = await self._request("PATCH", f"/{session_id}/status", json={"status": status.value})
        self._raise_for_status(resp, session_id)
        return self._parse(resp, DoubtSession.model_validate)

    async def append_message(self, session_id: str, role: MessageRole, content: str) -> DoubtMessage:
        resp = await self._request(
            "POST", f"/{session_id}/messages", json={"role": role.value, "content": content}
        )
        self._raise_for_status(resp, session_id)
        return self._parse(resp, DoubtMessage.model_validate)

    async def list_messages(self, session_id: str) -> List[DoubtMessage]:
        resp = await self._request("GET", f"/{session_id}/messages")
        self._raise_for_status(resp, session_id)
        return self._parse(resp, lambda body: [DoubtMessage.model_validate(m) for m in body])

    async def list_sessions(
        self,
        user_id: str,
        status: Optional[SessionStatus] = None,
        limit: Optional[int] = None
    ) -> List[DoubtSession]:
        params: Dict[str, Any] = {}
        if status is not None:
            params["status"] = status.value
        if limit is not None:
            params["limit"] = limit
        resp = await self._request("GET", "", params=params)
        self._raise_for_status(resp)
        return self._parse(resp, SessionList.model_validate).sessions
