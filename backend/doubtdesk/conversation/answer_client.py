"""
Answer Client - Calls the answer service over HTTP.
"""

import logging
import time
from abc import ABC, abstractmethod

import httpx

from .errors import AnswerServiceError
from ..models import AskRequest, AskResponse

logger = logging.getLogger(__name__)

DEFAULT_ERROR = "Failed to get response"


class AnswerServiceInterface(ABC):
    """What the conversation manager needs from the answer service."""

    @abstractmethod
    async def ask(self, request: AskRequest, access_token: str) -> AskResponse:
        """
        Ask a doubt.

        Raises:
            AnswerServiceError: On transport failure or a non-2xx response
        """
        pass


class AnswerClient(AnswerServiceInterface):
    """
    HTTP client for ``POST /doubts/ask``.
    """

    def __init__(self, base_url: str = "http://localhost:8000", timeout: float = 60.0):
        """
        Args:
            base_url: Root URL of the answer service
            timeout: Request timeout in seconds; answers can take a while
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def ask(self, request: AskRequest, access_token: str) -> AskResponse:
        url = f"{self.base_url}/doubts/ask"
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {access_token}",
        }

        start_time = time.time()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                resp = await client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                logger.error(f"Answer service request failed: {e}")
                raise AnswerServiceError(f"{DEFAULT_ERROR}: {e}") from e

        duration_ms = round((time.time() - start_time) * 1000, 2)

        if resp.status_code >= 400:
            description = self._error_description(resp)
            logger.warning(
                f"Answer service returned {resp.status_code}: {description}",
                extra={"extra_fields": {"status_code": resp.status_code, "duration_ms": duration_ms}}
            )
            raise AnswerServiceError(description, status_code=resp.status_code)

        try:
            answer = AskResponse.model_validate(resp.json())
        except ValueError as e:
            logger.error(f"Unreadable answer service response: {e}")
            raise AnswerServiceError(DEFAULT_ERROR) from e

        logger.info(
            "Answer service call completed",
            extra={"extra_fields": {
                "session_id": answer.session_id,
                "is_different_topic": answer.is_different_topic,
                "duration_ms": duration_ms,
            }}
        )
        return answer

    @staticmethod
    def _error_description(resp: httpx.Response) -> str:
        """The ``error`` field of an error body, or a generic description."""
        try:
            data = resp.json()
        except ValueError:
            return DEFAULT_ERROR
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return DEFAULT_ERROR
