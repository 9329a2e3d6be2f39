"""
Request logging middleware.

Pure ASGI so that streaming and background responses pass through
untouched. Each request produces one line on completion with method, path,
status, duration and, for failed requests, the ``error`` field of the body.
Doubt request bodies are logged only at DEBUG level since they carry chat
history.
"""

import json
import logging
import time
import uuid
from typing import Optional
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)


def _error_reason(body: bytes) -> Optional[str]:
    """Pull the error description out of a JSON error body."""
    text = body.decode("utf-8", errors="ignore")
    if not text:
        return None
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return truncate_large_data(text, max_length=500)
    if isinstance(payload, dict):
        for key in ("error", "detail", "message"):
            if payload.get(key):
                return str(payload[key])
    return truncate_large_data(text, max_length=500)


def _request_body_for_log(body: bytes) -> str:
    text = body.decode("utf-8", errors="ignore")
    try:
        text = json.dumps(filter_sensitive_data(json.loads(text)), ensure_ascii=False)
    except json.JSONDecodeError:
        pass
    return truncate_large_data(text, max_length=2000)


class RequestLoggingMiddleware:
    """Log every HTTP request handled by the app."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[list] = None):
        """
        Args:
            app: The wrapped ASGI application
            exclude_paths: Paths that are passed through without logging
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/health", "/"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        request_id = uuid.uuid4().hex[:12]
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        client = scope.get("client")

        request_body = bytearray()
        response_body = bytearray()
        status_code = 0

        async def receive_wrapper() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_body.extend(message.get("body", b""))
            return message

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body" and status_code >= 400:
                response_body.extend(message.get("body", b""))
            await send(message)

        try:
            await self.app(scope, receive_wrapper, send_wrapper)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "request_id": request_id,
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                }}
            )
            raise

        duration_ms = round((time.time() - start_time) * 1000, 2)
        error_reason = _error_reason(bytes(response_body)) if status_code >= 400 else None

        if logger.isEnabledFor(logging.DEBUG) and request_body:
            logger.debug(f"Request body [{request_id}]: {_request_body_for_log(bytes(request_body))}")

        if status_code < 400:
            level = logging.INFO
        elif status_code < 500:
            level = logging.WARNING
        else:
            level = logging.ERROR

        message = f"{method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if error_reason:
            message += f" | error={error_reason}"

        logger.log(
            level,
            message,
            extra={"extra_fields": {
                "request_id": request_id,
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": duration_ms,
                "client": client[0] if client else None,
                "error_reason": error_reason,
            }}
        )
