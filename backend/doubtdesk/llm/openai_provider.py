"""
OpenAI-compatible LLM Provider.
Works with any endpoint exposing the chat/completions API.
"""

import httpx
import logging
import time
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse, LLMError

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """Provider for OpenAI and OpenAI-compatible chat completion APIs."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 60.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the Chat Completions endpoint."""
        start_time = time.time()
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": self._temperature(temperature),
            "max_tokens": max_tokens or self.default_max_tokens,
        }
        if kwargs.get("json_mode"):
            payload["response_format"] = {"type": "json_object"}

        logger.debug(
            f"LLM API call starting: provider=openai, model={payload['model']}, "
            f"{len(messages)} messages"
        )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers=self._get_headers())
                resp.raise_for_status()
                data = resp.json()

            content = data["choices"][0]["message"]["content"]
        except (httpx.HTTPError, KeyError, IndexError, ValueError) as e:
            logger.error(
                f"LLM API call failed: {e}",
                exc_info=True,
                extra={"extra_fields": {
                    "provider": "openai",
                    "model": payload["model"],
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                }}
            )
            raise LLMError(f"OpenAI-compatible call failed: {e}") from e

        usage = data.get("usage", {})
        logger.info(
            "LLM API call completed",
            extra={"extra_fields": {
                "provider": "openai",
                "model": data.get("model", payload["model"]),
                "prompt_tokens": usage.get("prompt_tokens", 0),
                "completion_tokens": usage.get("completion_tokens", 0),
                "total_tokens": usage.get("total_tokens", 0),
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            }}
        )

        return LLMResponse(
            content=content or "",
            model=data.get("model", payload["model"]),
            usage=usage,
            raw=data,
        )
