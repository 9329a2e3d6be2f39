"""
Google Gemini LLM Provider.
Calls the generateContent REST endpoint and walks a list of models until one answers,
so a quota-exhausted or unavailable model falls through to the next.
"""

import httpx
import logging
import time
from typing import Optional, List, Dict, Any, Tuple

from .base import LLMProvider, LLMMessage, LLMResponse, LLMError

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODELS = [
    "gemini-2.0-flash",
    "gemini-2.0-flash-lite",
    "gemini-2.5-flash",
    "gemini-2.5-pro",
]


class GeminiProvider(LLMProvider):
    """
    Provider for the Gemini API (Google AI Studio keys).
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODELS[0],
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        fallback_models: Optional[List[str]] = None,
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 60.0,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, timeout)
        if fallback_models is None:
            fallback_models = [m for m in DEFAULT_GEMINI_MODELS if m != model]
        self.fallback_models = fallback_models

    @property
    def models(self) -> List[str]:
        """Models in the order they are tried."""
        return [self.model] + [m for m in self.fallback_models if m != self.model]

    def _get_headers(self) -> Dict[str, str]:
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }

    def _format_gemini(self, messages: List[LLMMessage]) -> Tuple[Optional[Dict[str, Any]], List[Dict[str, Any]]]:
        """Split messages into a system instruction and Gemini ``contents``."""
        system_parts = []
        contents = []
        for msg in messages:
            if msg.role == "system":
                system_parts.append({"text": msg.content})
                continue
            role = "model" if msg.role in ("assistant", "mentor", "model") else "user"
            contents.append({"role": role, "parts": [{"text": msg.content or ""}]})

        system_instruction = {"parts": system_parts} if system_parts else None
        return system_instruction, contents

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Ask each model in turn; return the first non-empty answer."""
        models = kwargs.get("models") or self.models
        system_instruction, contents = self._format_gemini(messages)

        generation_config: Dict[str, Any] = {
            "temperature": self._temperature(temperature),
            "maxOutputTokens": max_tokens or self.default_max_tokens,
        }
        if kwargs.get("json_mode"):
            generation_config["responseMimeType"] = "application/json"

        payload: Dict[str, Any] = {"contents": contents, "generationConfig": generation_config}
        if system_instruction:
            payload["systemInstruction"] = system_instruction

        last_error: Optional[str] = None
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for model in models:
                start_time = time.time()
                url = f"{self.base_url}/models/{model}:generateContent"
                logger.debug(f"Gemini call starting: model={model}, {len(contents)} contents")

                try:
                    resp = await client.post(url, json=payload, headers=self._get_headers())
                    resp.raise_for_status()
                    data = resp.json()
                except httpx.HTTPStatusError as e:
                    last_error = f"{model}: HTTP {e.response.status_code}"
                    logger.warning(f"Gemini model {model} returned an error, trying next: {e}")
                    continue
                except (httpx.HTTPError, ValueError) as e:
                    last_error = f"{model}: {e}"
                    logger.warning(f"Gemini model {model} failed, trying next: {e}")
                    continue

                text = self._extract_text(data)
                if not text:
                    last_error = f"{model}: empty response"
                    logger.warning(f"Gemini model {model} returned no text, trying next")
                    continue

                usage = data.get("usageMetadata", {})
                logger.info(
                    "LLM API call completed",
                    extra={"extra_fields": {
                        "provider": "gemini",
                        "model": model,
                        "prompt_tokens": usage.get("promptTokenCount", 0),
                        "completion_tokens": usage.get("candidatesTokenCount", 0),
                        "total_tokens": usage.get("totalTokenCount", 0),
                        "duration_ms": round((time.time() - start_time) * 1000, 2),
                    }}
                )
                return LLMResponse(content=text, model=model, usage=usage, raw=data)

        logger.error(
            f"All Gemini models failed: {last_error}",
            extra={"extra_fields": {"provider": "gemini", "models": models, "error": last_error}}
        )
        raise LLMError(f"All Gemini models failed (last: {last_error})")

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts).strip()
