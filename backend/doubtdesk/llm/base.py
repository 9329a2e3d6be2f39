"""
LLM provider contract shared by the mentor and the lecture finder.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field


class LLMError(Exception):
    """Raised when a provider could not produce a completion."""


@dataclass
class LLMMessage:
    role: str  # "system", "user" or "assistant"
    content: str

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        return LLMMessage(role=role, content=text)


@dataclass
class LLMResponse:
    """Completion text plus what the provider reported about it."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """
    A chat-completion backend.

    Implementations accept ``json_mode=True`` to ask for a bare JSON answer
    and raise LLMError instead of transport or payload errors.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        default_temperature: float = 0.7,
        default_max_tokens: int = 2048,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.timeout = timeout

    def _temperature(self, temperature: Optional[float]) -> float:
        return self.default_temperature if temperature is None else temperature

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Complete a conversation.

        Raises:
            LLMError: when no completion could be obtained
        """
        pass
