"""
Common plumbing for the doubt agents.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List

from ..llm.base import LLMProvider, LLMMessage, LLMError

logger = logging.getLogger(__name__)


class BaseAgent(ABC):
    """
    An agent owns a system prompt and, optionally, an LLM provider.

    Agents without a provider still answer: subclasses fall back to
    rule-based behavior when ``call_llm`` returns None.
    """

    def __init__(self, name: str, system_prompt: str, llm_provider: Optional[LLMProvider] = None):
        self.name = name
        self.system_prompt = system_prompt
        self._llm_provider = llm_provider

    def set_llm_provider(self, provider: Optional[LLMProvider]) -> None:
        self._llm_provider = provider

    @property
    def has_llm(self) -> bool:
        return self._llm_provider is not None

    @abstractmethod
    async def process_request(
        self,
        user_message: str,
        context: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Handle one student message.

        Args:
            user_message: The doubt text
            context: Agent-specific options such as history

        Returns:
            Dict with the agent's result fields
        """
        pass

    async def call_llm(
        self,
        messages: List[Dict[str, str]],
        temperature: float = 0.7,
        json_mode: bool = False,
    ) -> Optional[str]:
        """
        Run ``messages`` through the provider.

        Returns:
            The completion text; None without a provider or when the provider failed
        """
        if not self.has_llm:
            logger.debug(f"{self.name}: no LLM provider, skipping call")
            return None

        try:
            response = await self._llm_provider.chat_completion(
                [LLMMessage.text(m["role"], m["content"]) for m in messages],
                temperature=temperature,
                json_mode=json_mode,
            )
        except LLMError as e:
            logger.error(
                f"{self.name}: LLM call failed: {e}",
                extra={"extra_fields": {"agent": self.name, "json_mode": json_mode}}
            )
            return None

        logger.debug(f"{self.name}: {len(messages)} messages in, {len(response.content)} chars out")
        return response.content
