"""
LLM Provider Factory - Creates the configured LLM provider instance.
"""

from typing import Optional, List
from .base import LLMProvider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider


def create_llm_provider(
    provider: str = "gemini",
    api_key: str = "",
    models: Optional[List[str]] = None,
    base_url: Optional[str] = None,
    **kwargs
) -> Optional[LLMProvider]:
    """
    Create an LLM provider instance based on configuration.

    Args:
        provider: Provider name ("gemini" or "openai")
        api_key: API key for the provider
        models: Model names; the first is primary, the rest are fallbacks (Gemini only)
        base_url: Custom base URL (uses provider default if not specified)
        **kwargs: Additional provider-specific parameters

    Returns:
        LLMProvider instance, or None if api_key is not configured
    """
    if not api_key:
        return None

    params = {"api_key": api_key}
    if models:
        params["model"] = models[0]
    if base_url:
        params["base_url"] = base_url
    params.update(kwargs)

    if provider == "gemini":
        if models:
            params["fallback_models"] = list(models[1:])
        return GeminiProvider(**params)

    elif provider == "openai":
        return OpenAIProvider(**params)

    else:
        raise ValueError(f"Unsupported LLM provider: {provider}")
