"""LLM provider abstraction package."""

from serene.infrastructure.llm.provider import (
    LLMProvider,
    LLMResponse,
    LLMProviderError,
    RateLimitError,
    ContentFilterError,
)
from serene.infrastructure.llm.provider_factory import (
    LLMProviderType,
    clear_provider_cache,
    get_llm_provider,
)

__all__ = [
    # Base types
    "LLMProvider",
    "LLMResponse",
    "LLMProviderError",
    "RateLimitError",
    "ContentFilterError",
    # Factory
    "LLMProviderType",
    "clear_provider_cache",
    "get_llm_provider",
]
