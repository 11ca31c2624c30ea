"""
LLM Provider Abstract Interface

Defines the contract for all generative-AI backends the sub-analyzers
call. No vendor is mandated; providers are swapped by configuration.

ARCHITECTURE: All model interactions go through this interface, so
tests inject scripted providers instead of network clients.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from serene.domain.errors import ExternalServiceError
from serene.services.prompt.prompt_builder import BuiltPrompt


@dataclass
class LLMResponse:
    """
    Response from LLM provider.

    Attributes:
        content: Generated text response
        finish_reason: Why generation stopped
        usage: Token usage statistics
        model: Model identifier used
        provider: Provider name
        latency_ms: Response time in milliseconds
        raw_response: Original API response (for debugging)
    """

    content: str
    finish_reason: str = "stop"
    usage: dict = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0
    raw_response: Optional[Any] = None

    @property
    def prompt_tokens(self) -> int:
        return int(self.usage.get("prompt_tokens", 0))

    @property
    def completion_tokens(self) -> int:
        return int(self.usage.get("completion_tokens", 0))

    def to_dict(self) -> dict:
        """Serialize to dictionary (excluding raw_response)."""
        return {
            "content": self.content,
            "finish_reason": self.finish_reason,
            "usage": self.usage,
            "model": self.model,
            "provider": self.provider,
            "latency_ms": self.latency_ms,
        }


class LLMProvider(ABC):
    """
    Abstract LLM provider interface.

    Required capabilities:
    - Async completion generation
    - Typed errors (LLMProviderError and subclasses)
    - Configuration check without network access
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/tracking."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        """Get default model identifier."""

    @abstractmethod
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate completion from prompt.

        Args:
            prompt: Built prompt with system and user messages
            model: Optional model override
            max_tokens: Optional max tokens override
            temperature: Optional temperature override

        Returns:
            LLMResponse with generated content

        Raises:
            LLMProviderError: On provider-specific errors
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """Check provider availability."""

    @abstractmethod
    def is_configured(self) -> bool:
        """True if API key and settings are configured."""


class LLMProviderError(ExternalServiceError):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            service=provider,
            is_retryable=is_retryable,
            original_error=original_error,
        )
        self.provider = provider


class RateLimitError(LLMProviderError):
    """Rate limit exceeded error."""

    def __init__(
        self,
        provider: str,
        retry_after_seconds: Optional[int] = None,
    ) -> None:
        super().__init__(
            f"Rate limit exceeded for {provider}",
            provider=provider,
            is_retryable=True,
        )
        self.retry_after_seconds = retry_after_seconds


class ContentFilterError(LLMProviderError):
    """Content was filtered by provider's safety systems."""

    def __init__(self, provider: str, filter_reason: str = "") -> None:
        super().__init__(
            f"Content filtered by {provider}: {filter_reason}",
            provider=provider,
            is_retryable=False,
        )
        self.filter_reason = filter_reason
