"""
LLM Provider Factory

Creates the provider named by configuration.

CONFIGURATION:
    SERENE_LLM_PRIMARY_PROVIDER=gemini  # or: openai
"""

from enum import StrEnum
from typing import Optional

from serene.config import get_settings
from serene.config.logging_config import get_logger
from serene.infrastructure.llm.provider import LLMProvider

logger = get_logger(__name__)


class LLMProviderType(StrEnum):
    """Supported LLM provider types."""

    OPENAI = "openai"
    GEMINI = "gemini"


_provider_instances: dict[LLMProviderType, LLMProvider] = {}


def get_llm_provider(
    provider_type: Optional[LLMProviderType] = None,
    force_new: bool = False,
) -> LLMProvider:
    """
    Get LLM provider instance.

    Provider type defaults to SERENE_LLM_PRIMARY_PROVIDER. Instances
    are cached per type unless force_new is set.

    Raises:
        ValueError: If unknown provider type
    """
    if provider_type is None:
        provider_type = LLMProviderType(get_settings().llm_primary_provider)

    if not force_new and provider_type in _provider_instances:
        return _provider_instances[provider_type]

    provider = _create_provider(provider_type)

    if not force_new:
        _provider_instances[provider_type] = provider

    logger.info(
        "LLM provider initialized",
        provider=provider_type.value,
        configured=provider.is_configured(),
    )

    return provider


def _create_provider(provider_type: LLMProviderType) -> LLMProvider:
    if provider_type == LLMProviderType.OPENAI:
        from serene.infrastructure.llm.openai_provider import OpenAIProvider
        return OpenAIProvider()

    if provider_type == LLMProviderType.GEMINI:
        from serene.infrastructure.llm.gemini_provider import GeminiProvider
        return GeminiProvider()

    raise ValueError(f"Unknown provider type: {provider_type}")


def clear_provider_cache() -> None:
    """Clear cached provider instances (for testing)."""
    _provider_instances.clear()
