"""Unit tests for provider construction and selection."""

import pytest

from serene.config import get_settings
from serene.infrastructure.llm import LLMProviderType, clear_provider_cache, get_llm_provider
from serene.infrastructure.llm.gemini_provider import GeminiProvider
from serene.infrastructure.llm.openai_provider import OpenAIProvider


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.delenv("SERENE_GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("SERENE_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("SERENE_LLM_PRIMARY_PROVIDER", raising=False)
    get_settings.cache_clear()
    clear_provider_cache()
    yield
    get_settings.cache_clear()
    clear_provider_cache()


class TestProviderFactory:
    def test_default_is_gemini(self) -> None:
        assert isinstance(get_llm_provider(), GeminiProvider)

    def test_configured_primary_provider(self, monkeypatch) -> None:
        monkeypatch.setenv("SERENE_LLM_PRIMARY_PROVIDER", "openai")
        get_settings.cache_clear()
        assert isinstance(get_llm_provider(), OpenAIProvider)

    def test_instances_cached(self) -> None:
        first = get_llm_provider(LLMProviderType.OPENAI)
        assert get_llm_provider(LLMProviderType.OPENAI) is first
        assert get_llm_provider(LLMProviderType.OPENAI, force_new=True) is not first

    def test_cache_cleared(self) -> None:
        first = get_llm_provider(LLMProviderType.OPENAI)
        clear_provider_cache()
        assert get_llm_provider(LLMProviderType.OPENAI) is not first


class TestProviderConfiguration:
    def test_missing_keys_leave_providers_unconfigured(self) -> None:
        assert not GeminiProvider().is_configured()
        assert not OpenAIProvider().is_configured()

    def test_explicit_key(self) -> None:
        provider = OpenAIProvider(api_key="sk-test", model="gpt-test")
        assert provider.is_configured()
        assert provider.default_model == "gpt-test"
        assert provider.provider_name == "openai"
