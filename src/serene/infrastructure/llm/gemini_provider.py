"""
Google Gemini LLM Provider

Implementation of the LLM provider interface for the Gemini API.
Supports inline image and audio parts and JSON response mode.
"""

import time
from typing import Optional

import google.generativeai as genai
from google.generativeai.types import GenerationConfig
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from serene.config import get_settings
from serene.config.logging_config import get_logger
from serene.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from serene.infrastructure.metrics import track_llm_request
from serene.services.prompt.prompt_builder import BuiltPrompt

logger = get_logger(__name__)


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, LLMProviderError) and error.is_retryable


class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider implementation.

    One retry on retryable errors. Calls are also bounded by the
    sub-analyzer timeout.

    Usage:
        provider = GeminiProvider()
        response = await provider.generate(prompt)
    """

    # Crisis phrasing must reach the model; dangerous content blocked at HIGH only
    SAFETY_SETTINGS = [
        {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
        {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_ONLY_HIGH"},
    ]

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        settings = get_settings()

        self._api_key = api_key or settings.gemini.api_key.get_secret_value()
        self._default_model = model or settings.gemini.model
        self._default_max_tokens = settings.gemini.max_output_tokens
        self._configured = False

        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._configured = True

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._configured

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        retry=retry_if_exception(_is_retryable),
        reraise=True,
    )
    @track_llm_request("gemini")
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        if not self.is_configured():
            raise LLMProviderError(
                "Gemini API key not configured",
                provider=self.provider_name,
            )

        model_name = model or self._default_model
        gemini_model = genai.GenerativeModel(
            model_name=model_name,
            safety_settings=self.SAFETY_SETTINGS,
            system_instruction=prompt.system_prompt,
        )

        contents: list = []
        if prompt.user_context:
            contents.append(prompt.user_context)
        contents.append(prompt.user_message)
        contents.extend(
            {"mime_type": part.mime_type, "data": part.data}
            for part in prompt.inline_parts
        )

        generation_config = GenerationConfig(
            max_output_tokens=max_tokens or prompt.max_tokens or self._default_max_tokens,
            temperature=temperature if temperature is not None else prompt.temperature,
            response_mime_type="application/json" if prompt.expects_json else "text/plain",
        )

        start_time = time.time()

        try:
            response = await gemini_model.generate_content_async(
                contents,
                generation_config=generation_config,
            )
        except Exception as e:
            error_msg = str(e).lower()

            if "quota" in error_msg or "rate" in error_msg or "429" in error_msg:
                logger.warning("Gemini rate limit hit", error=str(e))
                raise RateLimitError(provider=self.provider_name, retry_after_seconds=30) from e

            if "safety" in error_msg or "blocked" in error_msg:
                raise ContentFilterError(provider=self.provider_name, filter_reason=str(e)) from e

            retryable = any(marker in error_msg for marker in ("503", "unavailable", "deadline"))
            logger.error("Gemini API error", error=str(e), retryable=retryable)
            raise LLMProviderError(
                f"Gemini API error: {e}",
                provider=self.provider_name,
                is_retryable=retryable,
                original_error=e,
            ) from e

        latency_ms = int((time.time() - start_time) * 1000)

        if response.prompt_feedback and response.prompt_feedback.block_reason:
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason=str(response.prompt_feedback.block_reason),
            )

        try:
            content = response.text or ""
        except ValueError as e:
            # .text raises when the candidate has no parts (blocked)
            raise ContentFilterError(provider=self.provider_name, filter_reason=str(e)) from e

        usage_metadata = getattr(response, "usage_metadata", None)
        usage = {
            "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0) or 0,
            "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0) or 0,
            "total_tokens": getattr(usage_metadata, "total_token_count", 0) or 0,
        }

        logger.debug("Gemini completion generated", model=model_name, latency_ms=latency_ms)

        return LLMResponse(
            content=content,
            finish_reason="stop",
            usage=usage,
            model=model_name,
            provider=self.provider_name,
            latency_ms=latency_ms,
            raw_response=response,
        )

    async def health_check(self) -> bool:
        if not self.is_configured():
            return False

        try:
            for _ in genai.list_models():
                break
            return True
        except Exception as e:
            logger.warning("Gemini health check failed", error=str(e))
            return False
