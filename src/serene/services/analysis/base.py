"""
Sub-Analyzer Base

Supervised generative-AI invocation for one modality, with a hard
timeout and a deterministic fallback.

SAFETY_CRITICAL: A sub-analyzer never raises for a backend problem.
Timeouts, provider errors and unparseable replies all produce the
modality's heuristic result, so analysis always completes.

Confidence rules:
- AI results are raised to at least the AI minimum (70)
- Fallback results are capped at the fallback maximum (40)
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from serene.config.logging_config import get_logger
from serene.domain.enums import AnalysisSource, Modality
from serene.domain.errors import ExternalServiceError
from serene.domain.models import AnalysisRequest, SubAnalysisResult, UserEmotionalProfile
from serene.infrastructure.llm.provider import LLMProvider
from serene.infrastructure.metrics import track_sub_analysis
from serene.services.analysis.response_parser import ModelResponseParser, ParseFailure
from serene.services.prompt import BuiltPrompt, PromptBuilder

logger = get_logger(__name__)


class SubAnalyzer(ABC):
    """
    One modality analyzer.

    Subclasses provide the prompt, the reply schema, the mapping from
    a validated payload to a result, and the heuristic fallback.
    """

    modality: Modality
    schema: type[BaseModel]

    def __init__(
        self,
        provider: Optional[LLMProvider],
        prompt_builder: Optional[PromptBuilder] = None,
        parser: Optional[ModelResponseParser] = None,
        timeout_seconds: float = 8.0,
        ai_min_confidence: float = 70.0,
        fallback_max_confidence: float = 40.0,
    ) -> None:
        self._provider = provider
        self._prompts = prompt_builder or PromptBuilder()
        self._parser = parser or ModelResponseParser()
        self._timeout = timeout_seconds
        self._ai_min_confidence = ai_min_confidence
        self._fallback_max_confidence = fallback_max_confidence

    @property
    def ai_available(self) -> bool:
        return self._provider is not None and self._provider.is_configured()

    @abstractmethod
    def build_prompt(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> BuiltPrompt:
        """Prompt for this modality."""

    @abstractmethod
    def from_payload(self, request: AnalysisRequest, payload: BaseModel) -> SubAnalysisResult:
        """Map a validated reply to a result."""

    @abstractmethod
    def fallback(self, request: AnalysisRequest) -> SubAnalysisResult:
        """Deterministic result used when the AI path is unavailable."""

    async def analyze(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> SubAnalysisResult:
        """
        Analyze one modality of a request.

        Args:
            request: Message to analyze
            profile: Optional calibration profile

        Returns:
            SubAnalysisResult from the AI reply or the fallback
        """
        if not self.ai_available:
            return self._fall_back(request, "ai_unavailable")

        start = datetime.utcnow()
        try:
            response = await asyncio.wait_for(
                self._provider.generate(self.build_prompt(request, profile)),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Sub-analysis timed out - using fallback",
                modality=self.modality.value,
                request_id=request.id,
                timeout=self._timeout,
            )
            return self._fall_back(request, "timeout")
        except ExternalServiceError as e:
            logger.warning(
                "Sub-analysis provider error - using fallback",
                modality=self.modality.value,
                request_id=request.id,
                service=e.service,
                retryable=e.is_retryable,
                error=str(e),
            )
            return self._fall_back(request, "provider_error")
        except Exception as e:
            logger.error(
                "Unexpected sub-analysis failure - using fallback",
                modality=self.modality.value,
                request_id=request.id,
                error_type=type(e).__name__,
                error=str(e),
            )
            return self._fall_back(request, "unexpected_error")

        parsed = self._parser.parse(response.content, self.schema)
        if isinstance(parsed, ParseFailure):
            logger.info(
                "Unusable model reply - using fallback",
                modality=self.modality.value,
                request_id=request.id,
                reason=parsed.reason,
            )
            return self._fall_back(request, "parse_error")

        result = self.from_payload(request, parsed.value)
        result.source = AnalysisSource.AI
        result.confidence = max(result.confidence, self._ai_min_confidence)
        result.fallback_reason = ""

        latency_ms = (datetime.utcnow() - start).total_seconds() * 1000
        logger.info(
            "Sub-analysis completed",
            modality=self.modality.value,
            request_id=request.id,
            stress_score=result.stress_score,
            confidence=result.confidence,
            latency_ms=round(latency_ms, 1),
        )
        track_sub_analysis(self.modality.value, result.source.value)
        return result

    def _fall_back(self, request: AnalysisRequest, reason: str) -> SubAnalysisResult:
        result = self.fallback(request)
        result.confidence = min(result.confidence, self._fallback_max_confidence)
        result.fallback_reason = reason
        track_sub_analysis(self.modality.value, result.source.value, fallback_reason=reason)
        return result
