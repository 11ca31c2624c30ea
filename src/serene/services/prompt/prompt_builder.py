"""
Prompt Builder

Constructs strict-JSON analysis prompts for the generative-AI backend,
one per modality.

ARCHITECTURE: Every prompt asks for exactly one JSON object matching
the schemas in serene.services.analysis.response_parser. Prompts never
ask the model for advice text that reaches users unfiltered.

CLINICAL_REVIEW_REQUIRED: Analysis instructions and scoring anchors
should be validated by wellbeing professionals.
"""

import base64
from dataclasses import dataclass, field
from typing import Optional

from serene.config.logging_config import get_logger
from serene.domain.models import AnalysisRequest, UserEmotionalProfile

logger = get_logger(__name__)

MAX_CONTEXT_MESSAGES = 5


@dataclass(frozen=True)
class InlinePart:
    """Binary payload sent alongside the prompt (image or audio)."""

    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


@dataclass
class BuiltPrompt:
    """
    Complete prompt ready for an LLM provider.

    Attributes:
        system_prompt: Instructions including the JSON schema
        user_message: Content to analyse
        context_lines: Recent conversation, oldest first
        inline_parts: Image/audio payloads
        max_tokens: Suggested max tokens for response
        temperature: Suggested temperature setting
        expects_json: Ask the provider for a JSON response mode
    """

    system_prompt: str
    user_message: str = ""
    context_lines: list[str] = field(default_factory=list)
    inline_parts: list[InlinePart] = field(default_factory=list)
    max_tokens: int = 512
    temperature: float = 0.3
    expects_json: bool = True

    @property
    def user_context(self) -> str:
        if not self.context_lines:
            return ""
        return "Recent conversation:\n" + "\n".join(f"- {line}" for line in self.context_lines)

    def to_messages(self) -> list[dict]:
        """
        Convert to OpenAI-style message format.

        Images are attached as data-URL content parts.
        """
        messages: list[dict] = [{"role": "system", "content": self.system_prompt}]

        if self.user_context:
            messages.append({"role": "system", "content": self.user_context})

        images = [p for p in self.inline_parts if p.mime_type.startswith("image/")]
        if images:
            content: list[dict] = [{"type": "text", "text": self.user_message}]
            content.extend(
                {"type": "image_url", "image_url": {"url": part.to_data_url()}}
                for part in images
            )
            messages.append({"role": "user", "content": content})
        else:
            messages.append({"role": "user", "content": self.user_message})

        return messages

    def to_text(self) -> str:
        """Single-string rendering for providers without system roles."""
        sections = [f"System Instructions:\n{self.system_prompt}"]
        if self.user_context:
            sections.append(self.user_context)
        sections.append(f"Input:\n{self.user_message}")
        return "\n\n---\n\n".join(sections)


class PromptBuilder:
    """
    Builds analysis prompts for the text, audio and visual modalities.

    CLINICAL_REVIEW_REQUIRED: Scoring anchors below.
    """

    BASE_INSTRUCTIONS: str = """You are an emotional wellbeing analyst for a student peer-support chat.
You assess stress in short messages. You never diagnose and never give medical advice.

SCORING ANCHORS (stress_score, 0-10):
- 0-2: calm, positive, relaxed
- 3-4: mild everyday stress
- 5-6: moderate stress (deadlines, exams, pressure)
- 7-8: high stress (overwhelmed, panic, cannot cope)
- 9-10: severe distress or any self-harm or suicide language

If the input contains ANY self-harm or suicide language, list the phrases in
crisis_indicators and score at least 9.

Respond with ONE JSON object and nothing else. No markdown, no commentary."""

    TEXT_SCHEMA: str = """JSON schema:
{
  "stress_score": number 0-10,
  "mood": one of ["Calm","Happy","Motivated","Neutral","Stressed","Anxious","Frustrated","Angry","Sad","Lonely","Overwhelmed"],
  "intent": one of ["Venting","Seeking Help","Sharing Information","Asking for Advice","Casual Chat","Crisis"],
  "emotions": [string],
  "keywords": [string],
  "sentiment_polarity": number -1 to 1,
  "emotional_intensity": number 0-1,
  "confidence": number 0-100,
  "crisis_indicators": [string],
  "summary": string (one sentence)
}"""

    AUDIO_SCHEMA: str = """JSON schema:
{
  "stress_score": number 0-10,
  "voice_stress": number 0-10,
  "emotions": [string],
  "indicators": {"fast_speech": bool, "high_pitch_variation": bool, "long_pauses": bool, "low_energy": bool},
  "confidence": number 0-100,
  "crisis_indicators": [string],
  "summary": string (one sentence)
}"""

    VISUAL_SCHEMA: str = """JSON schema:
{
  "stress_score": number 0-10,
  "facial_emotions": [{"emotion": string, "intensity": number 0-1}],
  "body_language": [string],
  "confidence": number 0-100,
  "summary": string (one sentence)
}"""

    def __init__(self, max_tokens: int = 512, temperature: float = 0.3) -> None:
        self._max_tokens = max_tokens
        self._temperature = temperature

    def _context(self, request: AnalysisRequest) -> list[str]:
        return list(request.conversation_context[-MAX_CONTEXT_MESSAGES:])

    def build_text_prompt(
        self,
        request: AnalysisRequest,
        profile: Optional[UserEmotionalProfile] = None,
    ) -> BuiltPrompt:
        system_prompt = f"{self.BASE_INSTRUCTIONS}\n\nTASK: Analyse the stress in the message.\n\n{self.TEXT_SCHEMA}"

        if profile is not None:
            hints = [f"Typical stress level for this user: {profile.baseline_stress:.1f}"]
            if profile.trigger_words:
                hints.append("Known stress triggers: " + ", ".join(profile.trigger_words[:10]))
            system_prompt += "\n\nUSER CALIBRATION:\n" + "\n".join(hints)

        return BuiltPrompt(
            system_prompt=system_prompt,
            user_message=request.text,
            context_lines=self._context(request),
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    def build_audio_prompt(self, request: AnalysisRequest) -> BuiltPrompt:
        audio = request.audio
        if audio is None:
            raise ValueError("Request has no audio signal")

        features: list[str] = []
        if audio.speech_rate_wpm is not None:
            features.append(f"speech_rate_wpm: {audio.speech_rate_wpm:.0f}")
        if audio.pitch_variation is not None:
            features.append(f"pitch_variation: {audio.pitch_variation:.2f}")
        if audio.energy_level is not None:
            features.append(f"energy_level: {audio.energy_level:.2f}")
        if audio.pause_durations:
            features.append(f"longest_pause_seconds: {max(audio.pause_durations):.1f}")

        user_message = "Acoustic features:\n" + ("\n".join(features) or "none provided")
        if audio.transcript:
            user_message += f"\n\nTranscript:\n{audio.transcript}"

        parts = []
        if audio.raw_audio:
            parts.append(InlinePart(data=audio.raw_audio, mime_type=audio.mime_type))

        return BuiltPrompt(
            system_prompt=(
                f"{self.BASE_INSTRUCTIONS}\n\nTASK: Assess vocal stress from the voice message "
                f"features, transcript and audio if attached.\n\n{self.AUDIO_SCHEMA}"
            ),
            user_message=user_message,
            inline_parts=parts,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    def build_visual_prompt(self, request: AnalysisRequest) -> BuiltPrompt:
        image = request.image
        if image is None:
            raise ValueError("Request has no image signal")

        return BuiltPrompt(
            system_prompt=(
                f"{self.BASE_INSTRUCTIONS}\n\nTASK: Assess visible stress cues (facial "
                f"expression, posture) in the attached image. If no face is visible, "
                f"use confidence below 30.\n\n{self.VISUAL_SCHEMA}"
            ),
            user_message="Analyse the attached image.",
            inline_parts=[InlinePart(data=image.data, mime_type=image.mime_type)],
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
