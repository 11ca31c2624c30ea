"""
Analysis Request Domain Model

A message queued for deferred hybrid analysis. Created on message
send, owned by the analysis queue until consumed, then discarded.

PRIVACY: Requests carry raw message text and optional media.
They are never persisted as-is; only derived scores are stored.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4

from serene.domain.enums import Modality


@dataclass
class AudioSignal:
    """
    Voice-message features.

    Attributes:
        transcript: Speech-to-text transcript, if available
        speech_rate_wpm: Words per minute
        pitch_variation: Normalised pitch variability (0.0-1.0)
        energy_level: Normalised vocal energy (0.0-1.0)
        pause_durations: Pause lengths in seconds
        raw_audio: Encoded audio for backends that accept it inline
        mime_type: Encoding of raw_audio
    """

    transcript: str = ""
    speech_rate_wpm: Optional[float] = None
    pitch_variation: Optional[float] = None
    energy_level: Optional[float] = None
    pause_durations: list[float] = field(default_factory=list)
    raw_audio: Optional[bytes] = None
    mime_type: str = "audio/webm"

    @property
    def has_features(self) -> bool:
        return any(
            value is not None
            for value in (self.speech_rate_wpm, self.pitch_variation, self.energy_level)
        ) or bool(self.pause_durations)


@dataclass
class ImageSignal:
    """Inline image captured alongside a message."""

    data: bytes
    mime_type: str = "image/jpeg"


@dataclass
class AnalysisRequest:
    """
    A single message awaiting hybrid analysis.

    Attributes:
        text: Raw message text
        user_id: Author identifier
        group_id: Conversation / group identifier
        id: Unique request id; also the notification idempotency key
        timestamp: When the message was sent
        conversation_context: Recent messages, oldest first
        audio: Optional voice features
        image: Optional image payload
    """

    text: str
    user_id: str
    group_id: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.utcnow)
    conversation_context: list[str] = field(default_factory=list)
    audio: Optional[AudioSignal] = None
    image: Optional[ImageSignal] = None

    @property
    def modalities(self) -> list[Modality]:
        """Modalities present on this request. Text is always present."""
        present = [Modality.TEXT]
        if self.audio is not None:
            present.append(Modality.AUDIO)
        if self.image is not None:
            present.append(Modality.VISUAL)
        return present

    @property
    def analysis_text(self) -> str:
        """Message text plus the audio transcript, if any."""
        if self.audio and self.audio.transcript:
            return f"{self.text} {self.audio.transcript}".strip()
        return self.text
