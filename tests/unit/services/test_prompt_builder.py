"""Unit tests for prompt construction."""

import pytest

from serene.domain.models import AudioSignal, ImageSignal, UserEmotionalProfile
from serene.services.prompt import PromptBuilder


class TestPromptBuilder:
    """Test suite for PromptBuilder."""

    @pytest.fixture
    def builder(self) -> PromptBuilder:
        return PromptBuilder()

    def test_text_prompt_keeps_last_five_context_lines(self, builder: PromptBuilder, make_request) -> None:
        request = make_request("help", conversation_context=[f"m{i}" for i in range(8)])

        prompt = builder.build_text_prompt(request)

        assert prompt.context_lines == ["m3", "m4", "m5", "m6", "m7"]
        assert prompt.user_message == "help"
        assert "stress_score" in prompt.system_prompt

    def test_profile_calibration_hints(self, builder: PromptBuilder, make_request) -> None:
        profile = UserEmotionalProfile(user_id="user-1", baseline_stress=6.25, trigger_words=["exams"])

        prompt = builder.build_text_prompt(make_request(), profile)

        assert "Typical stress level for this user: 6.2" in prompt.system_prompt
        assert "Known stress triggers: exams" in prompt.system_prompt

    def test_audio_prompt_lists_features(self, builder: PromptBuilder, make_request) -> None:
        request = make_request(
            audio=AudioSignal(transcript="so much to do", speech_rate_wpm=182.4, pause_durations=[0.5, 2.25])
        )

        prompt = builder.build_audio_prompt(request)

        assert "speech_rate_wpm: 182" in prompt.user_message
        assert "longest_pause_seconds: 2.2" in prompt.user_message
        assert "Transcript:\nso much to do" in prompt.user_message
        assert prompt.inline_parts == []

    def test_audio_prompt_requires_audio(self, builder: PromptBuilder, make_request) -> None:
        with pytest.raises(ValueError):
            builder.build_audio_prompt(make_request())

    def test_visual_prompt_attaches_image(self, builder: PromptBuilder, make_request) -> None:
        request = make_request(image=ImageSignal(data=b"\x89PNG", mime_type="image/png"))

        prompt = builder.build_visual_prompt(request)
        messages = prompt.to_messages()

        assert prompt.inline_parts[0].to_data_url().startswith("data:image/png;base64,")
        assert messages[-1]["content"][1]["type"] == "image_url"

    def test_text_rendering_includes_context(self, builder: PromptBuilder, make_request) -> None:
        prompt = builder.build_text_prompt(make_request("today", conversation_context=["earlier"]))
        rendered = prompt.to_text()

        assert "Recent conversation:\n- earlier" in rendered
        assert rendered.endswith("Input:\ntoday")
