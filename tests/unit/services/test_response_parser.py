"""
Unit Tests for Model Response Parser

Strict deserialization of generative-AI replies into payloads.
"""

import pytest

from serene.domain.errors import ParseError
from serene.services.analysis import (
    AudioAnalysisPayload,
    ModelResponseParser,
    Parsed,
    ParseFailure,
    TextAnalysisPayload,
    VisualAnalysisPayload,
    extract_json_object,
)


class TestExtractJsonObject:
    """Test suite for extract_json_object."""

    def test_plain_object(self) -> None:
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_markdown_fence(self) -> None:
        raw = '```json\n{"stress_score": 6}\n```'
        assert extract_json_object(raw) == {"stress_score": 6}

    def test_object_inside_prose(self) -> None:
        raw = 'Here is my analysis: {"stress_score": 4, "mood": "Calm"} Hope it helps.'
        assert extract_json_object(raw) == {"stress_score": 4, "mood": "Calm"}

    def test_skips_invalid_braces(self) -> None:
        assert extract_json_object('not {valid} but {"a": 1}') == {"a": 1}

    def test_no_object(self) -> None:
        assert extract_json_object("I am unable to help with that.") is None

    def test_array_is_not_an_object(self) -> None:
        assert extract_json_object("[1, 2, 3]") is None


class TestModelResponseParser:
    """Test suite for ModelResponseParser."""

    @pytest.fixture
    def parser(self) -> ModelResponseParser:
        return ModelResponseParser()

    def test_valid_text_reply(self, parser: ModelResponseParser) -> None:
        result = parser.parse(
            '{"stress_score": 6.5, "mood": "Anxious", "intent": "Venting", '
            '"emotions": ["anxiety"], "confidence": 82}',
            TextAnalysisPayload,
        )
        assert isinstance(result, Parsed)
        assert result.value.stress_score == 6.5
        assert result.value.mood == "Anxious"
        assert result.value.confidence == 82

    def test_alias_field_names(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stressLevel": 3, "moodType": "Calm"}', TextAnalysisPayload)
        assert isinstance(result, Parsed)
        assert result.value.stress_score == 3
        assert result.value.mood == "Calm"

    def test_fractional_confidence_scaled(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stress_score": 5, "confidence": 0.85}', TextAnalysisPayload)
        assert isinstance(result, Parsed)
        assert result.value.confidence == pytest.approx(85.0)

    def test_boolean_crisis_flag(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stress_score": 9, "crisis_indicators": true}', TextAnalysisPayload)
        assert isinstance(result, Parsed)
        assert result.value.crisis_indicators == ["model_flagged_crisis"]

    def test_string_becomes_list(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stress_score": 4, "emotions": "worry"}', TextAnalysisPayload)
        assert isinstance(result, Parsed)
        assert result.value.emotions == ["worry"]

    def test_unknown_fields_ignored(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stress_score": 4, "reasoning": "long text"}', TextAnalysisPayload)
        assert isinstance(result, Parsed)

    def test_out_of_range_rejected(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"stress_score": 12}', TextAnalysisPayload)
        assert isinstance(result, ParseFailure)
        assert result.reason.startswith("schema validation failed")

    def test_missing_required_field(self, parser: ModelResponseParser) -> None:
        result = parser.parse('{"mood": "Sad"}', TextAnalysisPayload)
        assert isinstance(result, ParseFailure)
        assert "stress_score" in result.reason

    def test_empty_reply(self, parser: ModelResponseParser) -> None:
        result = parser.parse("   ", TextAnalysisPayload)
        assert result == ParseFailure(reason="empty reply")

    def test_prose_reply(self, parser: ModelResponseParser) -> None:
        result = parser.parse("Sorry, I can't analyze this message.", TextAnalysisPayload)
        assert isinstance(result, ParseFailure)
        assert result.reason == "no JSON object in reply"
        assert result.excerpt.startswith("Sorry")

    def test_failure_converts_to_error(self, parser: ModelResponseParser) -> None:
        failure = parser.parse("nothing", TextAnalysisPayload)
        assert isinstance(failure, ParseFailure)
        error = failure.to_error()
        assert isinstance(error, ParseError)
        assert error.reason == "no JSON object in reply"

    def test_audio_payload(self, parser: ModelResponseParser) -> None:
        result = parser.parse(
            '{"stress_score": 6, "voice_stress": 8, "indicators": {"fast_speech": true}}',
            AudioAnalysisPayload,
        )
        assert isinstance(result, Parsed)
        assert result.value.voice_stress == 8
        assert result.value.indicators == {"fast_speech": True}

    def test_visual_payload(self, parser: ModelResponseParser) -> None:
        result = parser.parse(
            '{"stress_score": 7, "facial_emotions": [{"emotion": "Fear", "intensity": 0.7}], '
            '"body_language": "tense shoulders"}',
            VisualAnalysisPayload,
        )
        assert isinstance(result, Parsed)
        assert result.value.facial_emotions[0].emotion == "Fear"
        assert result.value.body_language == ["tense shoulders"]

    def test_visual_intensity_out_of_range(self, parser: ModelResponseParser) -> None:
        result = parser.parse(
            '{"stress_score": 7, "facial_emotions": [{"emotion": "Fear", "intensity": 3}]}',
            VisualAnalysisPayload,
        )
        assert isinstance(result, ParseFailure)
