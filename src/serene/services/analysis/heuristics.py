"""
Stress Heuristics

Deterministic keyword-tier scan used whenever the generative-AI
backend is unavailable or its reply cannot be parsed.

Scoring:
1. The highest-severity tier with any match picks the score band.
2. Extra matches in that tier raise the score within the band.
3. Exclamation density, ALL-CAPS runs and intensifiers add a small
   boost, capped at the band ceiling.
4. Calm vocabulary alongside stress vocabulary lowers the score.

Heuristic confidence never exceeds 40.

CLINICAL_REVIEW_REQUIRED: Vocabularies and bands are empirically
chosen and unvalidated.
"""

import re
from dataclasses import dataclass, field
from typing import Optional

from serene.domain.enums import IntentType, MoodType
from serene.domain.models import clamp_stress


@dataclass(frozen=True)
class StressTierRule:
    name: str
    band: tuple[float, float]
    keywords: tuple[str, ...]
    polarity: float


@dataclass
class HeuristicScan:
    """
    Result of a heuristic scan.

    Attributes:
        stress_score: 0-10
        tier: Name of the tier that set the band, or "none"
        matches: Matched keywords per tier
        mood: Mood from the mood lexicon or tier
        intent: Intent from help/advice markers or tier
        emotions: Mood labels with lexicon hits
        sentiment_polarity: -1.0 to 1.0
        confidence: 0-40
        signals: Punctuation and casing signals
    """

    stress_score: float
    tier: str
    matches: dict[str, list[str]] = field(default_factory=dict)
    mood: MoodType = MoodType.NEUTRAL
    intent: IntentType = IntentType.CASUAL_CHAT
    emotions: list[str] = field(default_factory=list)
    sentiment_polarity: float = 0.0
    confidence: float = 20.0
    signals: dict[str, float] = field(default_factory=dict)

    @property
    def keywords(self) -> list[str]:
        return [k for words in self.matches.values() for k in words]

    @property
    def severe_matches(self) -> list[str]:
        return self.matches.get("severe", [])


class StressHeuristics:
    """
    Weighted keyword-tier scan with punctuation and casing signals.

    Tiers are checked from most to least severe. Mild phrases are
    matched before moderate words so "bit worried" is not also
    counted as "worried".
    """

    SEVERE = StressTierRule(
        name="severe",
        band=(9.0, 10.0),
        keywords=("suicide", "kill myself", "end it all", "want to die", "no point living"),
        polarity=-0.9,
    )
    HIGH = StressTierRule(
        name="high",
        band=(7.0, 8.5),
        keywords=(
            "panic", "overwhelmed", "can't cope", "breaking down", "crisis",
            "hopeless", "desperate", "falling apart", "can't handle",
        ),
        polarity=-0.7,
    )
    MILD = StressTierRule(
        name="mild",
        band=(2.5, 3.5),
        keywords=(
            "bit worried", "slightly nervous", "little stressed",
            "minor issue", "small problem", "just concerned",
        ),
        polarity=-0.2,
    )
    MODERATE = StressTierRule(
        name="moderate",
        band=(4.5, 6.0),
        keywords=(
            "stressed", "anxious", "worried", "scared", "pressure", "deadline",
            "exam", "assignment", "confused", "frustrated", "tired", "exhausted",
            "nervous", "concerned", "struggling",
        ),
        polarity=-0.4,
    )
    CALM = StressTierRule(
        name="calm",
        band=(1.0, 2.5),
        keywords=(
            "calm", "fine", "okay", "good", "happy", "excited", "relaxed",
            "peaceful", "great", "awesome", "chilling", "content",
        ),
        polarity=0.6,
    )

    # Severity order for choosing the band
    SEVERITY_ORDER: tuple[StressTierRule, ...] = (SEVERE, HIGH, MODERATE, MILD)
    # Match order; mild phrases consume their words first
    MATCH_ORDER: tuple[StressTierRule, ...] = (SEVERE, HIGH, MILD, MODERATE, CALM)

    NEUTRAL_SCORE = 3.0
    NEUTRAL_CEILING = 4.0
    CALM_SCORE = 1.5
    EXTRA_MATCH_STEP = 0.4
    CALM_DAMPING = 0.5

    INTENSIFIERS: frozenset[str] = frozenset({
        "very", "really", "so", "extremely", "pretty", "super", "totally",
    })

    MOOD_LEXICON: dict[MoodType, tuple[str, ...]] = {
        MoodType.OVERWHELMED: ("overwhelmed", "too much", "can't handle", "can't cope", "drowning"),
        MoodType.ANXIOUS: ("anxious", "worried", "nervous", "scared", "panic", "afraid"),
        MoodType.STRESSED: ("stressed", "pressure", "deadline", "exam", "assignment"),
        MoodType.SAD: ("sad", "depressed", "down", "crying", "hopeless", "upset"),
        MoodType.ANGRY: ("angry", "furious", "mad", "hate"),
        MoodType.FRUSTRATED: ("frustrated", "annoyed", "confused", "stuck"),
        MoodType.LONELY: ("lonely", "alone", "isolated", "nobody", "left out"),
        MoodType.MOTIVATED: ("motivated", "productive", "determined", "ready"),
        MoodType.HAPPY: ("happy", "great", "awesome", "excited", "good"),
        MoodType.CALM: ("calm", "relaxed", "peaceful", "fine", "okay", "content", "chilling"),
    }

    TIER_MOODS: dict[str, MoodType] = {
        "severe": MoodType.OVERWHELMED,
        "high": MoodType.OVERWHELMED,
        "moderate": MoodType.STRESSED,
        "mild": MoodType.ANXIOUS,
        "calm": MoodType.CALM,
        "none": MoodType.NEUTRAL,
    }

    SEEKING_HELP_PATTERN = re.compile(r"\b(help me|need help|please help|someone help)\b")
    ADVICE_PATTERN = re.compile(
        r"\b(what should i|how do i|how can i|any (tips|advice)|advice|should i)\b"
    )
    CAPS_RUN_PATTERN = re.compile(r"\b[A-Z]{3,}\b")

    def __init__(self) -> None:
        self._patterns: dict[str, re.Pattern] = {}

    def _pattern(self, keyword: str) -> re.Pattern:
        pattern = self._patterns.get(keyword)
        if pattern is None:
            # Plural and simple suffixes: exam -> exams, deadline -> deadlines
            pattern = re.compile(r"\b" + re.escape(keyword) + r"(?:s|es)?\b")
            self._patterns[keyword] = pattern
        return pattern

    def _match_tiers(self, normalized: str) -> dict[str, list[str]]:
        remaining = normalized
        matches: dict[str, list[str]] = {}
        for rule in self.MATCH_ORDER:
            found = []
            for keyword in rule.keywords:
                pattern = self._pattern(keyword)
                if pattern.search(remaining):
                    found.append(keyword)
                    if rule is self.MILD:
                        remaining = pattern.sub(" ", remaining)
            if found:
                matches[rule.name] = found
        return matches

    def _signals(self, text: str, normalized: str) -> dict[str, float]:
        exclamations = text.count("!")
        caps_runs = len(self.CAPS_RUN_PATTERN.findall(text))
        words = set(re.findall(r"[a-z']+", normalized))
        intensifiers = len(words & self.INTENSIFIERS)

        signals: dict[str, float] = {}
        if exclamations >= 3:
            signals["exclamation_density"] = 0.5
        elif exclamations >= 1:
            signals["exclamation_density"] = 0.2
        if caps_runs >= 2:
            signals["caps_runs"] = 0.5
        elif caps_runs == 1:
            signals["caps_runs"] = 0.25
        if intensifiers:
            signals["intensifiers"] = 0.3
        return signals

    def _mood(self, normalized: str, tier: str) -> tuple[MoodType, list[str]]:
        hits: dict[MoodType, int] = {}
        for mood, words in self.MOOD_LEXICON.items():
            count = sum(1 for word in words if self._pattern(word).search(normalized))
            if count:
                hits[mood] = count

        emotions = [mood.value.lower() for mood in hits]
        if not hits:
            return self.TIER_MOODS[tier], emotions

        stress_tier = tier in ("severe", "high", "moderate", "mild")
        candidates = {
            mood: count for mood, count in hits.items()
            if not (stress_tier and mood.is_positive)
        } or hits
        # Lexicon order breaks ties
        best = max(candidates.items(), key=lambda item: item[1])[0]
        return best, emotions

    def _intent(self, normalized: str, tier: str) -> IntentType:
        if self.SEEKING_HELP_PATTERN.search(normalized):
            return IntentType.SEEKING_HELP
        if self.ADVICE_PATTERN.search(normalized) or ("?" in normalized and tier != "none"):
            return IntentType.ASKING_FOR_ADVICE
        if tier == "severe":
            return IntentType.SEEKING_HELP
        if tier in ("high", "moderate", "mild"):
            return IntentType.VENTING
        return IntentType.CASUAL_CHAT

    def scan(self, text: str) -> HeuristicScan:
        """
        Score a message.

        Args:
            text: Raw message text

        Returns:
            HeuristicScan with score, mood, intent and confidence
        """
        normalized = text.replace("’", "'").lower()
        matches = self._match_tiers(normalized)
        signals = self._signals(text, normalized)
        boost = sum(signals.values())

        rule: Optional[StressTierRule] = next(
            (r for r in self.SEVERITY_ORDER if r.name in matches), None
        )

        if rule is not None:
            low, high = rule.band
            extra = len(matches[rule.name]) - 1
            score = min(high, low + self.EXTRA_MATCH_STEP * extra + boost)
            if "calm" in matches and rule is not self.SEVERE:
                score = max(low - self.CALM_DAMPING, score - self.CALM_DAMPING)
            tier = rule.name
            polarity = rule.polarity
        elif "calm" in matches:
            low, _ = self.CALM.band
            extra = len(matches["calm"]) - 1
            score = max(low, self.CALM_SCORE - 0.25 * extra)
            tier = "calm"
            polarity = self.CALM.polarity
        else:
            score = min(self.NEUTRAL_CEILING, self.NEUTRAL_SCORE + boost)
            tier = "none"
            polarity = 0.0

        mood, emotions = self._mood(normalized, tier)
        total_matches = sum(len(words) for words in matches.values())

        return HeuristicScan(
            stress_score=round(clamp_stress(score), 2),
            tier=tier,
            matches=matches,
            mood=mood,
            intent=self._intent(normalized, tier),
            emotions=emotions,
            sentiment_polarity=polarity,
            confidence=25.0 + 5.0 * min(3, total_matches) if total_matches else 20.0,
            signals=signals,
        )
