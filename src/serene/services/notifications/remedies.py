"""
Remedy Selection

Ordered, de-duplicated coping suggestions for a notification.

Order:
1. Crisis resources (positive crisis verdict only)
2. Severe-stress steps (score >= 8)
3. The user's own calming factors
4. Rule-table remedies keyed by emotions, keywords and triggers
5. Mood-specific wellness activities
6. General remedies, to fill

CLINICAL_REVIEW_REQUIRED: Remedy wording and rule keys.
"""

from dataclasses import dataclass
from typing import Optional

from serene.domain.enums import MoodType
from serene.domain.models import HybridAnalysis, UserEmotionalProfile
from serene.services.safety.crisis_keyword_detector import CRISIS_HOTLINE

TRIGGER_PREFIX = "Known trigger: "


@dataclass(frozen=True)
class RemedyRule:
    name: str
    triggers: tuple[str, ...]
    remedies: tuple[str, ...]


class RemedySelector:
    """
    Picks remedies for an analysis.

    Usage:
        selector = RemedySelector()
        remedies = selector.select(analysis, profile, limit=6)
    """

    CRISIS_REMEDIES: tuple[str, ...] = (
        f"Call or text {CRISIS_HOTLINE} to talk with someone right now",
        "Contact your campus counseling center",
        "If thoughts of self-harm occur, contact emergency services immediately",
    )

    SEVERE_REMEDIES: tuple[str, ...] = (
        "Consider contacting your campus counseling center",
        "Use the STOP technique: Stop, Take a breath, Observe, Proceed mindfully",
        "Practice grounding: name 5 things you see, 4 you hear, 3 you touch",
    )

    RULES: tuple[RemedyRule, ...] = (
        RemedyRule(
            name="academic",
            triggers=("exam", "assignment", "deadline", "study", "homework", "pressure", "grade"),
            remedies=(
                "Break large tasks into smaller, manageable chunks",
                "Use the Pomodoro Technique (25 min work, 5 min break)",
                "Create a realistic study schedule with buffer time",
            ),
        ),
        RemedyRule(
            name="social",
            triggers=("lonely", "isolated", "alone", "rejected", "left out", "nobody"),
            remedies=(
                "Reach out to one person you trust today",
                "Join a study group or student organization",
                "Practice self-compassion and positive self-talk",
            ),
        ),
        RemedyRule(
            name="anxiety",
            triggers=("anxious", "nervous", "worried", "panic", "scared", "afraid"),
            remedies=(
                "Try box breathing: in 4, hold 4, out 4, hold 4",
                "Write your worries down and set them aside for later",
            ),
        ),
        RemedyRule(
            name="overwhelmed",
            triggers=("overwhelmed", "too much", "can't cope", "can't handle"),
            remedies=(
                "List everything on your mind, then pick just one thing to do next",
                "Ask for an extension or help with one task",
            ),
        ),
        RemedyRule(
            name="fatigue",
            triggers=("tired", "exhausted", "sleep", "drained"),
            remedies=(
                "Aim for a consistent bedtime tonight",
                "Take a 20-minute rest away from screens",
            ),
        ),
        RemedyRule(
            name="anger",
            triggers=("angry", "furious", "frustrated", "annoyed", "mad"),
            remedies=(
                "Step away for ten minutes before responding",
                "Go for a brisk walk to release tension",
            ),
        ),
        RemedyRule(
            name="sadness",
            triggers=("sad", "down", "upset", "crying", "depressed", "hopeless"),
            remedies=(
                "Be as kind to yourself as you would be to a friend",
                "Do one small thing you usually enjoy",
            ),
        ),
    )

    BREATHING = "5-minute breathing exercise to reduce immediate stress"

    MOOD_ACTIVITIES: dict[MoodType, str] = {
        MoodType.ANXIOUS: "10-minute anxiety relief meditation",
        MoodType.LONELY: "Connect with the community: reach out to a friend or a support group",
        MoodType.OVERWHELMED: "15 minutes of stress release journaling",
    }

    GENERAL_REMEDIES: tuple[str, ...] = (
        "Take a short walk outside",
        "Drink some water and have a snack",
        "Talk to someone you trust about how you feel",
    )

    MAX_CALMING_FACTORS = 2

    def _terms(self, analysis: HybridAnalysis) -> list[str]:
        terms = [e.lower() for e in analysis.emotions]
        terms.extend(k.lower() for k in analysis.keywords)
        terms.append(analysis.mood_type.value.lower())
        terms.extend(
            p[len(TRIGGER_PREFIX):].lower()
            for p in analysis.detected_patterns
            if p.startswith(TRIGGER_PREFIX)
        )
        return terms

    def matching_rules(self, analysis: HybridAnalysis) -> list[RemedyRule]:
        terms = self._terms(analysis)
        return [
            rule
            for rule in self.RULES
            if any(trigger in term for trigger in rule.triggers for term in terms)
        ]

    def select(
        self,
        analysis: HybridAnalysis,
        profile: Optional[UserEmotionalProfile] = None,
        limit: int = 6,
    ) -> list[str]:
        """
        Remedies for an analysis, most important first.

        Args:
            analysis: Combined analysis
            profile: Optional profile for calming factors
            limit: Maximum number of remedies

        Returns:
            At most limit unique remedies
        """
        ordered: list[str] = []

        if analysis.crisis_indicators:
            ordered.extend(self.CRISIS_REMEDIES)
        if analysis.stress_level >= 8:
            ordered.extend(self.SEVERE_REMEDIES)

        if profile is not None:
            ordered.extend(
                f"Make time for {factor}; you said it helps you feel calmer"
                for factor in profile.calming_factors[: self.MAX_CALMING_FACTORS]
            )

        for rule in self.matching_rules(analysis):
            ordered.extend(rule.remedies)

        if analysis.stress_level >= 6:
            ordered.append(self.BREATHING)
        activity = self.MOOD_ACTIVITIES.get(analysis.mood_type)
        if activity:
            ordered.append(activity)

        ordered.extend(self.GENERAL_REMEDIES)

        return list(dict.fromkeys(ordered))[:limit]
