"""
Notification message templates, tiered by stress score.

CLINICAL_REVIEW_REQUIRED: All wording below.
"""

from serene.services.safety.crisis_keyword_detector import CRISIS_HOTLINE, EMERGENCY_NUMBER

SIGNIFICANT_STRESS = (
    "We noticed signs of significant stress in your recent message. Your wellbeing "
    "matters, and here are some immediate steps that might help."
)
ELEVATED_STRESS = (
    "Your recent message suggests you might be experiencing some stress. Here are "
    "personalized suggestions to support you."
)
MILD_STRESS = (
    "We detected some stress indicators in your message. Here are some gentle "
    "strategies that might be helpful."
)
CRISIS_MESSAGE = (
    "Your recent message worried us. You don't have to go through this alone. "
    f"Call or text {CRISIS_HOTLINE} any time, or {EMERGENCY_NUMBER} if you are in immediate danger."
)
PATTERN_MESSAGE = (
    "Your last few messages have shown high stress. It might be a good moment to "
    "pause and check in with yourself, or with someone you trust."
)

URGENT_ALERT_TITLE = "Checking in on you"


def stress_message(score: float, is_crisis: bool = False) -> str:
    """Message body for a stress notification."""
    if is_crisis:
        return CRISIS_MESSAGE
    if score >= 8:
        return SIGNIFICANT_STRESS
    if score >= 7:
        return ELEVATED_STRESS
    return MILD_STRESS
