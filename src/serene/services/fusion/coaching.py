"""
Conversation Coaching

Static suggested actions and coach replies keyed by mood.

CLINICAL_REVIEW_REQUIRED: All wording below.
"""

from serene.domain.enums import MoodType

CRISIS_ACTION = (
    "Immediate support needed: please reach out to a counselor, a trusted friend "
    "or a crisis line (call or text 988) right away. You matter and help is available."
)

CRISIS_REPLY = "Please prioritize your safety and reach out for immediate support. I'm here to listen."

DEFAULT_REPLY = "Thank you for sharing. How are you feeling right now?"

COACH_ACTIONS: dict[MoodType, str] = {
    MoodType.OVERWHELMED: "Break the next task into one small step and start with only that.",
    MoodType.ANXIOUS: "Try a slow breathing round: in for 4, hold for 4, out for 6.",
    MoodType.STRESSED: "Take a short break away from the screen before picking things up again.",
    MoodType.SAD: "Be gentle with yourself today and consider reaching out to someone you trust.",
    MoodType.ANGRY: "Step away for a few minutes and let the first wave of anger pass.",
    MoodType.FRUSTRATED: "Write down exactly what is blocking you; it often shrinks on paper.",
    MoodType.LONELY: "Send a message to a friend or join a group activity today.",
    MoodType.MOTIVATED: "Use the momentum, and plan a break so it lasts.",
    MoodType.HAPPY: "Keep doing what is working for you.",
    MoodType.CALM: "Keep doing what is working for you.",
    MoodType.NEUTRAL: "Continue your conversation.",
}

COACH_REPLIES: dict[MoodType, str] = {
    MoodType.OVERWHELMED: "I can hear that you're feeling really overwhelmed right now. That's completely valid.",
    MoodType.ANXIOUS: "It sounds like you're experiencing some anxiety. Would you like to talk through what's on your mind?",
    MoodType.SAD: "I'm sorry you're going through a difficult time. Your feelings are important.",
    MoodType.ANGRY: "I can sense your frustration. Sometimes it helps to express what's bothering you.",
    MoodType.LONELY: "Feeling alone can be really hard. This community is here for you.",
}


def suggested_action(mood: MoodType, is_crisis: bool = False) -> str:
    if is_crisis:
        return CRISIS_ACTION
    return COACH_ACTIONS.get(mood, COACH_ACTIONS[MoodType.NEUTRAL])


def coach_reply(mood: MoodType, is_crisis: bool = False) -> str:
    if is_crisis:
        return CRISIS_REPLY
    return COACH_REPLIES.get(mood, DEFAULT_REPLY)
