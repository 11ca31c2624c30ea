"""Metrics infrastructure package."""

from serene.infrastructure.metrics.prometheus_metrics import (
    # Gate metrics
    GATE_CHECKS_TOTAL,
    CRISIS_VERDICTS_TOTAL,
    # Analysis metrics
    SUB_ANALYSES_TOTAL,
    FALLBACKS_TOTAL,
    STRESS_LEVELS,
    # LLM metrics
    LLM_REQUESTS_TOTAL,
    LLM_LATENCY,
    LLM_TOKENS_USED,
    # Queue metrics
    QUEUE_DEPTH,
    QUEUE_ITEMS_TOTAL,
    QUEUE_ITEM_DURATION,
    # Notification metrics
    NOTIFICATIONS_TOTAL,
    PATTERN_ALERTS_TOTAL,
    NOTIFIER_FAILURES_TOTAL,
    # API metrics
    HTTP_REQUESTS_TOTAL,
    HTTP_REQUEST_DURATION,
    # Helpers
    track_llm_request,
    track_gate_check,
    track_crisis_verdict,
    track_sub_analysis,
    track_queue_item,
    track_notification,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "GATE_CHECKS_TOTAL",
    "CRISIS_VERDICTS_TOTAL",
    "SUB_ANALYSES_TOTAL",
    "FALLBACKS_TOTAL",
    "STRESS_LEVELS",
    "LLM_REQUESTS_TOTAL",
    "LLM_LATENCY",
    "LLM_TOKENS_USED",
    "QUEUE_DEPTH",
    "QUEUE_ITEMS_TOTAL",
    "QUEUE_ITEM_DURATION",
    "NOTIFICATIONS_TOTAL",
    "PATTERN_ALERTS_TOTAL",
    "NOTIFIER_FAILURES_TOTAL",
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_DURATION",
    "track_llm_request",
    "track_gate_check",
    "track_crisis_verdict",
    "track_sub_analysis",
    "track_queue_item",
    "track_notification",
    "update_system_info",
    "metrics_router",
]
