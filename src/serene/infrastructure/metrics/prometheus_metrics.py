"""
Prometheus Metrics

Pipeline observability for SERENE.
Exposes metrics at /metrics endpoint for Prometheus scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
"""

import time
from functools import wraps
from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from fastapi import APIRouter, Response

# =============================================================================
# SEND GATE METRICS
# =============================================================================

GATE_CHECKS_TOTAL = Counter(
    "serene_gate_checks_total",
    "Synchronous crisis gate checks by outcome",
    ["risk_level", "allowed"],
)

CRISIS_VERDICTS_TOTAL = Counter(
    "serene_crisis_verdicts_total",
    "Positive crisis verdicts by triggering source",
    ["source"],  # keyword_gate, linguistic, model
)

# =============================================================================
# ANALYSIS METRICS
# =============================================================================

SUB_ANALYSES_TOTAL = Counter(
    "serene_sub_analyses_total",
    "Sub-analysis results by modality and source",
    ["modality", "source"],  # source: ai, heuristic, default
)

FALLBACKS_TOTAL = Counter(
    "serene_fallbacks_total",
    "Heuristic fallbacks by modality and reason",
    ["modality", "reason"],  # ai_unavailable, timeout, provider_error, parse_error, unexpected_error
)

STRESS_LEVELS = Histogram(
    "serene_stress_level",
    "Combined stress levels",
    buckets=[1, 2, 3, 4, 5, 6, 7, 8, 9, 10],
)

# =============================================================================
# LLM METRICS
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "serene_llm_requests_total",
    "Total LLM requests by provider",
    ["provider", "status"],  # success, error, rate_limited
)

LLM_LATENCY = Histogram(
    "serene_llm_latency_seconds",
    "LLM response latency",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
)

LLM_TOKENS_USED = Counter(
    "serene_llm_tokens_total",
    "Total tokens used by LLM",
    ["provider", "type"],  # input, output
)

# =============================================================================
# QUEUE METRICS
# =============================================================================

QUEUE_DEPTH = Gauge(
    "serene_queue_depth",
    "Analysis requests waiting in the queue",
)

QUEUE_ITEMS_TOTAL = Counter(
    "serene_queue_items_total",
    "Processed queue items by outcome",
    ["outcome"],  # succeeded, fallback_used, failed
)

QUEUE_ITEM_DURATION = Histogram(
    "serene_queue_item_duration_seconds",
    "Pipeline run duration per queued request",
    buckets=[0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

# =============================================================================
# NOTIFICATION METRICS
# =============================================================================

NOTIFICATIONS_TOTAL = Counter(
    "serene_notifications_total",
    "Notification dispatch outcomes",
    ["kind", "urgency", "outcome"],  # created, duplicate, store_failed
)

PATTERN_ALERTS_TOTAL = Counter(
    "serene_pattern_alerts_total",
    "Pattern alerts raised",
)

NOTIFIER_FAILURES_TOTAL = Counter(
    "serene_notifier_failures_total",
    "Out-of-band alert delivery failures",
    ["notifier"],
)

# =============================================================================
# API METRICS
# =============================================================================

HTTP_REQUESTS_TOTAL = Counter(
    "serene_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)

HTTP_REQUEST_DURATION = Histogram(
    "serene_http_request_duration_seconds",
    "HTTP request duration",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "serene_system",
    "SERENE system information",
)

SYSTEM_INFO.info({
    "version": "0.1.0",
    "environment": "development",  # Updated at runtime
})


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_llm_request(provider: str) -> Callable:
    """Decorator to track LLM request metrics."""
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = await func(*args, **kwargs)
                LLM_REQUESTS_TOTAL.labels(provider=provider, status="success").inc()
                LLM_TOKENS_USED.labels(provider=provider, type="input").inc(
                    result.prompt_tokens or 0
                )
                LLM_TOKENS_USED.labels(provider=provider, type="output").inc(
                    result.completion_tokens or 0
                )
                return result
            except Exception as e:
                error_type = "rate_limited" if "rate" in str(e).lower() else "error"
                LLM_REQUESTS_TOTAL.labels(provider=provider, status=error_type).inc()
                raise
            finally:
                duration = time.time() - start_time
                LLM_LATENCY.labels(provider=provider).observe(duration)
        return wrapper
    return decorator


def track_gate_check(risk_level: str, allowed: bool) -> None:
    """Record a synchronous gate decision."""
    GATE_CHECKS_TOTAL.labels(risk_level=risk_level, allowed=str(allowed).lower()).inc()


def track_crisis_verdict(sources: tuple[str, ...]) -> None:
    """Record each source that contributed to a positive verdict."""
    for source in sources:
        CRISIS_VERDICTS_TOTAL.labels(source=source).inc()


def track_sub_analysis(modality: str, source: str, fallback_reason: str = "") -> None:
    """Record a sub-analysis result and, if any, why it fell back."""
    SUB_ANALYSES_TOTAL.labels(modality=modality, source=source).inc()
    if fallback_reason:
        FALLBACKS_TOTAL.labels(modality=modality, reason=fallback_reason).inc()


def track_queue_item(outcome: str, duration_seconds: float) -> None:
    """Record a processed queue item."""
    QUEUE_ITEMS_TOTAL.labels(outcome=outcome).inc()
    QUEUE_ITEM_DURATION.observe(duration_seconds)


def track_notification(kind: str, urgency: str, outcome: str) -> None:
    """Record a notification dispatch outcome."""
    NOTIFICATIONS_TOTAL.labels(kind=kind, urgency=urgency, outcome=outcome).inc()


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


def update_system_info(environment: str, version: str = "0.1.0") -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })
