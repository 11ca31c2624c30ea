"""
SERENE Logging

structlog setup shared by the HTTP layer and the analysis worker.

Two kinds of context are bound per unit of work:
- correlation_id: the HTTP request (middleware) or the analysis
  request id (queue worker)
- user_id: bound by the queue worker next to the analysis request id

PRIVACY: users' words never reach a log line. Known message-bearing
keys are replaced by their length; credential-like keys are redacted.
"""

import logging
import sys
from typing import Any

import structlog

from serene.config.settings import Settings

SERVICE_NAME = "serene-pipeline"
SERVICE_VERSION = "0.1.0"

# Keys that carry what a user wrote, logged as a length only
MESSAGE_TEXT_KEYS: frozenset[str] = frozenset({
    "text",
    "transcript",
    "message_text",
    "original_message",
    "conversation_context",
})

# Substrings of keys that carry credentials
CREDENTIAL_PATTERNS: frozenset[str] = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "bearer",
    "credential",
    "dsn",
})


def _length_of(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return f"[{sum(len(str(item)) for item in value)} chars in {len(value)} items]"
    return f"[{len(str(value))} chars]"


def summarize_message_text(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Replace message-bearing values with their length."""
    for key in MESSAGE_TEXT_KEYS & event_dict.keys():
        event_dict[key] = _length_of(event_dict[key])
    return event_dict


def redact_credentials(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Redact values under credential-like keys, including nested ones."""
    def redact_value(key: str, value: Any) -> Any:
        key_lower = key.lower()
        if any(pattern in key_lower for pattern in CREDENTIAL_PATTERNS):
            return "[REDACTED]"
        if isinstance(value, dict):
            return {k: redact_value(k, v) for k, v in value.items()}
        if isinstance(value, list):
            return [redact_value(key, item) for item in value]
        return value

    return {key: redact_value(key, value) for key, value in event_dict.items()}


def _add_service_context(
    logger: logging.Logger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    event_dict["service"] = SERVICE_NAME
    event_dict["version"] = SERVICE_VERSION
    return event_dict


def get_processors(is_development: bool) -> list[Any]:
    """
    structlog processor chain.

    Privacy processors run before any renderer so neither the console
    nor the JSON output sees raw text.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        summarize_message_text,
        redact_credentials,
        _add_service_context,
    ]

    if is_development:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend([
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ])

    return processors


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the stdlib root logger.

    Called once from the application lifespan. Console output in
    development, JSON lines elsewhere.
    """
    is_development = settings.env == "development"
    log_level = getattr(logging, settings.log_level.upper())

    structlog.configure(
        processors=get_processors(is_development),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # AI SDKs and HTTP clients log request bodies at DEBUG
    for name in (
        "uvicorn",
        "uvicorn.access",
        "httpx",
        "httpcore",
        "openai",
        "google.generativeai",
        "sqlalchemy.engine",
    ):
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_correlation_id(correlation_id: str) -> None:
    """Tag every log line in the current context with a correlation id."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def bind_analysis_context(request_id: str, user_id: str) -> None:
    """Tag the worker's log lines with the analysis request being processed."""
    structlog.contextvars.bind_contextvars(correlation_id=request_id, user_id=user_id)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
