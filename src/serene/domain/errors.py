"""
Error Hierarchy

Typed failures raised inside the analysis pipeline. Every one of
these is recovered locally; none may reach the message-send path.

- ExternalServiceError: AI backend unreachable, timed out or refused.
  Recovered by heuristic fallback.
- ParseError: AI call succeeded but the reply is not valid JSON for
  the expected schema. Same fallback path.
- QueueItemError: any failure while processing one queued request.
  Isolated to that item.
- StorageError: a repository write or read failed. Dispatch retries
  once, then degrades softly.
"""

from typing import Optional


class SereneError(Exception):
    """Base exception for the analysis pipeline."""


class ExternalServiceError(SereneError):
    """An external collaborator (AI backend, notifier) failed."""

    def __init__(
        self,
        message: str,
        service: str,
        is_retryable: bool = False,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.service = service
        self.is_retryable = is_retryable
        self.original_error = original_error


class ParseError(SereneError):
    """Model reply could not be deserialized into the expected schema."""

    def __init__(self, reason: str, excerpt: str = "") -> None:
        super().__init__(reason)
        self.reason = reason
        self.excerpt = excerpt


class QueueItemError(SereneError):
    """Processing of a single queued analysis request failed."""

    def __init__(self, request_id: str, original_error: Exception) -> None:
        super().__init__(f"Analysis request {request_id} failed: {original_error}")
        self.request_id = request_id
        self.original_error = original_error


class StorageError(SereneError):
    """Persistent store operation failed."""

    def __init__(
        self,
        message: str,
        operation: str = "",
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.original_error = original_error


class QueueClosedError(SereneError):
    """The analysis queue was stopped and accepts no more requests."""
