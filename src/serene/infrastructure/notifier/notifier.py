"""
Out-of-Band Notifiers

Fire-and-forget "show alert" delivery for urgent notifications
(OS/browser push). Failures are raised as ExternalServiceError and
treated as non-fatal by the dispatcher.

PRIVACY: Alerts carry the notification title and message only,
never the user's original message.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx

from serene.config.logging_config import get_logger
from serene.domain.errors import ExternalServiceError

logger = get_logger(__name__)


class Notifier(ABC):
    """External alert collaborator."""

    name: str = "notifier"

    @abstractmethod
    async def show_alert(
        self,
        user_id: str,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Request an out-of-band alert.

        Raises:
            ExternalServiceError: If delivery failed
        """

    async def close(self) -> None:
        """Release resources."""


class LogNotifier(Notifier):
    """Logs alerts instead of delivering them. Used when no push endpoint is configured."""

    name = "log"

    async def show_alert(
        self,
        user_id: str,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        logger.info("Urgent alert requested", user_id=user_id, title=title)


class WebhookNotifier(Notifier):
    """
    Posts alerts as JSON to a push gateway.

    Usage:
        notifier = WebhookNotifier("https://push.example/alerts")
        await notifier.show_alert(user_id, "Check-in", "We're here for you")
        await notifier.close()
    """

    name = "webhook"

    def __init__(
        self,
        url: str,
        timeout_seconds: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.AsyncClient(timeout=timeout_seconds)
        self._owns_client = client is None

    async def show_alert(
        self,
        user_id: str,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> None:
        payload = {
            "user_id": user_id,
            "title": title,
            "body": body,
            "data": data or {},
            "priority": "high",
        }

        try:
            response = await self._client.post(
                self._url,
                json=payload,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"Push gateway returned {e.response.status_code}",
                service=self.name,
                is_retryable=e.response.status_code >= 500,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Push gateway unreachable: {type(e).__name__}",
                service=self.name,
                is_retryable=True,
                original_error=e,
            ) from e

        logger.debug("Urgent alert delivered", user_id=user_id)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
