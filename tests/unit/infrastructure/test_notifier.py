"""Unit tests for out-of-band notifiers."""

import json

import httpx
import pytest

from serene.domain.errors import ExternalServiceError
from serene.infrastructure.notifier import LogNotifier, WebhookNotifier

PUSH_URL = "https://push.test/alerts"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestWebhookNotifier:
    """Test suite for WebhookNotifier."""

    async def test_posts_alert_payload(self) -> None:
        captured: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            captured.append(request)
            return httpx.Response(202, json={"queued": True})

        async with _client(handler) as client:
            notifier = WebhookNotifier(PUSH_URL, client=client)
            await notifier.show_alert("user-1", "Checking in on you", "We're here", data={"notification_id": "r1"})

        body = json.loads(captured[0].content)
        assert str(captured[0].url) == PUSH_URL
        assert body == {
            "user_id": "user-1",
            "title": "Checking in on you",
            "body": "We're here",
            "data": {"notification_id": "r1"},
            "priority": "high",
        }

    async def test_server_error_is_retryable(self) -> None:
        async with _client(lambda request: httpx.Response(503)) as client:
            notifier = WebhookNotifier(PUSH_URL, client=client)
            with pytest.raises(ExternalServiceError) as exc_info:
                await notifier.show_alert("user-1", "t", "b")

        assert exc_info.value.is_retryable
        assert "503" in str(exc_info.value)

    async def test_client_error_not_retryable(self) -> None:
        async with _client(lambda request: httpx.Response(400)) as client:
            notifier = WebhookNotifier(PUSH_URL, client=client)
            with pytest.raises(ExternalServiceError) as exc_info:
                await notifier.show_alert("user-1", "t", "b")

        assert not exc_info.value.is_retryable

    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            notifier = WebhookNotifier(PUSH_URL, client=client)
            with pytest.raises(ExternalServiceError) as exc_info:
                await notifier.show_alert("user-1", "t", "b")

        assert exc_info.value.is_retryable
        assert "ConnectError" in str(exc_info.value)


class TestLogNotifier:
    async def test_never_raises(self) -> None:
        await LogNotifier().show_alert("user-1", "title", "body")
