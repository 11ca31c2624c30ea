"""
API tests.

The application runs with an injected service (in-memory storage, no
AI provider). Deferred analysis is awaited through the client's
event-loop portal.
"""

import base64
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from serene.config import Settings
from serene.main import create_application
from serene.services.orchestration import StressAnalysisService

EXAM_MESSAGE = "I have exams tomorrow and a lot to finish, pretty stressed"


@pytest.fixture
def service(test_settings: Settings) -> StressAnalysisService:
    return StressAnalysisService(test_settings, provider=None)


@pytest.fixture
def client(test_settings: Settings, service: StressAnalysisService) -> Iterator[TestClient]:
    app = create_application(test_settings, service=service)
    with TestClient(app) as test_client:
        yield test_client


def _submit(client: TestClient, text: str, user_id: str = "user-1", **extra):
    return client.post("/api/v1/messages", json={"user_id": user_id, "text": text, **extra})


def _drain(client: TestClient, service: StressAnalysisService) -> None:
    client.portal.call(service.queue.join)


class TestHealthEndpoints:
    def test_root(self, client: TestClient) -> None:
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "operational"

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["environment"] == "development"

    def test_readiness_without_database(self, client: TestClient) -> None:
        body = client.get("/api/v1/health/ready").json()
        assert body["ready"] is True
        assert body["components"]["database"] is None
        assert body["components"]["ai_configured"] is False

    def test_correlation_id_echoed(self, client: TestClient) -> None:
        response = client.get("/api/v1/health", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"

    def test_metrics_exposed(self, client: TestClient) -> None:
        client.get("/api/v1/health")
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "serene_" in response.text


class TestMessageEndpoint:
    """Test suite for POST /messages."""

    def test_ordinary_message_accepted(self, client: TestClient) -> None:
        response = _submit(client, EXAM_MESSAGE)

        assert response.status_code == 202
        body = response.json()
        assert body["allowed"] is True
        assert body["enqueued"] is True
        assert body["risk_level"] == "none"
        assert body["safety_prompt"] is None

    def test_critical_message_requires_acknowledgement(self, client: TestClient) -> None:
        response = _submit(client, "I want to kill myself", request_id="req-crisis")

        assert response.status_code == 409
        body = response.json()
        assert body["allowed"] is False
        assert body["requires_acknowledgement"] is True
        assert body["risk_level"] == "critical"
        assert "988" in body["safety_prompt"]
        assert body["enqueued"] is True

        retry = _submit(client, "I want to kill myself", request_id="req-crisis", safety_acknowledged=True)

        assert retry.status_code == 202
        assert retry.json()["allowed"] is True
        assert retry.json()["enqueued"] is False

    def test_urgent_message_not_blocked(self, client: TestClient) -> None:
        response = _submit(client, "I'm desperate and falling apart")
        assert response.status_code == 202
        assert response.json()["risk_level"] == "urgent"

    def test_empty_text_rejected(self, client: TestClient) -> None:
        assert _submit(client, "").status_code == 422

    def test_invalid_image_rejected(self, client: TestClient) -> None:
        response = _submit(client, "look", image={"data": "not base64!!"})
        assert response.status_code == 422

    def test_multimodal_message_accepted(self, client: TestClient) -> None:
        response = _submit(
            client,
            "quick update",
            audio={"transcript": "honestly I'm fine", "speech_rate_wpm": 140},
            image={"data": base64.b64encode(b"\xff\xd8\xff").decode()},
        )
        assert response.status_code == 202


class TestNotificationEndpoints:
    """Notifications produced by deferred analysis."""

    def test_stress_message_produces_notification(
        self, client: TestClient, service: StressAnalysisService
    ) -> None:
        request_id = _submit(client, EXAM_MESSAGE).json()["request_id"]
        _drain(client, service)

        body = client.get("/api/v1/notifications/user-1").json()

        assert body["unread_count"] == 1
        assert body["high_priority_count"] == 0
        notification = body["notifications"][0]
        assert notification["id"] == request_id
        assert notification["urgency"] == "normal"
        assert notification["original_message"] == EXAM_MESSAGE
        assert notification["remedies"]

    def test_positive_message_produces_none(self, client: TestClient, service: StressAnalysisService) -> None:
        _submit(client, "Feeling great today!")
        _drain(client, service)

        assert client.get("/api/v1/notifications/user-1").json()["notifications"] == []

    def test_crisis_is_high_priority(self, client: TestClient, service: StressAnalysisService) -> None:
        _submit(client, "I want to kill myself")
        _drain(client, service)

        high = client.get("/api/v1/notifications/user-1/high-priority").json()

        assert high["count"] == 1
        assert len(high["notifications"]) == 1
        notification = high["notifications"][0]
        assert notification["urgency"] == "urgent"
        assert notification["stress_score"] >= 8.0
        assert notification["is_high_priority"] is True

    def test_read_and_delete(self, client: TestClient, service: StressAnalysisService) -> None:
        request_id = _submit(client, EXAM_MESSAGE).json()["request_id"]
        _drain(client, service)

        read = client.post(f"/api/v1/notifications/user-1/{request_id}/read")
        assert read.status_code == 200
        assert read.json() == {"id": request_id, "is_read": True}
        assert client.get("/api/v1/notifications/user-1", params={"unread_only": True}).json()["notifications"] == []

        assert client.delete(f"/api/v1/notifications/user-1/{request_id}").status_code == 204
        assert client.delete(f"/api/v1/notifications/user-1/{request_id}").status_code == 404

    def test_unknown_notification(self, client: TestClient) -> None:
        assert client.post("/api/v1/notifications/user-1/missing/read").status_code == 404

    def test_mark_all_read(self, client: TestClient, service: StressAnalysisService) -> None:
        _submit(client, EXAM_MESSAGE)
        _submit(client, "I'm so overwhelmed and exhausted, everything is too much")
        _drain(client, service)

        response = client.post("/api/v1/notifications/user-1/read-all")

        assert response.json() == {"updated": 2}
        assert client.get("/api/v1/notifications/user-1").json()["unread_count"] == 0


class TestTrendEndpoint:
    def test_trend_summary(self, client: TestClient, service: StressAnalysisService) -> None:
        _submit(client, EXAM_MESSAGE)
        _submit(client, "Feeling great today!")
        _drain(client, service)

        body = client.get("/api/v1/trends/user-1", params={"days": 7}).json()

        assert body["total_messages"] == 2
        assert body["days"] == 7
        assert len(body["daily"]) == 1
        assert body["trend"] == "stable"

    def test_days_validated(self, client: TestClient) -> None:
        assert client.get("/api/v1/trends/user-1", params={"days": 0}).status_code == 422
        assert client.get("/api/v1/trends/user-1", params={"days": 91}).status_code == 422


class TestProfileEndpoints:
    def test_default_profile(self, client: TestClient) -> None:
        body = client.get("/api/v1/profiles/user-1").json()
        assert body["baseline_stress"] == 5.0
        assert body["feedback_count"] == 0
        assert body["personalized_weights"] is None

    def test_feedback(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/profiles/user-1/feedback",
            json={
                "request_id": "req-1",
                "reported_stress": 9,
                "predicted_stress": 7,
                "modality_scores": {"text": 8, "audio": 4},
                "was_helpful": True,
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["baseline_stress"] == pytest.approx(5.8)
        assert body["feedback_count"] == 1
        assert body["personalized_weights"]["text"] == pytest.approx(0.54)

    def test_feedback_out_of_range(self, client: TestClient) -> None:
        response = client.post(
            "/api/v1/profiles/user-1/feedback",
            json={"request_id": "req-1", "reported_stress": 12, "predicted_stress": 7},
        )
        assert response.status_code == 422

    def test_triggers_and_calming_factors(self, client: TestClient) -> None:
        client.post("/api/v1/profiles/user-1/triggers", json={"items": ["exams"]})
        body = client.post("/api/v1/profiles/user-1/calming-factors", json={"items": ["guitar"]}).json()

        assert body["trigger_words"] == ["exams"]
        assert body["calming_factors"] == ["guitar"]

    def test_empty_items_rejected(self, client: TestClient) -> None:
        assert client.post("/api/v1/profiles/user-1/triggers", json={"items": []}).status_code == 422
