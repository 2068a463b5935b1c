"""
Tests for the relay HTTP API: /api/chat, /api/health and error mapping.
"""

from fastapi.testclient import TestClient
from langchain_core.messages import HumanMessage, SystemMessage

from chatrelay.main import create_app
from chatrelay.services.prompts import SYSTEM_PROMPT
from chatrelay.utils.errors import ServerError

from conftest import FakeProvider


class TestHealth:
    def test_health_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_health_carries_request_id(self, client):
        response = client.get("/api/health")
        assert response.headers["x-request-id"]


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    def test_returns_answer(self, client):
        response = client.post("/api/chat", json={"message": "Hello"})
        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Hi there"
        assert body["requestId"] == response.headers["x-request-id"]

    def test_forwards_system_and_user_turn(self, client, provider):
        client.post("/api/chat", json={"message": "  What is 2+2?  "})

        assert len(provider.calls) == 1
        call = provider.calls[0]
        assert call["model"] == "test-model"
        assert call["temperature"] == 0.2
        system, user = call["messages"]
        assert isinstance(system, SystemMessage)
        assert system.content == SYSTEM_PROMPT
        assert isinstance(user, HumanMessage)
        assert user.content == "What is 2+2?"

    def test_accepts_max_length_message(self, client):
        response = client.post("/api/chat", json={"message": "x" * 4000})
        assert response.status_code == 200

    def test_length_is_measured_after_trimming(self, client):
        response = client.post("/api/chat", json={"message": "  " + "x" * 4000 + "\n"})
        assert response.status_code == 200

    def test_empty_answer_is_returned_as_empty_string(self, settings):
        client = TestClient(create_app(settings=settings, provider=FakeProvider(answer=None)))
        response = client.post("/api/chat", json={"message": "Hello"})
        assert response.status_code == 200
        assert response.json()["answer"] == ""


class TestValidation:
    def test_empty_message_rejected(self, client, provider):
        response = client.post("/api/chat", json={"message": ""})
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Message is required"
        assert body["requestId"]
        assert provider.calls == []

    def test_whitespace_message_rejected(self, client):
        response = client.post("/api/chat", json={"message": "   \n\t "})
        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"

    def test_too_long_message_rejected(self, client, provider):
        response = client.post("/api/chat", json={"message": "x" * 4001})
        assert response.status_code == 400
        assert response.json()["error"] == "Message is too long"
        assert provider.calls == []

    def test_missing_message_rejected(self, client):
        response = client.post("/api/chat", json={})
        assert response.status_code == 400
        assert response.json()["error"] == "Missing required field: message"

    def test_non_string_message_rejected(self, client):
        response = client.post("/api/chat", json={"message": 42})
        assert response.status_code == 400
        assert response.json()["error"]

    def test_validation_error_echoes_request_id(self, client):
        response = client.post(
            "/api/chat", json={"message": ""}, headers={"x-request-id": "bad-1"}
        )
        assert response.headers["x-request-id"] == "bad-1"
        assert response.json()["requestId"] == "bad-1"

    def test_oversized_body_rejected(self, settings, provider):
        settings.max_body_bytes = 100
        client = TestClient(create_app(settings=settings, provider=provider))
        response = client.post(
            "/api/chat", json={"message": "x" * 200}, headers={"x-request-id": "big"}
        )
        assert response.status_code == 413
        assert response.json() == {"requestId": "big", "error": "Request body too large"}
        assert response.headers["x-request-id"] == "big"

    def test_oversized_chunked_body_rejected(self, settings, provider):
        settings.max_body_bytes = 100
        client = TestClient(create_app(settings=settings, provider=provider))

        def chunks():
            yield b'{"message": "'
            yield b"x" * 200
            yield b'"}'

        response = client.post(
            "/api/chat",
            content=chunks(),
            headers={"content-type": "application/json", "x-request-id": "chunked"},
        )

        assert response.status_code == 413
        assert response.json() == {"requestId": "chunked", "error": "Request body too large"}
        assert provider.calls == []

    def test_body_under_limit_accepted_without_length(self, settings, provider):
        settings.max_body_bytes = 100
        client = TestClient(create_app(settings=settings, provider=provider))

        def chunks():
            yield b'{"message": '
            yield b'"Hello"}'

        response = client.post(
            "/api/chat", content=chunks(), headers={"content-type": "application/json"}
        )

        assert response.status_code == 200


class TestRequestId:
    def test_supplied_id_is_echoed(self, client):
        response = client.post(
            "/api/chat", json={"message": "Hello"}, headers={"x-request-id": "abc123"}
        )
        assert response.headers["x-request-id"] == "abc123"
        assert response.json()["requestId"] == "abc123"

    def test_blank_id_is_replaced(self, client):
        response = client.post(
            "/api/chat", json={"message": "Hello"}, headers={"x-request-id": "   "}
        )
        request_id = response.headers["x-request-id"]
        assert request_id.strip()
        assert response.json()["requestId"] == request_id

    def test_generated_ids_differ(self, client):
        first = client.post("/api/chat", json={"message": "Hello"})
        second = client.post("/api/chat", json={"message": "Hello"})
        first_id = first.json()["requestId"]
        second_id = second.json()["requestId"]
        assert first_id and second_id
        assert first_id != second_id
        assert first.headers["x-request-id"] == first_id


class TestErrors:
    def test_unknown_route_returns_404(self, client):
        response = client.get("/api/unknown", headers={"x-request-id": "nf-1"})
        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "Not found: GET /api/unknown"
        assert body["requestId"] == "nf-1"
        assert response.headers["x-request-id"] == "nf-1"

    def test_wrong_method_returns_404(self, client):
        response = client.get("/api/chat")
        assert response.status_code == 404
        assert response.json()["error"] == "Not found: GET /api/chat"

    def test_provider_failure_returns_500(self, settings):
        provider = FakeProvider(error=RuntimeError("upstream exploded"))
        client = TestClient(create_app(settings=settings, provider=provider))

        response = client.post(
            "/api/chat", json={"message": "Hello"}, headers={"x-request-id": "err-1"}
        )

        assert response.status_code == 500
        assert response.json() == {"requestId": "err-1", "error": "upstream exploded"}
        assert response.headers["x-request-id"] == "err-1"

    def test_server_error_message_is_kept(self, settings):
        provider = FakeProvider(error=ServerError("OPENAI_API_KEY is not configured"))
        client = TestClient(create_app(settings=settings, provider=provider))

        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 500
        assert response.json()["error"] == "OPENAI_API_KEY is not configured"

    def test_missing_api_key_is_a_server_error(self, settings):
        settings.openai_api_key = None
        client = TestClient(create_app(settings=settings))

        response = client.post("/api/chat", json={"message": "Hello"})

        assert response.status_code == 500
        assert response.json()["error"] == "OPENAI_API_KEY is not configured"


class TestCors:
    def test_cors_origin_is_allowed(self, settings, provider):
        settings.cors_origin = "http://localhost:5173"
        client = TestClient(create_app(settings=settings, provider=provider))

        response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})

        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"

    def test_cors_disabled_without_origin(self, client):
        response = client.get("/api/health", headers={"Origin": "http://localhost:5173"})
        assert "access-control-allow-origin" not in response.headers
