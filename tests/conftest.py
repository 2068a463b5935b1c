"""
Pytest configuration and shared fixtures.
"""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from chatrelay.client.api_client import ChatApiClient
from chatrelay.client.controller import ChatController
from chatrelay.config import Settings
from chatrelay.main import create_app
from chatrelay.utils.llm import ChatProvider


class FakeProvider(ChatProvider):
    """Provider returning canned text and recording every call."""

    def __init__(self, answer="Hi there", error=None):
        self.answer = answer
        self.error = error
        self.calls = []

    async def complete(self, model, messages, temperature):
        self.calls.append(
            {"model": model, "messages": messages, "temperature": temperature}
        )
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def settings():
    """Settings isolated from any local .env file."""
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        openai_model="test-model",
        openai_temperature=0.2,
        cors_origin=None,
    )


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(settings, provider):
    """FastAPI test client wired to the fake provider."""
    return TestClient(create_app(settings=settings, provider=provider))


def make_response(status_code=200, payload=None, json_error=False):
    """Build a stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def http_session():
    """Mocked requests.Session answering "Hello back"."""
    session = MagicMock()
    session.post.return_value = make_response(
        200, {"requestId": "req-1", "answer": "Hello back"}
    )
    return session


@pytest.fixture
def api_client(http_session):
    return ChatApiClient(api_url="http://relay.test/api/chat", timeout=5, session=http_session)


@pytest.fixture
def controller(api_client):
    return ChatController(client=api_client)
