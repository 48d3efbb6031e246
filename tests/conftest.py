"""Shared test fixtures: an app wired to in-process fakes for the network clients."""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.core.assistant_cloud import AssistantCloudClient
from app.core.auth.session_verifier import TEST_ACCOUNT_EMAIL, TEST_ACCOUNT_PASSWORD
from app.main import create_app


def make_chunk(text):
    """A chat completion chunk carrying one text delta."""
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class FakeStream:
    """Stands in for the SDK's async chunk stream."""

    def __init__(self, deltas, fail_after=None):
        self.deltas = list(deltas)
        self.fail_after = fail_after
        self.closed = False

    def __aiter__(self):
        return self._chunks()

    async def _chunks(self):
        for i, delta in enumerate(self.deltas):
            if self.fail_after is not None and i == self.fail_after:
                raise RuntimeError("connection reset by peer")
            yield make_chunk(delta)
        # Final chunk with no choices, as sent with usage reporting.
        yield SimpleNamespace(choices=[])

    async def close(self):
        self.closed = True


class FakeModelClient:
    """Records calls instead of reaching the upstream model."""

    model = "fake-model"

    def __init__(self, deltas=("Hello", " there"), error=None, fail_after=None):
        self.deltas = deltas
        self.error = error
        self.fail_after = fail_after
        self.calls = []
        self.streams = []

    async def open_stream(self, system_prompt, messages):
        self.calls.append((system_prompt, messages))
        if self.error is not None:
            raise self.error
        stream = FakeStream(self.deltas, fail_after=self.fail_after)
        self.streams.append(stream)
        return stream

    async def close(self):
        pass


def make_settings(**overrides):
    values = {
        "auth_google_id": "client-id",
        "auth_google_secret": "client-secret",
        "auth_secret": "test-session-secret",
        "nous_api_key": "test-key",
        "assistant_api_key": "aui-key",
        "enable_test_account": True,
        "environment": "development",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def parse_events(body: str):
    """Splits a UI message stream body into its data payloads."""
    events = []
    for block in body.split("\n\n"):
        if not block.startswith("data: "):
            continue
        data = block[len("data: "):]
        events.append(data if data == "[DONE]" else json.loads(data))
    return events


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def model_client():
    return FakeModelClient()


@pytest.fixture
def app(settings, model_client):
    return create_app(
        settings=settings,
        model_client=model_client,
        assistant_cloud=AssistantCloudClient(api_key=None),
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def signed_in_client(client):
    """A client holding a test account session cookie."""
    response = client.post(
        "/api/auth/callback/credentials",
        json={"email": TEST_ACCOUNT_EMAIL, "password": TEST_ACCOUNT_PASSWORD},
    )
    assert response.status_code == 200
    return client
