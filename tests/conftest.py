"""Shared fixtures for all tests."""

import json

import httpx
import pytest
import requests
from fastapi.testclient import TestClient

from backend.core.upstream import UpstreamClient
from frontend.conversation import ChatSession, ClientSettings


class RecordingUpstream:
    """httpx handler standing in for the chat-completion endpoint."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.payload = {
            "id": "chatcmpl-1",
            "choices": [{"index": 0, "message": {"role": "assistant", "content": "  Try Elvive.  "}}],
        }
        self.error: Exception | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def relay_env(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-secret")
    monkeypatch.setenv("OPENAI_API_URL", "https://upstream.test/v1/chat/completions")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    monkeypatch.delenv("RELAY_DEFAULT_MAX_TOKENS", raising=False)
    monkeypatch.delenv("RELAY_ECHO_HEADERS", raising=False)


@pytest.fixture
def relay_client(relay_env, upstream):
    """TestClient for the relay with the upstream replaced by a recorder."""
    from backend.main import app

    with TestClient(app) as client:
        app.state.upstream = UpstreamClient(transport=httpx.MockTransport(upstream))
        yield client


@pytest.fixture
def session() -> ChatSession:
    return ChatSession()


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(relay_url="https://relay.test/", timeout=5)


@pytest.fixture
def make_response():
    """Build a requests.Response without touching the network."""

    def _make(status_code=200, payload=None, text="", reason="OK"):
        resp = requests.Response()
        resp.status_code = status_code
        resp.reason = reason
        resp.encoding = "utf-8"
        body = json.dumps(payload) if payload is not None else text
        resp._content = body.encode("utf-8")
        return resp

    return _make
