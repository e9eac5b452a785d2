"""Contract tests for the upstream client (mocked transport, no real API calls)."""

import asyncio

import httpx
import pytest

from backend.core.upstream import UpstreamClient, UpstreamUnavailableError


@pytest.fixture
def client(relay_env, upstream):
    return UpstreamClient(transport=httpx.MockTransport(upstream))


class TestUpstreamClientInit:

    def test_loads_settings(self, client):
        assert client.api_key == "sk-test-secret"
        assert client.model == "gpt-4o"
        assert client.default_max_tokens == 300
        assert client.is_healthy()

    def test_unhealthy_without_key(self, relay_env, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY")
        assert not UpstreamClient().is_healthy()


class TestBuildRequest:

    def test_defaults_max_tokens(self, client):
        req = client.build_request({"messages": [{"role": "user", "content": "Hi"}]})
        assert req.max_tokens == 300
        assert req.model == "gpt-4o"

    def test_caller_max_tokens_kept(self, client):
        assert client.build_request({"messages": [], "max_tokens": 500}).max_tokens == 500

    def test_null_max_tokens_defaulted(self, client):
        assert client.build_request({"max_tokens": None}).max_tokens == 300

    def test_caller_model_ignored(self, client):
        assert client.build_request({"model": "other-model"}).model == "gpt-4o"


class TestComplete:

    def test_attaches_bearer_and_forwards(self, client, upstream):
        req = client.build_request({
            "messages": [{"role": "user", "content": "Hi"}],
            "temperature": 0.7,
        })
        status, data = asyncio.run(client.complete(req))

        assert status == 200
        assert data == upstream.payload
        sent = upstream.requests[0]
        assert sent.headers["authorization"] == "Bearer sk-test-secret"
        assert str(sent.url) == "https://upstream.test/v1/chat/completions"
        assert upstream.last_body == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "Hi"}],
            "max_tokens": 300,
        }

    def test_error_status_still_returns_body(self, client, upstream):
        upstream.status_code = 401
        upstream.payload = {"error": {"message": "Incorrect API key provided"}}
        status, data = asyncio.run(client.complete(client.build_request({"messages": []})))
        assert status == 401
        assert data["error"]["message"] == "Incorrect API key provided"

    def test_transport_failure(self, client, upstream):
        upstream.error = httpx.ConnectError("connection refused")
        with pytest.raises(UpstreamUnavailableError) as exc:
            asyncio.run(client.complete(client.build_request({"messages": []})))
        assert "connection refused" in str(exc.value)

    def test_non_json_body(self, relay_env):
        transport = httpx.MockTransport(lambda request: httpx.Response(502, text="<html>Bad gateway</html>"))
        client = UpstreamClient(transport=transport)
        with pytest.raises(UpstreamUnavailableError) as exc:
            asyncio.run(client.complete(client.build_request({"messages": []})))
        assert "502" in str(exc.value)
