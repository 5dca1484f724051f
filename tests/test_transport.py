"""Tests for the httpx transport."""

import httpx
import pytest

from streamchat.errors import ProviderError, TransportError
from streamchat.llm import transport as transport_mod
from streamchat.llm.client import LLMClient
from streamchat.llm.transport import HttpTransport, shared_client


def _transport(handler) -> HttpTransport:
    return HttpTransport(httpx.Client(transport=httpx.MockTransport(handler)))


class TestHttpTransport:
    def test_streams_body_to_sink(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = request.content
            return httpx.Response(200, content=b'{"content": "hi"}\n')

        chunks: list[bytes] = []
        _transport(handler).perform(
            "http://test/v1", [("Authorization", "Bearer k")], b"{}",
            lambda c: chunks.append(c) or len(c))

        assert seen == {"method": "POST", "auth": "Bearer k", "body": b"{}"}
        assert b"".join(chunks) == b'{"content": "hi"}\n'

    def test_no_body_is_get(self):
        methods = []

        def handler(request):
            methods.append(request.method)
            return httpx.Response(200, content=b"")

        _transport(handler).perform("http://test/v1", [], None, len)
        assert methods == ["GET"]

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(401, content=b'{"error": "invalid api key"}')

        with pytest.raises(ProviderError) as exc:
            _transport(handler).perform("http://test/v1", [], b"{}", len)
        assert exc.value.status_code == 401
        assert "invalid api key" in exc.value.raw

    def test_connection_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc:
            _transport(handler).perform("http://test/v1", [], b"{}", len)
        assert isinstance(exc.value.__cause__, httpx.ConnectError)
        assert isinstance(exc.value, ConnectionError)

    def test_shared_client_is_reused(self, monkeypatch):
        monkeypatch.setattr(transport_mod, "_client", None)
        first = shared_client()
        try:
            assert shared_client() is first
            assert HttpTransport().client is first
        finally:
            first.close()


class TestClientOverHttp:
    def test_end_to_end(self, provider):
        payload = (
            b'data: {"choices":[{"delta":{"role":"assistant","content":""}}]}\n\n'
            b'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n'
            b'data: {"choices":[{"delta":{"content":" world"}}]}\n\n'
            b"data: [DONE]\n\n"
        )

        def handler(request):
            return httpx.Response(200, content=payload)

        client = LLMClient(provider, transport=_transport(handler))
        assert client.get("Hi") == "Hello world"
        assert client.get_history("Hi") == "Hello world"

    def test_server_error(self, provider):
        def handler(request):
            return httpx.Response(500, content=b"upstream exploded")

        client = LLMClient(provider, transport=_transport(handler))
        with pytest.raises(ProviderError):
            client.get("Hi")
        assert len(client.history) == 0
