"""
Integration tests for the authenticated transport against the mock origin.
"""

import asyncio

import httpx
import jwt
import pytest

from tests.conftest import CREDENTIAL, MOCK_BASE_URL
from zai.common.errors import RemoteAPIError, RequestCancelled, RequestTimeout, TransportError
from zai.core.transport import Transport


class TestAuthenticatedCalls:
    """End-to-end request flow through the mock origin."""

    @pytest.mark.asyncio
    async def test_post_sends_signed_token(self, make_transport, mock_server):
        async with make_transport() as transport:
            result = await transport.post("/echo", {"x": 1})

        assert result == {"received": {"x": 1}}
        recorded = mock_server.last_request
        token = recorded.headers["authorization"]
        assert not token.startswith("Bearer ")
        assert recorded.token_claims()["api_key"] == "key123"
        claims = jwt.decode(token, "secretXYZ", algorithms=["HS256"])
        assert claims["exp"] - claims["timestamp"] // 1000 == 180

    @pytest.mark.asyncio
    async def test_structured_error_passes_through(self, make_transport, mock_server):
        body = {"error": {"message": "bad request", "type": "invalid_request"}}
        mock_server.set_error("/x", 400, body)

        async with make_transport() as transport:
            with pytest.raises(RemoteAPIError) as exc_info:
                await transport.get("/x")

        assert exc_info.value.status_code == 400
        assert exc_info.value.body == body
        assert not isinstance(exc_info.value, TransportError)

    @pytest.mark.asyncio
    async def test_auth_rejection_is_not_special_cased(self, make_transport, mock_server):
        async with make_transport(api_key="key123.wrong-secret") as transport:
            with pytest.raises(RemoteAPIError) as exc_info:
                await transport.post("/echo", {"x": 1})

        assert exc_info.value.status_code == 401
        assert exc_info.value.body["error"]["type"] == "authentication_error"
        assert len(mock_server.requests) == 1

    @pytest.mark.asyncio
    async def test_cached_token_reused_across_calls(self, make_transport, mock_server):
        async with make_transport() as transport:
            await transport.post("/echo", {"n": 1})
            await transport.post("/echo", {"n": 2})

        first, second = mock_server.requests
        assert first.headers["authorization"] == second.headers["authorization"]

    @pytest.mark.asyncio
    async def test_uncached_tokens_are_fresh_per_call(self, make_transport, mock_server, token_cache):
        async with make_transport(cache_token=False) as transport:
            await transport.post("/echo", {"n": 1})
            await transport.post("/echo", {"n": 2})

        first, second = mock_server.requests
        assert first.headers["authorization"] != second.headers["authorization"]
        assert len(token_cache) == 0

    @pytest.mark.asyncio
    async def test_headers_reach_the_origin(self, make_transport, mock_server):
        async with make_transport(default_headers={"X-Team": "sdk", "X-Shared": "config"}) as transport:
            await transport.post(
                "/echo",
                {"x": 1},
                {"headers": {"X-Shared": "call", "Authorization": "forged"}},
            )

        headers = mock_server.last_request.headers
        assert headers["x-team"] == "sdk"
        assert headers["x-shared"] == "call"
        assert headers["content-type"] == "application/json"
        assert headers["user-agent"].startswith("z-ai-sdk-python/")
        assert headers["authorization"] != "forged"

    @pytest.mark.asyncio
    async def test_post_form_is_multipart(self, make_transport, mock_server):
        async with make_transport() as transport:
            result = await transport.post_form(
                "/files",
                form_data={"purpose": "file-extract"},
                files={"file": ("notes.txt", b"hello world")},
            )

        assert result["object"] == "file"
        recorded = mock_server.last_request
        assert recorded.headers["content-type"].startswith("multipart/form-data; boundary=")
        assert b'name="purpose"' in recorded.body
        assert b'filename="notes.txt"' in recorded.body
        assert b"hello world" in recorded.body

    @pytest.mark.asyncio
    async def test_delete_and_text_body(self, make_transport, mock_server):
        mock_server.files["file-1"] = {"id": "file-1", "object": "file"}

        async with make_transport() as transport:
            deleted = await transport.delete("/files/file-1")
            content = await transport.get("/files/file-1/content")

        assert deleted == {"id": "file-1", "object": "file", "deleted": True}
        assert content == "contents of file-1"

    @pytest.mark.asyncio
    async def test_stream_through_origin(self, make_transport):
        async with make_transport() as transport:
            handle = transport.stream("/chat/completions", {"model": "glm-4", "messages": [], "stream": True})
            payloads = [payload async for payload in handle.iter_sse()]

        assert len(payloads) == 5
        assert payloads[0]["choices"][0]["delta"]["content"] == "part0 "


class TestTransportFailures:
    """Failures where no response is received."""

    @staticmethod
    def transport_for(issuer, handler) -> Transport:
        return Transport(
            api_key=CREDENTIAL,
            base_url=MOCK_BASE_URL,
            issuer=issuer,
            http_transport=httpx.MockTransport(handler),
        )

    @pytest.mark.asyncio
    async def test_connection_error(self, issuer):
        def handler(request):
            raise httpx.ConnectError("name resolution failed", request=request)

        async with self.transport_for(issuer, handler) as transport:
            with pytest.raises(TransportError) as exc_info:
                await transport.get("/files")

        assert not isinstance(exc_info.value, RemoteAPIError)
        assert exc_info.value.code == "TRANSPORT_ERROR"
        assert exc_info.value.details["method"] == "GET"

    @pytest.mark.asyncio
    async def test_timeout(self, issuer):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with self.transport_for(issuer, handler) as transport:
            with pytest.raises(RequestTimeout):
                await transport.post("/chat/completions", {}, {"timeout": 10})

    @pytest.mark.asyncio
    async def test_cancel_event_aborts_buffered_call(self, issuer):
        async def handler(request):
            await asyncio.sleep(10)
            return httpx.Response(200, json={})

        cancel_event = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancel_event.set)

        async with self.transport_for(issuer, handler) as transport:
            with pytest.raises(RequestCancelled):
                await transport.get("/files", {"cancel_event": cancel_event})

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, issuer):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        async with self.transport_for(issuer, handler) as transport:
            with pytest.raises(RemoteAPIError) as exc_info:
                await transport.get("/files")

        assert exc_info.value.body == "Bad Gateway"
        assert exc_info.value.payload() is None

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_cache(self, issuer, token_cache):
        seen = []

        def handler(request):
            seen.append(request.headers["Authorization"])
            return httpx.Response(200, json={"ok": True})

        async with self.transport_for(issuer, handler) as transport:
            results = await asyncio.gather(*(transport.get("/files") for _ in range(5)))

        assert results == [{"ok": True}] * 5
        assert len(set(seen)) == 1
        assert len(token_cache) == 1
