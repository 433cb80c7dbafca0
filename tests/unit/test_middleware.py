"""
Unit tests for header merging and request preparation.
"""

import httpx
import pytest

from tests.conftest import CREDENTIAL, MOCK_BASE_URL
from zai.common.errors import InvalidCredentialFormat
from zai.core.constants import USER_AGENT
from zai.core.middleware import AuthMiddleware, merge_headers
from zai.core.transport import Transport


@pytest.fixture
def transport(issuer):
    return Transport(
        api_key=CREDENTIAL,
        base_url=MOCK_BASE_URL,
        default_headers={"X-Team": "config", "X-Shared": "config"},
        issuer=issuer,
    )


class TestMergeHeaders:

    def test_later_layers_win(self):
        headers = merge_headers({"A": "1"}, {"A": "2", "B": "2"}, {"B": "3", "C": "3"})

        assert dict(headers.items()) == {"a": "2", "b": "3", "c": "3"}

    def test_merge_is_case_insensitive(self):
        headers = merge_headers({"Content-Type": "application/json"}, {"content-type": "text/plain"})

        assert headers.get_list("Content-Type") == ["text/plain"]

    def test_skips_empty_layers(self):
        assert dict(merge_headers(None, {}, {"A": "1"}).items()) == {"a": "1"}


class TestAuthMiddleware:

    def test_replaces_caller_authorization(self, issuer):
        request = httpx.Request("GET", "http://mock.zai/x", headers={"Authorization": "Bearer forged"})

        result = AuthMiddleware(issuer, CREDENTIAL)(request)

        assert result.headers["Authorization"] == issuer.issue(CREDENTIAL)
        assert not result.headers["Authorization"].startswith("Bearer ")


class TestBuildRequest:
    """Test cases for Transport.build_request."""

    def test_header_precedence(self, transport, issuer):
        request = transport.build_request(
            "POST",
            "/chat/completions",
            json={"x": 1},
            options={"headers": {"X-Shared": "call", "X-Call": "call", "authorization": "forged"}},
        )

        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["User-Agent"] == USER_AGENT
        assert request.headers["X-Team"] == "config"
        assert request.headers["X-Shared"] == "call"
        assert request.headers["X-Call"] == "call"
        assert request.headers.get_list("Authorization") == [issuer.issue(CREDENTIAL)]

    def test_config_headers_override_builtins(self, issuer):
        transport = Transport(
            api_key=CREDENTIAL,
            base_url=MOCK_BASE_URL,
            default_headers={"User-Agent": "custom-agent"},
            issuer=issuer,
        )

        request = transport.build_request("GET", "/files")

        assert request.headers["User-Agent"] == "custom-agent"

    def test_path_joins_base_url(self, transport):
        request = transport.build_request("GET", "/files/abc/content")

        assert str(request.url) == MOCK_BASE_URL + "files/abc/content"

    def test_timeout_override_in_milliseconds(self, transport):
        default = transport.build_request("GET", "/files")
        override = transport.build_request("GET", "/files", options={"timeout": 1500})

        assert default.extensions["timeout"]["read"] == 60.0
        assert override.extensions["timeout"]["read"] == 1.5

    def test_zero_timeout_falls_back_to_config(self, transport):
        request = transport.build_request("GET", "/files", options={"timeout": 0})

        assert request.extensions["timeout"]["read"] == 60.0

    def test_multipart_drops_json_content_type(self, transport):
        request = transport.build_request(
            "POST",
            "/files",
            files=[("purpose", (None, "batch")), ("file", ("a.txt", b"hello"))],
            options={"headers": {"Content-Type": "application/json"}},
        )

        assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")

    def test_extra_middleware_runs_before_auth(self, issuer):
        seen = []

        def tag(request):
            seen.append(request.headers.get("Authorization"))
            request.headers["X-Tagged"] = "yes"
            request.headers["Authorization"] = "overwritten-later"
            return request

        transport = Transport(api_key=CREDENTIAL, base_url=MOCK_BASE_URL, issuer=issuer, middlewares=[tag])
        request = transport.build_request("GET", "/files")

        assert seen == [None]
        assert request.headers["X-Tagged"] == "yes"
        assert request.headers["Authorization"] == issuer.issue(CREDENTIAL)

    def test_malformed_credential_fails_the_call(self, issuer):
        transport = Transport(api_key="onlykey", base_url=MOCK_BASE_URL, issuer=issuer)

        with pytest.raises(InvalidCredentialFormat):
            transport.build_request("GET", "/files")
