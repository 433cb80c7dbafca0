"""
Response decoding and error normalization shared by buffered and streamed
calls.
"""

import json
from typing import Any

import httpx

from ..common.errors import RemoteAPIError, RequestTimeout, TransportError


def decode_body(response: httpx.Response) -> Any:
    """Decode a fully read response: JSON when declared, else text, else None."""
    if not response.content:
        return None
    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text
    return response.text


def api_error_from_response(response: httpx.Response) -> RemoteAPIError:
    """Build the error raised for a non-success response that was fully read."""
    body: Any = None
    if response.content:
        try:
            body = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            body = response.text
    return RemoteAPIError(response.status_code, body, response.headers)


def wrap_transport_error(exc: Exception, request: httpx.Request) -> TransportError:
    """Map an httpx failure with no usable response onto the SDK taxonomy."""
    details = {
        "method": request.method,
        "url": str(request.url),
        "error": str(exc) or type(exc).__name__,
    }
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeout(f"Request to {request.url.path} timed out", details=details)
    return TransportError(f"Request to {request.url.path} failed: {details['error']}", details=details)
