"""
Shared error handling for the ZAI SDK.
"""

from typing import Any, Dict, Mapping, Optional

from opentelemetry import trace
from pydantic import BaseModel, ValidationError


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class APIErrorDetail(BaseModel):
    message: str
    type: str
    code: Optional[str] = None


class APIErrorPayload(BaseModel):
    """Error body returned by the remote API."""

    error: APIErrorDetail


class ZAIError(Exception):
    """Base exception for the ZAI SDK."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class InvalidCredentialFormat(ZAIError):
    """Credential does not split into a key id and a secret."""

    def __init__(self, message: str = 'Invalid API key format. Expected format: "apiKey.secret"'):
        super().__init__("INVALID_CREDENTIAL_FORMAT", message)


class TokenGenerationFailed(ZAIError):
    """Signing the authentication token failed."""

    def __init__(self, cause: str):
        super().__init__(
            "TOKEN_GENERATION_FAILED",
            f"Failed to generate authentication token: {cause}",
            details={"cause": cause},
        )


class MissingCredential(ZAIError):
    """No credential could be resolved at construction time."""

    def __init__(self, env_var: str):
        super().__init__(
            "MISSING_CREDENTIAL",
            f"API key is required. Provide it via api_key or the {env_var} environment variable.",
            details={"env_var": env_var},
        )


class RemoteAPIError(ZAIError):
    """Non-success response from the remote API.

    ``body`` holds the decoded error body exactly as the service sent it.
    """

    def __init__(self, status_code: int, body: Any, headers: Optional[Mapping[str, str]] = None):
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers or {})
        message = f"HTTP {status_code}"
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            remote_message = body["error"].get("message")
            if remote_message:
                message = f"HTTP {status_code}: {remote_message}"
        elif isinstance(body, str) and body:
            message = f"HTTP {status_code}: {body[:200]}"
        super().__init__("REMOTE_API_ERROR", message, details={"status_code": status_code})

    def payload(self) -> Optional[APIErrorPayload]:
        """Parse the body into the documented error shape, if it matches."""
        if not isinstance(self.body, dict):
            return None
        try:
            return APIErrorPayload.model_validate(self.body)
        except ValidationError:
            return None


class TransportError(ZAIError):
    """No response was received from the remote API."""

    def __init__(self, message: str = "Transport error", details: Optional[Dict[str, Any]] = None,
                 code: str = "TRANSPORT_ERROR"):
        super().__init__(code, message, details)


class RequestTimeout(TransportError):
    """The request timed out before a response arrived."""

    def __init__(self, message: str = "Request timed out", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="REQUEST_TIMEOUT")


class RequestCancelled(TransportError):
    """The caller cancelled the request before it completed."""

    def __init__(self, message: str = "Request cancelled", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="REQUEST_CANCELLED")
