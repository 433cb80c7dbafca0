"""
Authenticated transport core: token issuing and caching, request
middleware, buffered and streamed calls.
"""

from .auth import (
    CachedToken,
    Credential,
    TokenCache,
    TokenIssuer,
    clear_token,
    clear_token_cache,
    default_token_cache,
    generate_token,
)
from .middleware import AuthMiddleware, RequestMiddleware, merge_headers
from .options import ClientConfig, RequestOptions
from .streaming import StreamEvent, StreamHandle
from .transport import Transport

__all__ = [
    "AuthMiddleware",
    "CachedToken",
    "ClientConfig",
    "Credential",
    "RequestMiddleware",
    "RequestOptions",
    "StreamEvent",
    "StreamHandle",
    "TokenCache",
    "TokenIssuer",
    "Transport",
    "clear_token",
    "clear_token_cache",
    "default_token_cache",
    "generate_token",
    "merge_headers",
]
