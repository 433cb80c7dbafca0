"""
Python SDK for the Z.AI / ZHIPU AI OpenAPI service.
"""

from .client import ZAI
from .common.errors import (
    APIErrorPayload,
    InvalidCredentialFormat,
    MissingCredential,
    RemoteAPIError,
    RequestCancelled,
    RequestTimeout,
    TokenGenerationFailed,
    TransportError,
    ZAIError,
)
from .common.logging import configure_logging
from .core import (
    RequestOptions,
    StreamEvent,
    StreamHandle,
    TokenCache,
    TokenIssuer,
    Transport,
    clear_token,
    clear_token_cache,
    generate_token,
)
from .core.constants import *  # noqa: F401,F403
from .core.constants import VERSION

__version__ = VERSION

__all__ = [
    "ZAI",
    "APIErrorPayload",
    "InvalidCredentialFormat",
    "MissingCredential",
    "RemoteAPIError",
    "RequestCancelled",
    "RequestOptions",
    "RequestTimeout",
    "StreamEvent",
    "StreamHandle",
    "TokenCache",
    "TokenGenerationFailed",
    "TokenIssuer",
    "Transport",
    "TransportError",
    "ZAIError",
    "clear_token",
    "clear_token_cache",
    "configure_logging",
    "generate_token",
]
