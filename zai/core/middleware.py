"""
Request middleware applied by the transport before every transmission.

A middleware is any callable taking the outgoing :class:`httpx.Request` and
returning the request to send, usually the same object with headers added.
"""

from typing import Callable, Mapping, Optional

import httpx

from .auth import TokenIssuer
from .constants import USER_AGENT

RequestMiddleware = Callable[[httpx.Request], httpx.Request]

BUILTIN_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": USER_AGENT,
}


def merge_headers(*layers: Optional[Mapping[str, str]]) -> httpx.Headers:
    """Merge header mappings case-insensitively; later layers win."""
    merged = httpx.Headers()
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


class AuthMiddleware:
    """Sets the Authorization header to a freshly issued token.

    The token is sent verbatim, without a ``Bearer`` prefix, and replaces
    any Authorization value the caller supplied.
    """

    def __init__(self, issuer: TokenIssuer, credential: str, use_cache: bool = True):
        self.issuer = issuer
        self._credential = credential
        self.use_cache = use_cache

    def __call__(self, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = self.issuer.issue(self._credential, self.use_cache)
        return request
