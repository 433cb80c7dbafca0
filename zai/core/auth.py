"""
Authentication token generation and caching for the ZAI SDK.

The API accepts short-lived HS256 JWTs signed with the secret half of a
``"<key id>.<secret>"`` credential. Tokens are cached per credential and
reused until they are :data:`CACHE_TTL_SECONDS` old.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import jwt

from ..common.errors import InvalidCredentialFormat, TokenGenerationFailed
from ..common.logging import get_logger
from .constants import API_TOKEN_TTL_SECONDS, CACHE_TTL_SECONDS


@dataclass(frozen=True)
class Credential:
    """A parsed ``"<key id>.<secret>"`` credential."""

    key_id: str
    secret: str = field(repr=False)

    @classmethod
    def parse(cls, raw: str) -> "Credential":
        """Split a raw credential, rejecting anything but two non-empty parts."""
        if not isinstance(raw, str):
            raise InvalidCredentialFormat()
        parts = raw.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidCredentialFormat()
        return cls(key_id=parts[0], secret=parts[1])


@dataclass(frozen=True)
class CachedToken:
    """A generated token and the epoch millisecond it was issued at."""

    token: str
    issued_at_ms: int

    def is_fresh(self, now_ms: int) -> bool:
        return now_ms - self.issued_at_ms < CACHE_TTL_SECONDS * 1000


class TokenCache:
    """Mapping of raw credential string to its most recent token.

    Entries are replaced wholesale on regeneration. Concurrent writers for
    the same credential race last-writer-wins; every candidate is a valid
    fresh token, so no lock is taken.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CachedToken] = {}

    def get(self, credential: str) -> Optional[CachedToken]:
        return self._entries.get(credential)

    def put(self, credential: str, entry: CachedToken) -> None:
        self._entries[credential] = entry

    def clear_all(self) -> None:
        """Drop every cached token."""
        self._entries.clear()

    def clear_one(self, credential: str) -> None:
        """Drop the token cached for ``credential``, if any."""
        self._entries.pop(credential, None)

    def __contains__(self, credential: object) -> bool:
        return credential in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class TokenIssuer:
    """Issues signed bearer tokens, reusing cached ones while fresh."""

    def __init__(self, cache: Optional[TokenCache] = None, clock: Callable[[], float] = time.time):
        self.cache = cache if cache is not None else TokenCache()
        self.clock = clock
        self.logger = get_logger("zai.auth")
        self._last_timestamp_ms = 0

    def issue(self, credential: str, use_cache: bool = True) -> str:
        """Return a token for ``credential``, generating one on cache miss."""
        parsed = Credential.parse(credential)
        now_ms = int(self.clock() * 1000)

        if use_cache:
            cached = self.cache.get(credential)
            if cached is not None and cached.is_fresh(now_ms):
                self.logger.debug("Token cache hit", key_id=parsed.key_id)
                return cached.token

        # Issue timestamps strictly increase so a regenerated token never
        # equals an earlier one, even within the same millisecond.
        timestamp_ms = max(now_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        token = self._sign(parsed, timestamp_ms)
        self.logger.debug("Generated authentication token", key_id=parsed.key_id, cached=use_cache)

        if use_cache:
            self.cache.put(credential, CachedToken(token=token, issued_at_ms=timestamp_ms))
        return token

    def clear_all(self) -> None:
        self.cache.clear_all()

    def clear_one(self, credential: str) -> None:
        self.cache.clear_one(credential)

    def _sign(self, credential: Credential, timestamp_ms: int) -> str:
        payload = {
            "api_key": credential.key_id,
            "exp": timestamp_ms // 1000 + API_TOKEN_TTL_SECONDS,
            "timestamp": timestamp_ms,
        }
        try:
            return jwt.encode(
                payload,
                credential.secret,
                algorithm="HS256",
                headers={"alg": "HS256", "sign_type": "SIGN"},
            )
        except Exception as exc:
            cause = str(exc).replace(credential.secret, "***") or type(exc).__name__
            raise TokenGenerationFailed(cause) from None


# Process-default cache shared by transports that are not given their own.
default_token_cache = TokenCache()
_default_issuer = TokenIssuer(default_token_cache)


def generate_token(api_secret_key: str, cache: bool = True) -> str:
    """Issue a token using the process-default cache."""
    return _default_issuer.issue(api_secret_key, cache)


def clear_token_cache() -> None:
    """Clear the process-default token cache."""
    default_token_cache.clear_all()


def clear_token(api_secret_key: str) -> None:
    """Remove one credential from the process-default token cache."""
    default_token_cache.clear_one(api_secret_key)
