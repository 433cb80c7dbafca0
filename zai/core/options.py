"""
Client and per-request configuration models.
"""

import asyncio
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..common.config import ZAISettings, get_settings
from ..common.errors import MissingCredential
from .constants import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_MS, ENV_API_KEY, Z_AI_BASE_URL


class ClientConfig(BaseModel):
    """Resolved, immutable configuration owned by one transport."""

    model_config = ConfigDict(frozen=True)

    credential: str = Field(repr=False)
    base_url: str = Z_AI_BASE_URL
    timeout: int = DEFAULT_TIMEOUT_MS
    max_retries: int = DEFAULT_MAX_RETRIES
    default_headers: Dict[str, str] = Field(default_factory=dict)
    cache_token: bool = True

    @classmethod
    def resolve(
        cls,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        cache_token: Optional[bool] = None,
        settings: Optional[ZAISettings] = None,
    ) -> "ClientConfig":
        """Merge explicit arguments over environment settings over defaults."""
        settings = settings or get_settings()
        credential = api_key or settings.api_key
        if not credential:
            raise MissingCredential(ENV_API_KEY)

        return cls(
            credential=credential,
            base_url=base_url or settings.base_url or Z_AI_BASE_URL,
            timeout=timeout or DEFAULT_TIMEOUT_MS,
            max_retries=max_retries if max_retries is not None else DEFAULT_MAX_RETRIES,
            default_headers=dict(default_headers or {}),
            cache_token=True if cache_token is None else cache_token,
        )


class RequestOptions(BaseModel):
    """Per-call overrides merged over the client configuration."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    # milliseconds
    timeout: Optional[int] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    # Accepted for API compatibility; no retry loop reads it.
    max_retries: Optional[int] = None
    cancel_event: Optional[asyncio.Event] = None

    @classmethod
    def coerce(cls, options: Union["RequestOptions", Mapping[str, Any], None]) -> "RequestOptions":
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        return cls.model_validate(dict(options))

    def merged_over(self, defaults: "RequestOptions") -> "RequestOptions":
        """Return options where fields set here win over ``defaults``."""
        return RequestOptions(
            timeout=self.timeout or defaults.timeout,
            headers={**defaults.headers, **self.headers},
            max_retries=self.max_retries if self.max_retries is not None else defaults.max_retries,
            cancel_event=self.cancel_event or defaults.cancel_event,
        )
