"""
ZAI client entry point.
"""

from typing import Any, Mapping, Optional

import httpx

from .core.auth import TokenCache
from .core.constants import Z_AI_BASE_URL, ZHIPU_AI_BASE_URL
from .core.transport import Transport
from .resources import Chat, Embeddings, Files, Images


class ZAI:
    """Client for the Z.AI / ZHIPU AI OpenAPI service.

    Usage::

        async with ZAI(api_key="key-id.secret") as client:
            completion = await client.chat.create(
                model="glm-4",
                messages=[{"role": "user", "content": "Hello"}],
            )
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        max_retries: Optional[int] = None,
        default_headers: Optional[Mapping[str, str]] = None,
        cache_token: Optional[bool] = None,
        *,
        token_cache: Optional[TokenCache] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.transport = Transport(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            default_headers=default_headers,
            cache_token=cache_token,
            token_cache=token_cache,
            http_transport=http_transport,
        )

        self.chat = Chat(self.transport)
        self.images = Images(self.transport)
        self.embeddings = Embeddings(self.transport)
        self.files = Files(self.transport)

    @classmethod
    def of_zhipu(cls, api_key: str, **options: Any) -> "ZAI":
        """Create a client for the ZHIPU AI deployment."""
        options.pop("base_url", None)
        return cls(api_key=api_key, base_url=ZHIPU_AI_BASE_URL, **options)

    @classmethod
    def of_zai(cls, api_key: str, **options: Any) -> "ZAI":
        """Create a client for the Z.AI deployment."""
        options.pop("base_url", None)
        return cls(api_key=api_key, base_url=Z_AI_BASE_URL, **options)

    @property
    def base_url(self) -> str:
        return self.transport.base_url

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "ZAI":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
