"""
Images API.
"""

from typing import Any, Dict, Mapping, Optional

from ..core.transport import OptionsLike
from .base import BaseResource


class Images(BaseResource):

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        *,
        n: Optional[int] = None,
        quality: Optional[str] = None,
        response_format: Optional[str] = None,
        size: Optional[str] = None,
        style: Optional[str] = None,
        user: Optional[str] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """Create an image from a prompt."""
        body = self._compact({
            "model": model,
            "prompt": prompt,
            "n": n,
            "quality": quality,
            "response_format": response_format,
            "size": size,
            "style": style,
            "user": user,
        })
        return await self._transport.post(
            "/images/generations", body, self._merge_options(options, extra_headers, timeout)
        )

    # OpenAI-style name
    create = generate
