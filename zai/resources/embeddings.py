"""
Embeddings API.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from ..core.transport import OptionsLike
from .base import BaseResource


class Embeddings(BaseResource):

    async def create(
        self,
        input: Union[str, List[str], List[int], List[List[int]]],
        model: str,
        *,
        encoding_format: Optional[str] = None,
        user: Optional[str] = None,
        sensitive_word_check: Optional[Dict[str, Any]] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
        options: OptionsLike = None,
    ) -> Dict[str, Any]:
        """Create embedding vectors for ``input``."""
        body = self._compact({
            "input": input,
            "model": model,
            "encoding_format": encoding_format,
            "user": user,
            "sensitive_word_check": sensitive_word_check,
        })
        return await self._transport.post(
            "/embeddings", body, self._merge_options(options, extra_headers, timeout)
        )
