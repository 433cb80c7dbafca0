"""
Base class for the API resource facades.
"""

from typing import Any, Dict, Mapping, Optional

from ..core.options import RequestOptions
from ..core.transport import OptionsLike, Transport


class BaseResource:
    """Shapes parameters for one endpoint family and calls the transport."""

    def __init__(self, transport: Transport):
        self._transport = transport

    @staticmethod
    def _compact(params: Mapping[str, Any]) -> Dict[str, Any]:
        """Drop parameters the caller left unset."""
        return {key: value for key, value in params.items() if value is not None}

    @staticmethod
    def _merge_options(
        options: OptionsLike,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
    ) -> RequestOptions:
        """Layer explicit ``options`` over the per-call shorthands."""
        defaults = RequestOptions(timeout=timeout, headers=dict(extra_headers or {}))
        return RequestOptions.coerce(options).merged_over(defaults)
