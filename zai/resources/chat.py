"""
Chat completions API.
"""

from typing import Any, Dict, List, Mapping, Optional, Union

from ..core.streaming import StreamHandle
from ..core.transport import OptionsLike
from .base import BaseResource


class Chat(BaseResource):
    """Chat completions: ``POST /chat/completions``."""

    @property
    def completions(self) -> "Chat":
        return self

    async def create(
        self,
        model: str,
        messages: List[Dict[str, Any]],
        *,
        stream: bool = False,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        presence_penalty: Optional[float] = None,
        frequency_penalty: Optional[float] = None,
        stop: Optional[Union[str, List[str]]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
        tool_choice: Optional[Union[str, Dict[str, Any]]] = None,
        seed: Optional[int] = None,
        user: Optional[str] = None,
        do_sample: Optional[bool] = None,
        request_id: Optional[str] = None,
        sensitive_word_check: Optional[Dict[str, Any]] = None,
        extra_headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[int] = None,
        options: OptionsLike = None,
    ) -> Union[Dict[str, Any], StreamHandle]:
        """Create a chat completion.

        Returns the decoded completion, or a :class:`StreamHandle` over the
        server-sent events when ``stream`` is true.
        """
        body = self._compact({
            "model": model,
            "messages": messages,
            "stream": stream,
            "temperature": temperature,
            "top_p": top_p,
            "max_tokens": max_tokens,
            "presence_penalty": presence_penalty,
            "frequency_penalty": frequency_penalty,
            "stop": stop,
            "tools": tools,
            "tool_choice": tool_choice,
            "seed": seed,
            "user": user,
            "do_sample": do_sample,
            "request_id": request_id,
            "sensitive_word_check": sensitive_word_check,
        })
        merged = self._merge_options(options, extra_headers, timeout)

        if stream:
            return self._transport.stream("/chat/completions", body, merged)
        return await self._transport.post("/chat/completions", body, merged)

    def create_stream(self, model: str, messages: List[Dict[str, Any]], **params: Any) -> StreamHandle:
        """Start a streaming chat completion."""
        params.pop("stream", None)
        extra_headers = params.pop("extra_headers", None)
        timeout = params.pop("timeout", None)
        options = params.pop("options", None)
        body = self._compact({"model": model, "messages": messages, "stream": True, **params})
        return self._transport.stream(
            "/chat/completions", body, self._merge_options(options, extra_headers, timeout)
        )
