"""
Authenticated HTTP transport for the ZAI API.

Every call goes through :meth:`Transport.build_request`, which merges
headers, applies the per-call timeout and runs the middleware chain (the
authentication middleware last) before anything is sent.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from functools import partial
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from ..common.config import ZAISettings
from ..common.errors import RequestCancelled
from ..common.logging import get_logger, request_context
from ..common.tracing import set_status_code, traced_span
from .auth import TokenCache, TokenIssuer, default_token_cache
from .middleware import BUILTIN_HEADERS, AuthMiddleware, RequestMiddleware, merge_headers
from .options import ClientConfig, RequestOptions
from .responses import api_error_from_response, decode_body, wrap_transport_error
from .streaming import StreamHandle

OptionsLike = Union[RequestOptions, Mapping[str, Any], None]
FileSpec = Union[bytes, Tuple[Optional[str], Any], Tuple[Optional[str], Any, Optional[str]]]


def _to_seconds(timeout_ms: int) -> float:
    return timeout_ms / 1000


class Transport:
    """Performs authenticated exchanges with the remote API."""

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
        issuer: Optional[TokenIssuer] = None,
        middlewares: Optional[Sequence[RequestMiddleware]] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
        settings: Optional[ZAISettings] = None,
    ):
        self.config = ClientConfig.resolve(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
            default_headers=default_headers,
            cache_token=cache_token,
            settings=settings,
        )
        self.logger = get_logger("zai.transport")
        self.issuer = issuer or TokenIssuer(token_cache if token_cache is not None else default_token_cache)
        self.middlewares: List[RequestMiddleware] = list(middlewares or [])
        self.middlewares.append(AuthMiddleware(self.issuer, self.config.credential, self.config.cache_token))

        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=_to_seconds(self.config.timeout),
            transport=http_transport,
        )

    @property
    def base_url(self) -> str:
        return self.config.base_url

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        files: Optional[Iterable[Tuple[str, FileSpec]]] = None,
        options: OptionsLike = None,
    ) -> httpx.Request:
        """Prepare an authenticated request without sending it."""
        opts = RequestOptions.coerce(options)
        headers = merge_headers(BUILTIN_HEADERS, self.config.default_headers, opts.headers)
        if files is not None:
            # httpx writes the multipart Content-Type with its boundary.
            headers.pop("Content-Type", None)

        timeout = opts.timeout or self.config.timeout
        request = self._client.build_request(
            method,
            path,
            json=json,
            params=params,
            files=list(files) if files is not None else None,
            headers=headers,
            timeout=_to_seconds(timeout),
        )
        for middleware in self.middlewares:
            request = middleware(request)
        return request

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        files: Optional[Iterable[Tuple[str, FileSpec]]] = None,
        options: OptionsLike = None,
    ) -> Any:
        """Send a request and return the decoded response body."""
        opts = RequestOptions.coerce(options)
        request = self.build_request(method, path, json=json, params=params, files=files, options=opts)

        attributes = {"http.method": method, "http.url": str(request.url)}
        with request_context(), traced_span("zai.request", attributes) as span:
            self.logger.debug("Sending request", method=method, path=request.url.path)
            try:
                response = await self._send(request, opts.cancel_event)
            except httpx.HTTPError as exc:
                error = wrap_transport_error(exc, request)
                self.logger.warning("Transport failure", method=method, path=request.url.path, error=error.message)
                raise error from exc

            set_status_code(span, response.status_code)
            if not response.is_success:
                error = api_error_from_response(response)
                self.logger.warning(
                    "API error response",
                    method=method,
                    path=request.url.path,
                    status_code=response.status_code,
                )
                raise error

            self.logger.debug("Request completed", method=method, path=request.url.path, status_code=response.status_code)
            return decode_body(response)

    def request_stream(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        options: OptionsLike = None,
    ) -> StreamHandle:
        """Return a handle that sends the request when first consumed."""
        opts = RequestOptions.coerce(options)
        prepare = partial(self.build_request, method, path, json=json, options=opts)
        return StreamHandle(self._client, prepare, path, cancel_event=opts.cancel_event)

    async def _send(self, request: httpx.Request, cancel_event: Optional[asyncio.Event]) -> httpx.Response:
        if cancel_event is None:
            return await self._client.send(request)
        if cancel_event.is_set():
            raise RequestCancelled(details={"url": str(request.url)})

        send_task = asyncio.ensure_future(self._client.send(request))
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            done, _ = await asyncio.wait({send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()
                with suppress(asyncio.CancelledError):
                    await send_task

        if send_task in done:
            return send_task.result()
        self.logger.debug("Request cancelled", path=request.url.path)
        raise RequestCancelled(details={"url": str(request.url)})

    async def get(self, path: str, options: OptionsLike = None, params: Optional[Mapping[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params, options=options)

    async def post(self, path: str, body: Any = None, options: OptionsLike = None) -> Any:
        return await self.request("POST", path, json=body, options=options)

    async def put(self, path: str, body: Any = None, options: OptionsLike = None) -> Any:
        return await self.request("PUT", path, json=body, options=options)

    async def delete(self, path: str, options: OptionsLike = None) -> Any:
        return await self.request("DELETE", path, options=options)

    async def post_form(
        self,
        path: str,
        form_data: Optional[Mapping[str, Any]] = None,
        files: Optional[Mapping[str, FileSpec]] = None,
        options: OptionsLike = None,
    ) -> Any:
        """POST ``form_data`` and ``files`` as ``multipart/form-data``.

        Plain fields are sent as filename-less parts so the body is multipart
        even when no file is attached.
        """
        parts: List[Tuple[str, FileSpec]] = [
            (name, (None, str(value))) for name, value in (form_data or {}).items()
        ]
        parts.extend((files or {}).items())
        return await self.request("POST", path, files=parts, options=options)

    def stream(self, path: str, body: Any = None, options: OptionsLike = None) -> StreamHandle:
        """POST ``body`` and expose the response as a live stream."""
        return self.request_stream("POST", path, json=body, options=options)

