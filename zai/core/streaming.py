"""
Live response streams returned by :meth:`Transport.stream`.
"""

from __future__ import annotations

import asyncio
import codecs
import json
from contextlib import suppress
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, Awaitable, Callable, Optional

import httpx
from opentelemetry.trace import Status, StatusCode

from ..common.errors import TransportError, ZAIError
from ..common.logging import get_logger
from ..common.tracing import get_tracer, set_status_code
from .responses import api_error_from_response, wrap_transport_error

# Returned by StreamHandle._until_cancelled when cancellation wins the race.
_CANCELLED = object()
_EOF = object()


@dataclass(frozen=True)
class StreamEvent:
    """One signal emitted by :meth:`StreamHandle.events`."""

    kind: str  # "data", "end" or "error"
    data: Optional[bytes] = None
    error: Optional[ZAIError] = None


async def _next_chunk(chunks: AsyncGenerator[bytes, None]) -> Any:
    try:
        return await chunks.__anext__()
    except StopAsyncIteration:
        return _EOF


class StreamHandle:
    """Incremental view of a streamed POST response.

    The connection opens lazily on first iteration (or on ``async with``),
    so remote and transport failures surface while consuming the stream.
    Chunks are yielded as they arrive and never accumulated.

    :meth:`cancel` (or setting the ``cancel_event``) interrupts a pending
    send or read, so a consumer blocked on a stalled connection returns
    promptly and the connection is released.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        prepare: Callable[[], httpx.Request],
        path: str,
        cancel_event: Optional[asyncio.Event] = None,
    ):
        self._client = client
        self._prepare = prepare
        self._path = path
        self._request: Optional[httpx.Request] = None
        self._cancel_event = cancel_event
        # Created inside the running loop on first wait.
        self._cancel_signal: Optional[asyncio.Event] = None
        self._response: Optional[httpx.Response] = None
        self._span = None
        self._cancelled = False
        self._consumed = False
        self._closed = False
        self.logger = get_logger("zai.stream")

    @property
    def request(self) -> Optional[httpx.Request]:
        return self._request

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self._cancel_event is not None and self._cancel_event.is_set()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def status_code(self) -> Optional[int]:
        return self._response.status_code if self._response is not None else None

    def cancel(self) -> None:
        """Stop the stream; no further chunks are yielded after this call.

        A pending read in another task is interrupted and the connection is
        closed by that reader before it returns.
        """
        if not self._cancelled:
            self._cancelled = True
            if self._cancel_signal is not None:
                self._cancel_signal.set()
            self.logger.debug("Stream cancelled", path=self._path)

    async def open(self) -> httpx.Response:
        """Authenticate and send the request, then check the status.

        The body is left unread.
        """
        if self._response is not None:
            return self._response
        if self._closed:
            raise TransportError("Stream is closed", details={"path": self._path})

        try:
            self._request = self._prepare()
        except ZAIError:
            self._closed = True
            raise

        self._span = get_tracer("zai").start_span(
            "zai.stream",
            attributes={"http.method": self._request.method, "http.url": str(self._request.url)},
        )
        try:
            response = await self._client.send(self._request, stream=True)
        except httpx.HTTPError as exc:
            error = wrap_transport_error(exc, self._request)
            self.logger.warning("Stream transport failure", path=self._path, error=error.message)
            await self._finish(error)
            raise error from exc

        set_status_code(self._span, response.status_code)
        if not response.is_success:
            try:
                await response.aread()
            except httpx.HTTPError as exc:
                error = wrap_transport_error(exc, self._request)
                self.logger.warning("Stream error body interrupted", path=self._path, error=error.message)
                await self._finish(error)
                raise error from exc
            finally:
                await response.aclose()
            error = api_error_from_response(response)
            self.logger.warning(
                "Stream rejected by API",
                path=self._path,
                status_code=response.status_code,
            )
            await self._finish(error)
            raise error

        self._response = response
        self.logger.debug("Stream opened", path=self._path, status_code=response.status_code)
        return response

    async def aclose(self) -> None:
        """Release the underlying connection."""
        await self._finish(None)

    async def _finish(self, error: Optional[ZAIError]) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            await self._response.aclose()
        if self._span is not None:
            if error is not None:
                self._span.record_exception(error)
                self._span.set_status(Status(StatusCode.ERROR, error.message))
            self._span.end()

    async def _until_cancelled(self, awaitable: Awaitable[Any]) -> Any:
        """Await ``awaitable`` unless the stream is cancelled first.

        Returns ``_CANCELLED`` when cancellation wins; the pending work is
        cancelled before returning.
        """
        if self._cancel_signal is None:
            self._cancel_signal = asyncio.Event()
            if self._cancelled:
                self._cancel_signal.set()

        work = asyncio.ensure_future(awaitable)
        waiters = [asyncio.ensure_future(self._cancel_signal.wait())]
        if self._cancel_event is not None:
            waiters.append(asyncio.ensure_future(self._cancel_event.wait()))
        try:
            done, _ = await asyncio.wait({work, *waiters}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                waiter.cancel()
            if not work.done():
                work.cancel()
                with suppress(asyncio.CancelledError):
                    await work

        if work in done:
            return work.result()
        return _CANCELLED

    async def __aenter__(self) -> "StreamHandle":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError("Stream has already been consumed")
        self._consumed = True

        chunks: Optional[AsyncGenerator[bytes, None]] = None
        error: Optional[ZAIError] = None
        try:
            if self.cancelled:
                return
            response = await self._until_cancelled(self.open())
            if response is _CANCELLED:
                return

            chunks = response.aiter_bytes()
            while not (self.cancelled or self._closed):
                chunk = await self._until_cancelled(_next_chunk(chunks))
                if chunk is _CANCELLED or chunk is _EOF:
                    break
                yield chunk
        except httpx.HTTPError as exc:
            error = wrap_transport_error(exc, self._request)
            self.logger.warning("Stream interrupted", path=self._path, error=error.message)
            raise error from exc
        finally:
            if chunks is not None:
                await chunks.aclose()
            await self._finish(error)

    async def events(self) -> AsyncIterator[StreamEvent]:
        """Yield data events followed by exactly one end or error event.

        A cancelled stream stops without a terminal event.
        """
        try:
            async for chunk in self:
                yield StreamEvent("data", data=chunk)
        except ZAIError as exc:
            yield StreamEvent("error", error=exc)
            return
        if not self.cancelled:
            yield StreamEvent("end")

    async def iter_lines(self) -> AsyncIterator[str]:
        """Yield decoded text lines, buffering partial lines across chunks."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        buffer = ""
        async for chunk in self:
            buffer += decoder.decode(chunk)
            while "\n" in buffer:
                line, buffer = buffer.split("\n", 1)
                yield line.rstrip("\r")
        buffer += decoder.decode(b"", final=True)
        if buffer and not self.cancelled:
            yield buffer.rstrip("\r")

    async def iter_sse(self) -> AsyncIterator[Any]:
        """Yield server-sent-event ``data`` payloads until ``[DONE]``.

        JSON payloads are decoded; anything else is yielded as text.
        """
        data_lines = []
        async for line in self.iter_lines():
            if line.startswith(":"):
                continue
            if line:
                field, _, value = line.partition(":")
                if field == "data":
                    data_lines.append(value[1:] if value.startswith(" ") else value)
                continue
            if not data_lines:
                continue
            payload = "\n".join(data_lines)
            data_lines = []
            if payload.strip() == "[DONE]":
                self.cancel()
                await self.aclose()
                return
            yield _decode_event_data(payload)

        if data_lines and not self.cancelled:
            payload = "\n".join(data_lines)
            if payload.strip() != "[DONE]":
                yield _decode_event_data(payload)


def _decode_event_data(payload: str) -> Any:
    try:
        return json.loads(payload)
    except json.JSONDecodeError:
        return payload
