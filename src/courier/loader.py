"""Transport adapter turning one request/response exchange into an awaitable.

The ``DataLoader`` drives a single exchange over an ``httpx.AsyncClient``:
it dispatches the request, accumulates the streamed body chunk by chunk,
collects timing metrics and reports completion exactly once. Exchanges run in
their own task so that cancelling the caller actively cancels the underlying
transport operation instead of merely abandoning it.

Exchange Lifecycle:
    1. ``data()`` registers a handler for the request (keyed by identity)
    2. The exchange task sends the request and streams the body
    3. Events flow through ``TransportObserver`` hooks into the handler
    4. ``did_complete`` removes the handler and records the outcome
    5. ``data()`` returns the outcome or raises its error

Example:
    >>> loader = DataLoader()
    >>> async with httpx.AsyncClient() as session:
    ...     body, response, metrics = await loader.data(request, session)
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx
from loguru import logger

from .errors import RequestCancelledError, TransportError
from .events import TransportEventDispatcher, TransportObserver
from .metrics import TaskMetrics

ExchangeResult = tuple[bytes, httpx.Response, "TaskMetrics | None"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _ExchangeHandler:
    """Per-exchange state: received chunks, response, metrics and outcome."""

    __slots__ = ("data", "response", "metrics", "error", "completed")

    def __init__(self):
        self.data = bytearray()
        self.response: httpx.Response | None = None
        self.metrics: TaskMetrics | None = None
        self.error: BaseException | None = None
        self.completed = False

    def complete(self, error: BaseException | None) -> None:
        if error is None and self.response is None:
            error = TransportError("Exchange completed without a response")
        self.error = error
        self.completed = True

    def result(self) -> ExchangeResult:
        if self.error is not None:
            raise self.error
        return bytes(self.data), self.response, self.metrics


class DataLoader(TransportObserver):
    """Loads response data for wire-level requests.

    Args:
        observer: Optional external observer that receives every exchange
            event after the loader has processed it
    """

    def __init__(self, observer: TransportObserver | None = None):
        self._handlers: dict[int, _ExchangeHandler] = {}
        self._events = TransportEventDispatcher.make(self, observer)

    @property
    def pending_exchange_count(self) -> int:
        """Number of exchanges dispatched but not yet completed."""
        return len(self._handlers)

    async def data(self, request: httpx.Request, session: httpx.AsyncClient) -> ExchangeResult:
        """Load data for ``request``.

        Returns:
            The response body, the response metadata and timing metrics

        Raises:
            TransportError: If the transport fails to complete the exchange
            asyncio.CancelledError: If the calling task is cancelled; its
                ``__cause__`` is a ``RequestCancelledError`` for the request
        """
        key = id(request)
        if key in self._handlers:
            raise RuntimeError(f"Request is already in flight: {request.method} {request.url}")

        handler = _ExchangeHandler()
        self._handlers[key] = handler
        exchange = asyncio.ensure_future(self._load(request, session))

        try:
            await asyncio.shield(exchange)
        except asyncio.CancelledError as e:
            exchange.cancel()
            try:
                await exchange
            except asyncio.CancelledError:
                pass
            if not handler.completed:
                # Cancelled before the exchange task ever ran
                self._events.did_complete(request, RequestCancelledError(request))
            logger.debug(f"Cancelled {request.method} {request.url}")
            # asyncio.timeout() only recognizes the exact CancelledError type
            raise e from RequestCancelledError(request)
        finally:
            if self._handlers.get(key) is handler:
                del self._handlers[key]

        return handler.result()

    async def _load(self, request: httpx.Request, session: httpx.AsyncClient) -> None:
        fetch_start = _now()
        response_start = None
        received = 0
        response: httpx.Response | None = None

        try:
            try:
                self._events.did_send_request(request)
                response = await session.send(request, stream=True)
                response_start = _now()
                self._events.did_receive_response(request, response)
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    self._events.did_receive_data(request, chunk)
            finally:
                if response is not None:
                    await response.aclose()
        except asyncio.CancelledError:
            self._events.did_complete(request, RequestCancelledError(request))
            raise
        except httpx.HTTPError as e:
            error = TransportError(f"{type(e).__name__}: {e}", request=request, cause=e)
            error.__cause__ = e
            self._events.did_complete(request, error)
            return
        except Exception as e:
            self._events.did_complete(request, e)
            return

        metrics = TaskMetrics.collect(response, fetch_start, response_start, _now(), received)
        self._events.did_finish_collecting(request, metrics)
        self._events.did_complete(request, None)

    # TransportObserver

    def did_receive_response(self, request: httpx.Request, response: httpx.Response) -> None:
        handler = self._handlers.get(id(request))
        if handler is not None:
            handler.response = response

    def did_receive_data(self, request: httpx.Request, chunk: bytes) -> None:
        handler = self._handlers.get(id(request))
        if handler is not None:
            handler.data.extend(chunk)

    def did_finish_collecting(self, request: httpx.Request, metrics: TaskMetrics) -> None:
        handler = self._handlers.get(id(request))
        if handler is not None:
            handler.metrics = metrics

    def did_complete(self, request: httpx.Request, error: BaseException | None) -> None:
        handler = self._handlers.pop(id(request), None)
        if handler is None:
            return
        handler.complete(error)
