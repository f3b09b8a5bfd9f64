"""Testing utilities for courier clients.

``MockTransport`` replaces the network: every outgoing request is handed to a
programmable handler that returns response metadata and a body, or raises to
simulate a transport failure. An optional delay makes responses arrive late,
which is how cancellation and timing paths are exercised.

Example:
    >>> def handler(request):
    ...     return mock_response(request.url, HTTPStatus.OK), b'{"name": "Chewbacca"}'
    >>> transport = MockTransport(handler)
    >>> client = HTTPClient(
    ...     Configuration(host="swapi.dev", transport_config=TransportConfig(transport=transport))
    ... )
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from http import HTTPStatus
from typing import Callable

import httpx

from .types import HeaderField

MockRequestHandler = Callable[[httpx.Request], "tuple[httpx.Response, bytes]"]


def mock_response(
    url: httpx.URL | str,
    status: HTTPStatus | int,
    http_version: str = "HTTP/2",
    headers: Mapping[HeaderField | str, str] | None = None,
) -> httpx.Response:
    """Create response metadata with sensible defaults.

    The body is supplied separately by the request handler.
    """
    return httpx.Response(
        status_code=int(status),
        headers={str(key): value for key, value in (headers or {}).items()},
        request=httpx.Request("GET", url),
        extensions={"http_version": http_version.encode("ascii")},
    )


class MockTransport(httpx.AsyncBaseTransport):
    """Transport answering requests with a programmed handler.

    Attributes:
        request_handler: Maps a request to ``(response, body)``; may raise
        delay: Seconds to wait before invoking the handler
        requests: Every request received, in order
    """

    def __init__(self, request_handler: MockRequestHandler | None = None, delay: float | None = None):
        self.request_handler = request_handler
        self.delay = delay
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def reset(self) -> None:
        self.request_handler = None
        self.delay = None
        self.requests.clear()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.request_handler is None:
            raise httpx.ConnectError("No mock request handler installed", request=request)

        if self.delay:
            await asyncio.sleep(self.delay)

        response, data = self.request_handler(request)
        return httpx.Response(
            status_code=response.status_code,
            headers=response.headers,
            content=data,
            request=request,
            extensions={"http_version": response.extensions.get("http_version", b"HTTP/1.1")},
        )
