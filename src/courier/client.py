"""The courier HTTP client.

``HTTPClient`` turns ``HTTPRequest`` descriptions into decoded values. Every
request goes through the same pipeline:

    1. URL construction: host-relative paths get the configured scheme, host
       and port; absolute URLs are used as given
    2. Request assembly: headers, JSON body, ``Content-Type`` and ``Accept``
    3. Delegate: ``will_send_request`` may rewrite the wire-level request
    4. Transport: the ``DataLoader`` performs the exchange
    5. Validation: non-2xx statuses become the delegate's error
    6. Retry: the delegate may approve exactly one more attempt
    7. Cache fallback: a failed attempt may be answered from the cache
    8. Decoding: the body becomes the request's ``response_type``

Example:
    >>> client = HTTPClient(Configuration(host="swapi.dev"))
    >>> request = HTTPRequest.get("/api/people/13", response_type=Person)
    >>> async with client:
    ...     response = await client.send(request)
    >>> response.value.name
    'Chewbacca'
"""

from __future__ import annotations

import asyncio
import inspect
import types
from dataclasses import replace
from typing import Any, Callable, TypeVar, Union, get_args, get_origin
from urllib.parse import quote, urlsplit, urlunsplit

import httpx
from loguru import logger

from .cache import CachedResponse, ResponseCache
from .config import Configuration
from .delegate import DefaultClientDelegate, HTTPClientDelegate
from .descriptions import describe_request, describe_response
from .errors import BadURLError, TextDecodingError
from .loader import DataLoader
from .request import HTTPRequest, QueryItems
from .response import HTTPResponse
from .serializer import Serializer
from .types import HeaderField, MediaType, RequestMethod, set_headers

T = TypeVar("T")

_QUERY_SAFE = "-._~!$'()*,;:@/?"


async def _resolve(value: Any) -> Any:
    """Await delegate results that are awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def encode_query(query: QueryItems) -> str:
    """Encode query items in order; a ``None`` value renders as a bare name."""
    items = []
    for name, value in query:
        key = quote(str(name), safe=_QUERY_SAFE)
        items.append(key if value is None else f"{key}={quote(str(value), safe=_QUERY_SAFE)}")
    return "&".join(items)


def _netloc(host: str, port: int | None) -> str:
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return f"{host}:{port}" if port is not None else host


def _optional_inner(tp: Any) -> Any | None:
    """Return ``X`` for ``X | None``, otherwise ``None``."""
    if get_origin(tp) not in (Union, types.UnionType):
        return None
    args = get_args(tp)
    if type(None) not in args:
        return None
    rest = tuple(arg for arg in args if arg is not type(None))
    return rest[0] if len(rest) == 1 else Union[rest]


def _copy_request(request: httpx.Request) -> httpx.Request:
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=request.content,
        extensions=dict(request.extensions),
    )


class HTTPClient:
    """Asynchronous client for a single host.

    Args:
        configuration: Client configuration; copied on construction

    The client can serve many concurrent ``send`` calls. It owns an
    ``httpx.AsyncClient`` and should be closed with ``aclose()`` or used as an
    async context manager.
    """

    def __init__(self, configuration: Configuration):
        self.config = replace(configuration)
        self._serializer = Serializer(decoder=self.config.decoder, encoder=self.config.encoder)
        self._delegate: HTTPClientDelegate = self.config.delegate or DefaultClientDelegate()
        self._loader = DataLoader(observer=self.config.transport_observer)
        self._session = httpx.AsyncClient(**self.config.transport_config.client_options())

    @classmethod
    def from_host(cls, host: str, configure: Callable[[Configuration], None] | None = None) -> HTTPClient:
        """Create a client for ``host``, letting ``configure`` adjust the configuration."""
        configuration = Configuration(host=host)
        if configure is not None:
            configure(configuration)
        return cls(configuration)

    @property
    def cache(self) -> ResponseCache | None:
        return self.config.transport_config.cache

    @property
    def loader(self) -> DataLoader:
        return self._loader

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    async def __aenter__(self) -> HTTPClient:
        await self._session.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._session.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._session.aclose()

    # Sending

    async def send(self, request: HTTPRequest[T]) -> HTTPResponse[T]:
        """Send ``request`` and decode the body into its ``response_type``."""
        response = await self.data(request)
        value = await self._decode(request.response_type, response.value)
        return response.map(lambda _: value)

    async def data(self, request: HTTPRequest[Any]) -> HTTPResponse[bytes]:
        """Send ``request`` and return the raw response body as the value."""
        wire_request = await self.make_request(request)
        return await self._send(wire_request)

    async def cache_response(
        self, response: httpx.Response, data: bytes, request: HTTPRequest[Any]
    ) -> CachedResponse | None:
        """Store ``response`` as the cached answer for ``request``.

        Returns ``None`` if the client has no cache.
        """
        cache = self.cache
        if cache is None:
            return None
        cached = CachedResponse(response=response, data=data)
        cache.store(cached, await self.make_request(request))
        return cached

    async def _send(self, request: httpx.Request) -> HTTPResponse[bytes]:
        try:
            return await self._load(request)
        except asyncio.CancelledError:
            raise
        except Exception as error:
            if not await _resolve(self._delegate.should_client_retry(self, error)):
                raise
            logger.debug(f"Retrying {request.method} {request.url} after {type(error).__name__}")
            return await self._load(request)

    async def _load(self, prepared: httpx.Request) -> HTTPResponse[bytes]:
        request = _copy_request(prepared)
        await _resolve(self._delegate.will_send_request(self, request))
        logger.debug(f"Sending {describe_request(request)}")

        try:
            data, response, metrics = await self._loader.data(request, self._session)
            await self._validate(response, data)
        except asyncio.CancelledError:
            raise
        except Exception as error:
            cached = self._cached_response(request)
            if cached is None:
                raise
            logger.warning(
                f"Using cached response for {request.method} {request.url} after {type(error).__name__}: {error}"
            )
            return HTTPResponse(
                value=cached.data,
                data=cached.data,
                request=request,
                response=cached.response,
                metrics=None,
            )

        logger.debug(f"Received {describe_response(response)} ({len(data)} bytes)")
        self._store(request, response, data)
        return HTTPResponse(value=data, data=data, request=request, response=response, metrics=metrics)

    async def _validate(self, response: httpx.Response, data: bytes) -> None:
        if not 200 <= response.status_code < 300:
            raise await _resolve(self._delegate.did_receive_invalid_response(self, response, data))

    def _cached_response(self, request: httpx.Request) -> CachedResponse | None:
        if not self.config.load_cached_response_on_error or self.cache is None:
            return None
        return self.cache.get(request)

    def _store(self, request: httpx.Request, response: httpx.Response, data: bytes) -> None:
        cache = self.cache
        if cache is None:
            return
        try:
            method = RequestMethod(request.method.upper())
        except ValueError:
            return
        if not (method.is_safe and method.is_cacheable):
            return
        if "no-store" in response.headers.get(str(HeaderField.CACHE_CONTROL), "").lower():
            return
        cache.store(CachedResponse(response=response, data=data), request)
        logger.debug(f"Cached response for {request.method} {request.url}")

    # Decoding

    async def _decode(self, response_type: Any, data: bytes) -> Any:
        if response_type is None or response_type is type(None):
            return None
        if response_type is bytes:
            return data
        if response_type is str:
            try:
                return data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise TextDecodingError(e) from e

        inner = _optional_inner(response_type)
        if inner is not None:
            if not data:
                return None
            return await self._decode(inner, data)

        return await self._serializer.decode(response_type, data)

    # Request assembly

    def make_url(self, path: str, query: QueryItems | None = None) -> httpx.URL:
        """Build the URL for ``path``.

        Paths starting with ``/`` are host-relative: scheme, host and port
        come from the configuration, even if the path carries its own. Any
        other path is used exactly as given. ``query``, when provided,
        replaces the query string.

        Raises:
            BadURLError: If no valid absolute URL can be produced
        """
        try:
            parts = urlsplit(path)
            scheme, netloc = parts.scheme, parts.netloc
            if path.startswith("/"):
                scheme = "http" if self.config.is_insecure else "https"
                port = self.config.port if self.config.port is not None else parts.port
                netloc = _netloc(self.config.host, port)
        except ValueError as e:
            raise BadURLError(f"Invalid URL: {path!r}", path=path, cause=e) from e

        query_string = parts.query if query is None else encode_query(query)
        candidate = urlunsplit((scheme, netloc, parts.path, query_string, parts.fragment))

        try:
            url = httpx.URL(candidate)
        except httpx.InvalidURL as e:
            raise BadURLError(f"Invalid URL: {candidate!r}", path=path, cause=e) from e

        if not url.scheme or not url.host:
            raise BadURLError(f"URL has no scheme or host: {candidate!r}", path=path)
        return url

    async def make_request(self, request: HTTPRequest[Any]) -> httpx.Request:
        """Assemble the wire-level request for ``request``."""
        url = self.make_url(request.path, request.query)
        media_type = str(MediaType.APPLICATION_JSON_CHARSET_UTF8)

        content = None
        if request.body is not None:
            content = await self._serializer.encode(request.body)

        wire_request = self._session.build_request(str(request.method), url, content=content)
        set_headers(wire_request, request.headers or {})
        if content is not None:
            wire_request.headers[str(HeaderField.CONTENT_TYPE)] = media_type
        wire_request.headers[str(HeaderField.ACCEPT)] = media_type
        return wire_request
