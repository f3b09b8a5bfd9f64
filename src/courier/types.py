"""Type definitions shared across the courier client.

This module defines the small value types that flow through every request:
header field names, media types and request methods. Header fields and media
types are case-insensitive string wrappers, so they can be used as mapping
keys without worrying about the spelling a server or caller chose.

Classes:
    HeaderField: Case-insensitive HTTP header field name
    MediaType: Case-insensitive media (MIME) type
    RequestMethod: HTTP request method with RFC 7231 semantics

Functions:
    set_headers: Apply a header mapping to an ``httpx.Request``
    set_bearer_token: Set or remove a bearer ``Authorization`` header
    content_type: Read the ``Content-Type`` of a request
    is_json: True if a request declares a JSON body

Example:
    Adding custom header fields::

        from courier.types import HeaderField

        API_KEY = HeaderField("X-Api-Key")

        request = HTTPRequest.get("/users", headers={API_KEY: "secret"})
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    import httpx


class _Token:
    """A string wrapper compared and hashed without regard to case."""

    __slots__ = ("raw_value",)

    def __init__(self, raw_value: str):
        self.raw_value = str(raw_value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, type(self)):
            return self.raw_value.lower() == other.raw_value.lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.raw_value.lower())

    def __str__(self) -> str:
        return self.raw_value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.raw_value!r})"


class HeaderField(_Token):
    """RFC 2616 request and response header field names.

    Extend with module level constants to provide named custom headers.
    """

    __slots__ = ()

    # Request header fields (RFC 2616 - 5.3)
    A_IM: ClassVar[HeaderField]
    ACCEPT: ClassVar[HeaderField]
    ACCEPT_CHARSET: ClassVar[HeaderField]
    ACCEPT_DATETIME: ClassVar[HeaderField]
    ACCEPT_ENCODING: ClassVar[HeaderField]
    ACCEPT_LANGUAGE: ClassVar[HeaderField]
    AUTHORIZATION: ClassVar[HeaderField]
    CACHE_CONTROL: ClassVar[HeaderField]
    CONNECTION: ClassVar[HeaderField]
    CONTENT_ENCODING: ClassVar[HeaderField]
    CONTENT_LENGTH: ClassVar[HeaderField]
    CONTENT_MD5: ClassVar[HeaderField]
    CONTENT_TYPE: ClassVar[HeaderField]
    COOKIE: ClassVar[HeaderField]
    DATE: ClassVar[HeaderField]
    EXPECT: ClassVar[HeaderField]
    FORWARDED: ClassVar[HeaderField]
    FROM: ClassVar[HeaderField]
    HOST: ClassVar[HeaderField]
    HTTP2_SETTINGS: ClassVar[HeaderField]
    IF_MATCH: ClassVar[HeaderField]
    IF_MODIFIED_SINCE: ClassVar[HeaderField]
    IF_NONE_MATCH: ClassVar[HeaderField]
    IF_RANGE: ClassVar[HeaderField]
    IF_UNMODIFIED_SINCE: ClassVar[HeaderField]
    MAX_FORWARDS: ClassVar[HeaderField]
    ORIGIN: ClassVar[HeaderField]
    PRAGMA: ClassVar[HeaderField]
    PROXY_AUTHORIZATION: ClassVar[HeaderField]
    RANGE: ClassVar[HeaderField]
    REFERER: ClassVar[HeaderField]
    TE: ClassVar[HeaderField]
    TRAILER: ClassVar[HeaderField]
    TRANSFER_ENCODING: ClassVar[HeaderField]
    USER_AGENT: ClassVar[HeaderField]
    UPGRADE: ClassVar[HeaderField]
    VIA: ClassVar[HeaderField]
    WARNING: ClassVar[HeaderField]

    # Response header fields (RFC 2616 - 6.2)
    ACCEPT_RANGES: ClassVar[HeaderField]
    AGE: ClassVar[HeaderField]
    ETAG: ClassVar[HeaderField]
    LOCATION: ClassVar[HeaderField]
    PROXY_AUTHENTICATE: ClassVar[HeaderField]
    RETRY_AFTER: ClassVar[HeaderField]
    SERVER: ClassVar[HeaderField]
    VARY: ClassVar[HeaderField]
    WWW_AUTHENTICATE: ClassVar[HeaderField]


_HEADER_FIELDS = {
    "A_IM": "A-IM",
    "ACCEPT": "Accept",
    "ACCEPT_CHARSET": "Accept-Charset",
    "ACCEPT_DATETIME": "Accept-Datetime",
    "ACCEPT_ENCODING": "Accept-Encoding",
    "ACCEPT_LANGUAGE": "Accept-Language",
    "AUTHORIZATION": "Authorization",
    "CACHE_CONTROL": "Cache-Control",
    "CONNECTION": "Connection",
    "CONTENT_ENCODING": "Content-Encoding",
    "CONTENT_LENGTH": "Content-Length",
    "CONTENT_MD5": "Content-MD5",
    "CONTENT_TYPE": "Content-Type",
    "COOKIE": "Cookie",
    "DATE": "Date",
    "EXPECT": "Expect",
    "FORWARDED": "Forwarded",
    "FROM": "From",
    "HOST": "Host",
    "HTTP2_SETTINGS": "HTTP2-Settings",
    "IF_MATCH": "If-Match",
    "IF_MODIFIED_SINCE": "If-Modified-Since",
    "IF_NONE_MATCH": "If-None-Match",
    "IF_RANGE": "If-Range",
    "IF_UNMODIFIED_SINCE": "If-Unmodified-Since",
    "MAX_FORWARDS": "Max-Forwards",
    "ORIGIN": "Origin",
    "PRAGMA": "Pragma",
    "PROXY_AUTHORIZATION": "Proxy-Authorization",
    "RANGE": "Range",
    "REFERER": "Referer",
    "TE": "TE",
    "TRAILER": "Trailer",
    "TRANSFER_ENCODING": "Transfer-Encoding",
    "USER_AGENT": "User-Agent",
    "UPGRADE": "Upgrade",
    "VIA": "Via",
    "WARNING": "Warning",
    "ACCEPT_RANGES": "Accept-Ranges",
    "AGE": "Age",
    "ETAG": "ETag",
    "LOCATION": "Location",
    "PROXY_AUTHENTICATE": "Proxy-Authenticate",
    "RETRY_AFTER": "Retry-After",
    "SERVER": "Server",
    "VARY": "Vary",
    "WWW_AUTHENTICATE": "WWW-Authenticate",
}

for _name, _value in _HEADER_FIELDS.items():
    setattr(HeaderField, _name, HeaderField(_value))


class MediaType(_Token):
    """A media type, formerly known as MIME type.

    A media type consists of a type and a subtype, optionally followed by a
    suffix and parameters::

        type "/" [tree "."] subtype ["+" suffix]* [";" parameter]

    For example ``text/html; charset=UTF-8``.
    """

    __slots__ = ()

    APPLICATION_JSON: ClassVar[MediaType]
    APPLICATION_JSON_CHARSET_UTF8: ClassVar[MediaType]


MediaType.APPLICATION_JSON = MediaType("application/json")
MediaType.APPLICATION_JSON_CHARSET_UTF8 = MediaType("application/json; charset=utf-8")


class RequestMethod(str, Enum):
    """HTTP request method.

    See RFC 7231 section 4 and RFC 5789 (PATCH).
    """

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    def __str__(self) -> str:
        return self.value

    @property
    def is_safe(self) -> bool:
        """Safe methods are essentially read-only on the origin server."""
        return self in (RequestMethod.GET, RequestMethod.HEAD, RequestMethod.OPTIONS, RequestMethod.TRACE)

    @property
    def is_idempotent(self) -> bool:
        """Multiple identical requests have the same effect as a single one."""
        return self.is_safe or self in (RequestMethod.PUT, RequestMethod.DELETE)

    @property
    def is_cacheable(self) -> bool:
        """Responses to this method may be stored for future reuse."""
        return self in (RequestMethod.GET, RequestMethod.HEAD, RequestMethod.POST)

    @property
    def request_body_is_required(self) -> bool:
        return self in (RequestMethod.POST, RequestMethod.PUT, RequestMethod.PATCH)

    @property
    def request_body_is_allowed(self) -> bool:
        return self is not RequestMethod.TRACE

    @property
    def has_response_body(self) -> bool:
        return self is not RequestMethod.HEAD


# Request helpers


def set_headers(request: httpx.Request, headers: Mapping[HeaderField | str, str]) -> None:
    """Set each header on the request, replacing any previous value."""
    for field, value in headers.items():
        request.headers[str(field)] = value


def set_bearer_token(request: httpx.Request, token: str | None) -> None:
    """Set the ``Authorization`` header to a bearer token.

    An empty or missing token removes the header instead.
    """
    name = str(HeaderField.AUTHORIZATION)
    if token:
        request.headers[name] = f"Bearer {token}"
    elif name in request.headers:
        del request.headers[name]


def content_type(request: httpx.Request) -> str | None:
    return request.headers.get(str(HeaderField.CONTENT_TYPE))


def is_json(request: httpx.Request) -> bool:
    value = content_type(request)
    return bool(value) and value.lower().startswith(str(MediaType.APPLICATION_JSON))
