"""Request model for the courier client.

An ``HTTPRequest`` is an immutable description of a request together with the
type its response body should be decoded into. Requests carry no reference to
a client; build them with the per-method factories and hand them to
``HTTPClient.send`` or ``HTTPClient.data``.

Example:
    Declaring requests for an API::

        from courier import HTTPRequest

        people = HTTPRequest.get("/api/people/13", response_type=Person)
        search = HTTPRequest.get(
            "/api/people/",
            query=[("search", "chewie"), ("format", "json"), ("wookiee", None)],
            response_type=PeopleSearch,
        )
        created = HTTPRequest.post("/api/people/", body=new_person, response_type=Person)

Notes:
    ``response_type`` selects how the body is decoded: ``None`` ignores the
    body, ``bytes`` returns it untouched, ``str`` decodes UTF-8, ``X | None``
    allows an empty body and anything else is handed to the serializer.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .types import HeaderField, RequestMethod

if TYPE_CHECKING:
    from .serializer import JSONEncoder

T = TypeVar("T")

QueryItems = Iterable[tuple[str, "str | None"]]
Headers = Mapping["HeaderField | str", str]


class AnyEncodable:
    """Type-erasing box around an encodable request body.

    Lets a request hold a body of any type while its generic parameter stays
    the response type.
    """

    __slots__ = ("_value",)

    def __init__(self, value: Any):
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    @property
    def type_name(self) -> str:
        return type(self._value).__name__

    def encode(self, encoder: JSONEncoder) -> bytes:
        return encoder.encode(self._value)

    def __repr__(self) -> str:
        return f"AnyEncodable({self._value!r})"


@dataclass(frozen=True)
class HTTPRequest(Generic[T]):
    """Models an HTTP request with a response type."""

    method: RequestMethod
    path: str
    query: tuple[tuple[str, str | None], ...] | None = None
    body: AnyEncodable | None = None
    headers: Mapping[HeaderField, str] | None = None
    response_type: Any = None
    id: uuid.UUID = field(default_factory=uuid.uuid4, init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", RequestMethod(self.method))
        if self.query is not None:
            object.__setattr__(self, "query", tuple((str(k), v) for k, v in self.query))
        if self.headers is not None:
            normalized = {
                key if isinstance(key, HeaderField) else HeaderField(key): value
                for key, value in self.headers.items()
            }
            object.__setattr__(self, "headers", MappingProxyType(normalized))
        if self.body is not None and not isinstance(self.body, AnyEncodable):
            object.__setattr__(self, "body", AnyEncodable(self.body))

    @classmethod
    def _make(
        cls,
        method: RequestMethod,
        path: str,
        query: QueryItems | None,
        headers: Headers | None,
        response_type: Any,
        body: Any = None,
    ) -> HTTPRequest[Any]:
        return cls(
            method=method,
            path=path,
            query=tuple(query) if query is not None else None,
            body=AnyEncodable(body) if body is not None else None,
            headers=headers,
            response_type=response_type,
        )

    # GET

    @classmethod
    def get(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a GET request.

        Args:
            path: The resource path, or a fully qualified URL
            query: Optional query parameters, kept in the given order
            headers: Optional HTTP headers
            response_type: The type the response body decodes into
        """
        return cls._make(RequestMethod.GET, path, query, headers, response_type)

    # POST

    @classmethod
    def post(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        body: Any = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a POST request, optionally with an encodable body."""
        return cls._make(RequestMethod.POST, path, query, headers, response_type, body)

    # PUT

    @classmethod
    def put(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        body: Any = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a PUT request, optionally with an encodable body."""
        return cls._make(RequestMethod.PUT, path, query, headers, response_type, body)

    # PATCH

    @classmethod
    def patch(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        body: Any = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a PATCH request, optionally with an encodable body."""
        return cls._make(RequestMethod.PATCH, path, query, headers, response_type, body)

    # DELETE

    @classmethod
    def delete(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        body: Any = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a DELETE request, optionally with an encodable body."""
        return cls._make(RequestMethod.DELETE, path, query, headers, response_type, body)

    # OPTIONS

    @classmethod
    def options(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create an OPTIONS request."""
        return cls._make(RequestMethod.OPTIONS, path, query, headers, response_type)

    # HEAD

    @classmethod
    def head(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a HEAD request."""
        return cls._make(RequestMethod.HEAD, path, query, headers, response_type)

    # TRACE

    @classmethod
    def trace(
        cls,
        path: str,
        *,
        query: QueryItems | None = None,
        headers: Headers | None = None,
        response_type: Any = None,
    ) -> HTTPRequest[Any]:
        """Create a TRACE request."""
        return cls._make(RequestMethod.TRACE, path, query, headers, response_type)
