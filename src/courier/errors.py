"""Exception hierarchy for the courier HTTP client.

Every failure raised by the client pipeline derives from ``CourierError`` and
carries the context needed to act on it programmatically.

Exception Hierarchy:
    CourierError: Base exception for all courier errors
    ├── BadURLError: A path or its components do not form a valid URL
    ├── TransportError: The exchange with the transport failed
    │   └── RequestCancelledError: The exchange was cancelled
    ├── HTTPClientError: The server answered, but not acceptably
    │   └── InvalidResponseError: Status code outside 200..<300
    └── SerializationError: Encode/decode boundary failures
        ├── EncodingError: A request body could not be encoded
        └── DecodingError: A response body could not be decoded
            └── TextDecodingError: A text body is not valid UTF-8

Retry Semantics:
    - BadURLError, EncodingError and DecodingError are raised before or after
      the transport exchange and are never retried
    - TransportError and InvalidResponseError are offered to the delegate's
      retry predicate once
    - Cancellation propagates as ``asyncio.CancelledError`` with a
      RequestCancelledError as its cause and is never retried

Example:
    >>> try:
    ...     response = await client.send(HTTPRequest.get("/api/people/13"))
    ... except InvalidResponseError as e:
    ...     print(f"{e.status_code} from {e.url}")
    ... except TransportError as e:
    ...     print(f"Network failure: {e.cause}")
"""

from __future__ import annotations

from http import HTTPStatus
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class CourierError(Exception):
    """Base exception for all courier errors."""

    pass


class BadURLError(CourierError):
    """Raised when a request path cannot be turned into a valid URL."""

    def __init__(self, message: str, path: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.path = path
        self.cause = cause


class TransportError(CourierError):
    """Raised when the underlying transport fails to complete an exchange.

    This covers connection failures, timeouts, protocol errors and anything
    else the transport reports before a complete response is available.
    """

    def __init__(
        self,
        message: str,
        request: httpx.Request | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.request = request
        self.cause = cause

    @property
    def url(self) -> str | None:
        return str(self.request.url) if self.request is not None else None


class RequestCancelledError(TransportError):
    """Reports that an in-flight exchange was cancelled.

    Cancellation itself propagates as a plain ``asyncio.CancelledError`` so
    that ``asyncio.timeout()`` and ``asyncio.wait_for()`` keep working; this
    error is attached as its ``__cause__`` and passed to
    ``TransportObserver.did_complete``.
    """

    def __init__(self, request: httpx.Request | None = None):
        url = f" {request.url}" if request is not None else ""
        super().__init__(f"Request cancelled:{url}", request=request)


class HTTPClientError(CourierError):
    """Base exception for responses the client refuses to accept."""

    #: Error domain used when mapping onto error-info conventions.
    error_domain = "HTTPError"


class InvalidResponseError(HTTPClientError):
    """Raised when a response carries a status code outside 200..<300.

    The raw ``httpx.Response`` is kept so the status code and URL are always
    recoverable from the error.
    """

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(self.description)

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def status(self) -> HTTPStatus | None:
        try:
            return HTTPStatus(self.status_code)
        except ValueError:
            return None

    @property
    def url(self) -> str | None:
        try:
            return str(self.response.url)
        except RuntimeError:
            # Response built without a request
            return None

    @property
    def description(self) -> str:
        """Simple user friendly description, e.g. ``"418 I'm a Teapot"``."""
        status = self.status
        phrase = status.phrase if status else self.response.reason_phrase
        return f"{self.status_code} {phrase}".strip()

    @property
    def failure_reason(self) -> str | None:
        status = self.status
        return status.description if status else None

    @property
    def error_code(self) -> int:
        return self.status_code

    @property
    def error_user_info(self) -> dict[str, Any]:
        return {
            "failing_url": self.url,
            "description": self.description,
            "failure_reason": self.failure_reason,
        }


class SerializationError(CourierError):
    """Base exception for encode/decode failures."""

    def __init__(self, message: str, type_name: str, cause: Exception | None = None):
        super().__init__(message)
        self.type_name = type_name
        self.cause = cause


class EncodingError(SerializationError):
    """Raised when a value cannot be encoded into a request body."""

    def __init__(self, type_name: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to encode {type_name}{detail}", type_name, cause)


class DecodingError(SerializationError):
    """Raised when a response body cannot be decoded into the expected type."""

    def __init__(self, type_name: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to decode {type_name}{detail}", type_name, cause)


class TextDecodingError(DecodingError):
    """Raised when a body expected as text is not valid UTF-8."""

    def __init__(self, cause: Exception | None = None):
        super().__init__("str", cause)
