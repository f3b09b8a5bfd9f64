"""Typed, asynchronous HTTP client built on httpx.

courier turns request descriptions into decoded values. A client is bound to
one host; requests declare the type their body decodes into and the client
takes care of URL construction, JSON encoding and decoding, status validation,
a delegate-approved retry and an optional fallback to cached responses.

Key Features:
    - Immutable ``HTTPRequest`` values with one factory per HTTP method
    - ``HTTPResponse`` values carrying the decoded value, raw body and metrics
    - A delegate hooking into request mutation, retry and error translation
    - Cooperative cancellation of in-flight exchanges
    - Cache-on-error fallback for offline scenarios
    - ``MockTransport`` for deterministic tests

Quick Start:
    Basic usage example::

        from pydantic import BaseModel

        from courier import Configuration, HTTPClient, HTTPRequest

        class Person(BaseModel):
            name: str
            height: str

        async def main():
            async with HTTPClient(Configuration(host="swapi.dev")) as client:
                request = HTTPRequest.get("/api/people/13/", response_type=Person)
                response = await client.send(request)
                print(response.value.name, response.status_code)

Advanced Features:
    Inject credentials and retry once on expiry::

        class AuthDelegate(DefaultClientDelegate):
            def will_send_request(self, client, request):
                set_bearer_token(request, tokens.current)

            async def should_client_retry(self, client, error):
                if isinstance(error, InvalidResponseError) and error.status_code == 401:
                    await tokens.refresh()
                    return True
                return False

        client = HTTPClient(Configuration(host="api.example.com", delegate=AuthDelegate()))

See Also:
    - Configuration: Client configuration options
    - HTTPClientDelegate: Hooks into the request/response cycle
    - MockTransport: Programmable transport for tests
"""

from .cache import CachedResponse, InMemoryResponseCache, ResponseCache
from .client import HTTPClient
from .config import Configuration, TransportConfig
from .delegate import DefaultClientDelegate, HTTPClientDelegate
from .errors import (
    BadURLError,
    CourierError,
    DecodingError,
    EncodingError,
    HTTPClientError,
    InvalidResponseError,
    RequestCancelledError,
    SerializationError,
    TextDecodingError,
    TransportError,
)
from .events import TransportEventDispatcher, TransportObserver
from .loader import DataLoader
from .metrics import TaskMetrics, TransactionMetrics
from .request import AnyEncodable, HTTPRequest
from .response import HTTPResponse
from .serializer import JSONDecoder, JSONEncoder, Serializer
from .testing import MockTransport, mock_response
from .types import HeaderField, MediaType, RequestMethod, set_bearer_token

__version__ = "0.1.0"

__all__ = [
    "AnyEncodable",
    "BadURLError",
    "CachedResponse",
    "Configuration",
    "CourierError",
    "DataLoader",
    "DecodingError",
    "DefaultClientDelegate",
    "EncodingError",
    "HTTPClient",
    "HTTPClientDelegate",
    "HTTPClientError",
    "HTTPRequest",
    "HTTPResponse",
    "HeaderField",
    "InMemoryResponseCache",
    "InvalidResponseError",
    "JSONDecoder",
    "JSONEncoder",
    "MediaType",
    "MockTransport",
    "RequestCancelledError",
    "RequestMethod",
    "ResponseCache",
    "SerializationError",
    "Serializer",
    "TaskMetrics",
    "TextDecodingError",
    "TransactionMetrics",
    "TransportConfig",
    "TransportError",
    "TransportEventDispatcher",
    "TransportObserver",
    "__version__",
    "mock_response",
    "set_bearer_token",
]
