"""Configuration for the courier client.

Classes:
    TransportConfig: Settings for the underlying ``httpx.AsyncClient``
    Configuration: Complete configuration of an ``HTTPClient``

Example:
    Configure a client for a local development server::

        config = Configuration(
            host="http://localhost",
            port=8000,
            is_insecure=True,
            transport_config=TransportConfig(timeout=5.0),
            load_cached_response_on_error=True,
        )
        client = HTTPClient(config)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, ConfigDict, Field

from .cache import InMemoryResponseCache, ResponseCache

if TYPE_CHECKING:
    from .delegate import HTTPClientDelegate
    from .events import TransportObserver
    from .serializer import JSONDecoder, JSONEncoder


class TransportConfig(BaseModel):
    """Settings for the transport layer.

    Attributes:
        timeout: Request timeout in seconds (default: 30.0)
        verify_ssl: Whether to verify TLS certificates (default: True)
        follow_redirects: Whether to follow redirects (default: True)
        headers: Headers added to every request by the transport
        max_connections: Maximum number of open connections
        max_keepalive_connections: Maximum number of idle connections kept
        transport: Replacement ``httpx.AsyncBaseTransport``, e.g. a mock
        cache: Response cache; ``None`` disables caching

    Example:
        Route all traffic through a mock::

            TransportConfig(transport=MockTransport(handler))
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    timeout: float | None = 30.0
    verify_ssl: bool = True
    follow_redirects: bool = True
    headers: dict[str, str] = Field(default_factory=dict)
    max_connections: int | None = 100
    max_keepalive_connections: int | None = 20
    transport: httpx.AsyncBaseTransport | None = None
    cache: ResponseCache | None = Field(default_factory=InMemoryResponseCache)

    def client_options(self) -> dict[str, Any]:
        """Keyword arguments for ``httpx.AsyncClient``."""
        return {
            "timeout": self.timeout,
            "verify": self.verify_ssl,
            "follow_redirects": self.follow_redirects,
            "headers": self.headers,
            "limits": httpx.Limits(
                max_connections=self.max_connections,
                max_keepalive_connections=self.max_keepalive_connections,
            ),
            "transport": self.transport,
        }


def normalize_host(host: str) -> str:
    """Extract the host from a URL string; a raw hostname is returned as-is."""
    parts = urlsplit(host)
    if parts.scheme and parts.netloc and parts.hostname:
        return parts.hostname
    return host


@dataclass
class Configuration:
    """Configuration for an ``HTTPClient``.

    Attributes:
        host: Host used for host-relative paths; the host component is
            extracted when a full URL is given
        port: Port for host-relative paths; determined by the scheme if unset
        is_insecure: Use ``http`` instead of ``https`` (default: False)
        transport_config: Transport settings
        decoder: JSON decoder; ISO 8601 dates by default
        encoder: JSON encoder; ISO 8601 dates by default
        delegate: Client delegate; ``DefaultClientDelegate`` when unset
        transport_observer: Observer of transport-level exchange events
        load_cached_response_on_error: On failure, return any previously
            stored successful response regardless of age (default: False)

    Notes:
        A client copies its configuration on construction; changing the
        configuration afterwards does not affect existing clients.
    """

    host: str
    port: int | None = None
    is_insecure: bool = False
    transport_config: TransportConfig = field(default_factory=TransportConfig)
    decoder: JSONDecoder | None = None
    encoder: JSONEncoder | None = None
    delegate: HTTPClientDelegate | None = None
    transport_observer: TransportObserver | None = None
    load_cached_response_on_error: bool = False

    def __post_init__(self) -> None:
        self.host = normalize_host(self.host)
