"""Response cache boundary used for cache-on-error fallback."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx


@dataclass(frozen=True)
class CachedResponse:
    """A stored response and its body."""

    response: httpx.Response
    data: bytes
    stored_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def cache_key(request: httpx.Request) -> tuple[str, str]:
    return request.method.upper(), str(request.url)


class ResponseCache(ABC):
    """Keyed lookup and storage of responses for wire-level requests."""

    @abstractmethod
    def get(self, request: httpx.Request) -> CachedResponse | None:
        """Return the cached response for ``request``, or ``None``."""
        ...

    @abstractmethod
    def store(self, cached: CachedResponse, request: httpx.Request) -> None:
        """Store ``cached`` as the response for ``request``."""
        ...

    @abstractmethod
    def remove(self, request: httpx.Request) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class InMemoryResponseCache(ResponseCache):
    """Process-local cache keyed by method and URL, bounded by entry count."""

    def __init__(self, max_entries: int = 512):
        self.max_entries = max_entries
        self._entries: dict[tuple[str, str], CachedResponse] = {}

    def get(self, request: httpx.Request) -> CachedResponse | None:
        return self._entries.get(cache_key(request))

    def store(self, cached: CachedResponse, request: httpx.Request) -> None:
        key = cache_key(request)
        self._entries.pop(key, None)
        self._entries[key] = cached
        while len(self._entries) > self.max_entries:
            # Oldest entry first
            del self._entries[next(iter(self._entries))]

    def remove(self, request: httpx.Request) -> None:
        self._entries.pop(cache_key(request), None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
