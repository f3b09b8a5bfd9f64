"""Response model for the courier client."""

from __future__ import annotations

from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

if TYPE_CHECKING:
    import httpx

    from .metrics import TaskMetrics

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class HTTPResponse(Generic[T]):
    """A response with a decoded value and its associated metadata.

    Attributes:
        value: The decoded response value
        data: Original response body
        request: The wire-level request that was sent, after delegate mutation
        response: The wire-level response metadata
        metrics: Timing metrics, or ``None`` when the response was served
            from the cache instead of a live exchange
    """

    value: T
    data: bytes
    request: httpx.Request
    response: httpx.Response
    metrics: TaskMetrics | None = None

    @property
    def status(self) -> HTTPStatus | None:
        try:
            return HTTPStatus(self.response.status_code)
        except ValueError:
            return None

    @property
    def status_code(self) -> int | None:
        status = self.status
        return status.value if status is not None else None

    def map(self, transform: Callable[[T], U]) -> HTTPResponse[U]:
        """Return a copy whose value is ``transform(value)``, keeping the metadata."""
        return replace(self, value=transform(self.value))
