"""Timing metrics collected for a single transport exchange."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


@dataclass(frozen=True)
class TransactionMetrics:
    """Metrics for one request/response transaction within an exchange.

    An exchange that follows redirects has one transaction per hop.
    """

    request: httpx.Request
    response: httpx.Response
    network_protocol: str | None = None
    elapsed: timedelta | None = None


@dataclass(frozen=True)
class TaskMetrics:
    """Metrics for a complete exchange, from dispatch to the last body byte."""

    fetch_start: datetime
    response_start: datetime | None
    response_end: datetime
    bytes_received: int
    transactions: list[TransactionMetrics] = field(default_factory=list)

    @property
    def duration(self) -> timedelta:
        return self.response_end - self.fetch_start

    @property
    def redirect_count(self) -> int:
        return max(len(self.transactions) - 1, 0)

    @classmethod
    def collect(
        cls,
        response: httpx.Response,
        fetch_start: datetime,
        response_start: datetime | None,
        response_end: datetime,
        bytes_received: int,
    ) -> TaskMetrics:
        transactions = [
            TransactionMetrics(
                request=hop.request,
                response=hop,
                network_protocol=hop.http_version,
                elapsed=_elapsed(hop),
            )
            for hop in [*response.history, response]
        ]
        return cls(
            fetch_start=fetch_start,
            response_start=response_start,
            response_end=response_end,
            bytes_received=bytes_received,
            transactions=transactions,
        )


def _elapsed(response: httpx.Response) -> timedelta | None:
    try:
        return response.elapsed
    except RuntimeError:
        # Only available once the response is closed
        return None
