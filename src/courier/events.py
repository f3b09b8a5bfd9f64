"""Observation of transport-level exchange events.

The ``DataLoader`` reports the lifecycle of every exchange through the
``TransportObserver`` hooks. A client may be configured with one external
observer (for logging, tracing, progress reporting); the
``TransportEventDispatcher`` then forwards each event to the loader's own
exchange tracker first and to the external observer second.

Example:
    Counting received bytes::

        class ByteCounter(TransportObserver):
            def __init__(self):
                self.total = 0

            def did_receive_data(self, request, chunk):
                self.total += len(chunk)

        client = HTTPClient(Configuration(host="api.example.com", transport_observer=ByteCounter()))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx

    from .metrics import TaskMetrics


class TransportObserver:
    """Receives exchange events. Every hook is a no-op by default."""

    def did_send_request(self, request: httpx.Request) -> None:
        pass

    def did_receive_response(self, request: httpx.Request, response: httpx.Response) -> None:
        pass

    def did_receive_data(self, request: httpx.Request, chunk: bytes) -> None:
        pass

    def did_finish_collecting(self, request: httpx.Request, metrics: TaskMetrics) -> None:
        pass

    def did_complete(self, request: httpx.Request, error: BaseException | None) -> None:
        pass


class TransportEventDispatcher(TransportObserver):
    """Forwards every event to an exchange tracker and then to an observer."""

    def __init__(self, tracker: TransportObserver, observer: TransportObserver):
        self.tracker = tracker
        self.observer = observer

    @classmethod
    def make(cls, tracker: TransportObserver, observer: TransportObserver | None) -> TransportObserver:
        """Return the tracker itself when there is nobody else to notify."""
        if observer is None:
            return tracker
        return cls(tracker, observer)

    def did_send_request(self, request: httpx.Request) -> None:
        self.tracker.did_send_request(request)
        self.observer.did_send_request(request)

    def did_receive_response(self, request: httpx.Request, response: httpx.Response) -> None:
        self.tracker.did_receive_response(request, response)
        self.observer.did_receive_response(request, response)

    def did_receive_data(self, request: httpx.Request, chunk: bytes) -> None:
        self.tracker.did_receive_data(request, chunk)
        self.observer.did_receive_data(request, chunk)

    def did_finish_collecting(self, request: httpx.Request, metrics: TaskMetrics) -> None:
        self.tracker.did_finish_collecting(request, metrics)
        self.observer.did_finish_collecting(request, metrics)

    def did_complete(self, request: httpx.Request, error: BaseException | None) -> None:
        self.tracker.did_complete(request, error)
        self.observer.did_complete(request, error)
