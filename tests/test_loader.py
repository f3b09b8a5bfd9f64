"""Tests for the transport adapter and exchange events."""

import asyncio
from http import HTTPStatus

import httpx
import pytest
from swapi import TEST_URL

from courier import (
    DataLoader,
    MockTransport,
    RequestCancelledError,
    TransportError,
    TransportEventDispatcher,
    TransportObserver,
    mock_response,
)


class RecordingObserver(TransportObserver):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def did_send_request(self, request):
        self.log.append((self.name, "send"))

    def did_complete(self, request, error):
        self.log.append((self.name, "complete"))


@pytest.fixture
def session(transport):
    return httpx.AsyncClient(transport=transport)


class TestDataLoader:
    """Test DataLoader exchanges."""

    @pytest.mark.asyncio
    async def test_data(self, transport, session, ok_handler, mock_data):
        transport.request_handler = ok_handler
        loader = DataLoader()

        data, response, metrics = await loader.data(httpx.Request("GET", TEST_URL), session)

        assert data == mock_data
        assert response.status_code == 200
        assert response.http_version == "HTTP/2"
        assert metrics.bytes_received == len(mock_data)
        assert metrics.transactions[0].network_protocol == "HTTP/2"
        assert metrics.fetch_start <= metrics.response_start <= metrics.response_end
        assert metrics.duration.total_seconds() >= 0
        assert loader.pending_exchange_count == 0

    @pytest.mark.asyncio
    async def test_streamed_chunks_are_accumulated(self, mock_data):
        async def chunks():
            for start in range(0, len(mock_data), 100):
                yield mock_data[start : start + 100]

        class StreamingTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                return httpx.Response(200, content=chunks(), request=request)

        observed = []

        class ChunkObserver(TransportObserver):
            def did_receive_data(self, request, chunk):
                observed.append(len(chunk))

        loader = DataLoader(observer=ChunkObserver())
        async with httpx.AsyncClient(transport=StreamingTransport()) as streaming:
            data, _, metrics = await loader.data(httpx.Request("GET", TEST_URL), streaming)

        assert data == mock_data
        assert len(observed) == 8
        assert metrics.bytes_received == 764

    @pytest.mark.asyncio
    async def test_transport_error(self, session):
        loader = DataLoader()

        with pytest.raises(TransportError) as exc_info:
            await loader.data(httpx.Request("GET", TEST_URL), session)

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert exc_info.value.__cause__ is exc_info.value.cause
        assert exc_info.value.url == TEST_URL
        assert loader.pending_exchange_count == 0

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self, transport, session):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        transport.request_handler = handler
        loader = DataLoader()

        with pytest.raises(TransportError) as exc_info:
            await loader.data(httpx.Request("GET", TEST_URL), session)

        assert isinstance(exc_info.value.cause, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_non_2xx_is_not_an_error(self, transport, session):
        transport.request_handler = lambda request: (mock_response(TEST_URL, HTTPStatus.NOT_FOUND), b"missing")
        loader = DataLoader()

        data, response, _ = await loader.data(httpx.Request("GET", TEST_URL), session)

        assert data == b"missing"
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_cancel(self, transport, session, ok_handler):
        transport.request_handler = ok_handler
        transport.delay = 60
        loader = DataLoader()
        request = httpx.Request("GET", TEST_URL)
        errors = []

        async def load():
            try:
                return await loader.data(request, session)
            except asyncio.CancelledError as e:
                errors.append(e.__cause__)
                raise

        task = asyncio.create_task(load())
        await asyncio.sleep(0.1)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert isinstance(errors[0], RequestCancelledError)
        assert errors[0].request is request
        assert loader.pending_exchange_count == 0

    @pytest.mark.asyncio
    async def test_cancel_immediately(self, transport, session, ok_handler):
        transport.request_handler = ok_handler
        loader = DataLoader()

        task = asyncio.create_task(loader.data(httpx.Request("GET", TEST_URL), session))
        await asyncio.sleep(0)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert loader.pending_exchange_count == 0

    @pytest.mark.asyncio
    async def test_observer_raising_on_send(self, transport, session, ok_handler):
        class ExplodingObserver(TransportObserver):
            def did_send_request(self, request):
                raise RuntimeError("observer failed")

        transport.request_handler = ok_handler
        loader = DataLoader(observer=ExplodingObserver())

        with pytest.raises(RuntimeError, match="observer failed"):
            await loader.data(httpx.Request("GET", TEST_URL), session)

        assert loader.pending_exchange_count == 0
        assert transport.call_count == 0

    @pytest.mark.asyncio
    async def test_request_already_in_flight(self, transport, session, ok_handler):
        transport.request_handler = ok_handler
        transport.delay = 60
        loader = DataLoader()
        request = httpx.Request("GET", TEST_URL)

        task = asyncio.create_task(loader.data(request, session))
        await asyncio.sleep(0.1)

        with pytest.raises(RuntimeError, match="already in flight"):
            await loader.data(request, session)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_independent_exchanges(self):
        def handler(request):
            return mock_response(request.url, HTTPStatus.OK), request.url.path.encode()

        transport = MockTransport(handler, delay=0.01)
        loader = DataLoader()

        async with httpx.AsyncClient(transport=transport) as client:
            results = await asyncio.gather(
                *(loader.data(httpx.Request("GET", f"{TEST_URL}/{i}"), client) for i in range(5))
            )

        assert [data for data, _, _ in results] == [f"/api/people/13/{i}".encode() for i in range(5)]
        assert loader.pending_exchange_count == 0


class TestTransportEventDispatcher:
    def test_make_without_observer_returns_tracker(self):
        tracker = TransportObserver()

        assert TransportEventDispatcher.make(tracker, None) is tracker

    def test_tracker_is_notified_first(self):
        log = []
        dispatcher = TransportEventDispatcher.make(RecordingObserver("tracker", log), RecordingObserver("observer", log))
        request = httpx.Request("GET", TEST_URL)

        dispatcher.did_send_request(request)
        dispatcher.did_receive_data(request, b"chunk")
        dispatcher.did_complete(request, None)

        assert log == [
            ("tracker", "send"),
            ("observer", "send"),
            ("tracker", "complete"),
            ("observer", "complete"),
        ]
