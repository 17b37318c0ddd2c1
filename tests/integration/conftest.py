"""Fixtures for engine tests driven by in-process httpx mock transports."""

from collections.abc import AsyncIterator, Callable, Iterator

import httpx
import pytest
import pytest_asyncio

from disk_rest._http import AsyncTransport, BlockingTransport

Handler = Callable[[httpx.Request], httpx.Response]


class RecordingHandler:
    """Wrap a request handler and keep every request it received, body included."""

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def methods(self) -> list[str]:
        return [request.method for request in self.requests]

    def find(self, method: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.method == method]


SyncFactory = Callable[[Handler], tuple[BlockingTransport, RecordingHandler]]
AsyncFactory = Callable[[Handler], tuple[AsyncTransport, RecordingHandler]]


@pytest.fixture
def sync_transport_factory() -> Iterator[SyncFactory]:
    transports: list[BlockingTransport] = []

    def _factory(handler: Handler) -> tuple[BlockingTransport, RecordingHandler]:
        recorder = RecordingHandler(handler)
        transport = BlockingTransport(httpx.Client(transport=httpx.MockTransport(recorder)))
        transports.append(transport)
        return transport, recorder

    yield _factory
    for transport in transports:
        transport.close()


@pytest_asyncio.fixture
async def async_transport_factory() -> AsyncIterator[AsyncFactory]:
    transports: list[AsyncTransport] = []

    def _factory(handler: Handler) -> tuple[AsyncTransport, RecordingHandler]:
        recorder = RecordingHandler(handler)
        transport = AsyncTransport(httpx.AsyncClient(transport=httpx.MockTransport(recorder)))
        transports.append(transport)
        return transport, recorder

    yield _factory
    for transport in transports:
        await transport.aclose()
