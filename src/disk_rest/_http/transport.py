"""HTTP transport implementations for sync and async clients."""

from __future__ import annotations

import abc
from collections.abc import AsyncIterable, AsyncIterator, Iterable
from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True, slots=True)
class JSONBody:
    """JSON request body - automatically sets Content-Type to application/json."""

    data: Any


@dataclass(frozen=True, slots=True)
class BytesBody:
    """Raw bytes request body with explicit content type."""

    data: bytes
    content_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class RawBody:
    """Request body passed to httpx unchanged (bytes, iterable or async iterable)."""

    content: bytes | Iterable[bytes] | AsyncIterable[bytes]


RequestBody = JSONBody | BytesBody | RawBody | None


def _unpack_body(
    body: RequestBody, headers: dict[str, str]
) -> tuple[Any | None, bytes | Iterable[bytes] | AsyncIterable[bytes] | None]:
    json_data: Any | None = None
    raw_content: bytes | Iterable[bytes] | AsyncIterable[bytes] | None = None
    if isinstance(body, JSONBody):
        json_data = body.data
    elif isinstance(body, BytesBody):
        raw_content = body.data
        headers["content-type"] = body.content_type
    elif isinstance(body, RawBody):
        raw_content = body.content
    return json_data, raw_content


def _request_kwargs(
    *,
    params: dict[str, Any] | None,
    body: RequestBody,
    headers: dict[str, str] | None,
    timeout: float | None,
) -> dict[str, Any]:
    request_headers = dict(headers or {})
    json_data, raw_content = _unpack_body(body, request_headers)
    return {
        "params": params or None,
        "json": json_data,
        "content": raw_content,
        "headers": request_headers,
        "timeout": httpx.Timeout(timeout) if timeout is not None else httpx.USE_CLIENT_DEFAULT,
    }


class BaseTransport(abc.ABC):
    """Abstract base class for HTTP transports.

    A transport performs one request and hands back the ``httpx.Response``:
    status code, headers and a body that can be streamed with
    :meth:`iter_bytes` when the request was sent with ``stream=True``.
    """

    @abc.abstractmethod
    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        stream: bool = False,
        follow_redirects: bool | None = None,
    ) -> httpx.Response:
        """Send an HTTP request and return the response."""
        ...

    @abc.abstractmethod
    def iter_bytes(self, response: httpx.Response, chunk_size: int) -> AsyncIterator[bytes]:
        """Iterate a streamed response body in chunks of at most ``chunk_size``."""
        ...

    @abc.abstractmethod
    async def read(self, response: httpx.Response) -> bytes:
        """Read the remaining body of a streamed response."""
        ...

    @abc.abstractmethod
    async def close_response(self, response: httpx.Response) -> None:
        """Release a streamed response."""
        ...

    @property
    @abc.abstractmethod
    def is_async(self) -> bool:
        """Whether request bodies and callbacks may be awaited."""
        ...


class BlockingTransport(BaseTransport):
    """
    Synchronous HTTP transport using httpx.Client.

    Methods are declared async but don't actually await anything,
    allowing them to be executed via iter_coroutine().
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    @property
    def client(self) -> httpx.Client:
        return self._client

    @property
    def is_async(self) -> bool:
        return False

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        stream: bool = False,
        follow_redirects: bool | None = None,
    ) -> httpx.Response:
        """Send a synchronous HTTP request (wrapped as async for iter_coroutine)."""
        request = self._client.build_request(
            method,
            path.lstrip("/"),
            **_request_kwargs(params=params, body=body, headers=headers, timeout=timeout),
        )
        if follow_redirects is None:
            return self._client.send(request, stream=stream)
        return self._client.send(request, stream=stream, follow_redirects=follow_redirects)

    def iter_bytes(self, response: httpx.Response, chunk_size: int) -> AsyncIterator[bytes]:
        async def _iterate() -> AsyncIterator[bytes]:
            for chunk in response.iter_bytes(chunk_size):
                yield chunk

        return _iterate()

    async def read(self, response: httpx.Response) -> bytes:
        return response.read()

    async def close_response(self, response: httpx.Response) -> None:
        response.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()


class AsyncTransport(BaseTransport):
    """Asynchronous HTTP transport using httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    @property
    def is_async(self) -> bool:
        return True

    async def send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: RequestBody = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        stream: bool = False,
        follow_redirects: bool | None = None,
    ) -> httpx.Response:
        """Send an asynchronous HTTP request."""
        request = self._client.build_request(
            method,
            path.lstrip("/"),
            **_request_kwargs(params=params, body=body, headers=headers, timeout=timeout),
        )
        if follow_redirects is None:
            return await self._client.send(request, stream=stream)
        return await self._client.send(request, stream=stream, follow_redirects=follow_redirects)

    def iter_bytes(self, response: httpx.Response, chunk_size: int) -> AsyncIterator[bytes]:
        async def _iterate() -> AsyncIterator[bytes]:
            async for chunk in response.aiter_bytes(chunk_size):
                yield chunk

        return _iterate()

    async def read(self, response: httpx.Response) -> bytes:
        return await response.aread()

    async def close_response(self, response: httpx.Response) -> None:
        await response.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()


__all__ = [
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "RawBody",
    "RequestBody",
]
