"""Downloads from a download link into a local file or a caller stream."""

from __future__ import annotations

import httpx

from .._http.transport import BaseTransport
from ..errors import DiskError, DiskWrongMethodError
from ..models import Link
from ._helpers import debug, get_chunk_size, require_method, translate_errors
from .progress import DownloadSink, emit_progress
from .status import (
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
    build_http_error,
    classify_status,
    parse_api_error,
)


def _content_length(headers: httpx.Headers) -> int | None:
    value = headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class DownloadEngine:
    """GET a download link and copy the body into a :class:`DownloadSink`.

    The sink is opened (a file is created or truncated) only after a 2xx
    status. A failed or cancelled transfer leaves whatever was written in
    place; removing partial files is up to the caller.
    """

    def __init__(
        self,
        transport: BaseTransport,
        *,
        chunk_size: int | None = None,
        timeout: float | None = None,
    ) -> None:
        self._transport = transport
        self._chunk_size = get_chunk_size(chunk_size)
        self._timeout = timeout

    async def download(self, link: Link, sink: DownloadSink) -> TransferOutcome:
        try:
            require_method(link, "GET")
        except DiskWrongMethodError as exc:
            return TransferFailure(exc)

        try:
            return await self._download(link, sink)
        except DiskError as exc:
            debug(f"download to {sink.description} failed", repr(exc))
            return TransferFailure(exc)

    async def _download(self, link: Link, sink: DownloadSink) -> TransferOutcome:
        with translate_errors("download request failed"):
            response = await self._transport.send(
                "GET",
                link.href,
                timeout=self._timeout,
                stream=True,
                follow_redirects=True,
            )

        try:
            if classify_status(response.status_code) != "success":
                raise build_http_error(
                    response.status_code,
                    parse_api_error(await self._read_error_body(response)),
                    response.headers,
                )
            return await self._copy_body(response, sink)
        finally:
            await self._transport.close_response(response)

    async def _read_error_body(self, response: httpx.Response) -> bytes:
        try:
            return await self._transport.read(response)
        except httpx.RequestError as exc:
            debug(f"could not read error body of a {response.status_code} response", str(exc))
            return b""

    async def _copy_body(self, response: httpx.Response, sink: DownloadSink) -> TransferOutcome:
        total = _content_length(response.headers)
        is_async = self._transport.is_async
        loaded = 0

        with translate_errors(f"cannot open {sink.description}"):
            handle = sink.open()
        try:
            with translate_errors(f"download to {sink.description} failed"):
                await emit_progress(sink.listener, 0, total, await_callback=is_async)
                async for chunk in self._transport.iter_bytes(response, self._chunk_size):
                    if not chunk:
                        continue
                    handle.write(chunk)
                    loaded += len(chunk)
                    await emit_progress(sink.listener, loaded, total, await_callback=is_async)
        finally:
            with translate_errors(f"cannot close {sink.description}"):
                sink.close(handle)

        return TransferSuccess(
            bytes_transferred=loaded,
            status_code=response.status_code,
            content_length=total,
            content_type=response.headers.get("content-type"),
            etag=response.headers.get("etag"),
        )


__all__ = ["DownloadEngine"]
