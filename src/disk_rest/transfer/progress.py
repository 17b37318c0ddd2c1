"""Progress reporting, cancellation and the byte sources/sinks of a transfer."""

from __future__ import annotations

import asyncio
import inspect
import os
from collections.abc import AsyncIterator, Awaitable, Callable, Iterator
from typing import IO, Any, Protocol, cast, runtime_checkable

from .._http.iter_coroutine import iter_coroutine
from ..errors import DiskRequestAbortedError


class _Cancel:
    def __repr__(self) -> str:
        return "CANCEL"


CANCEL: Any = _Cancel()
"""Returned from a progress callback to stop the transfer."""


@runtime_checkable
class ProgressListener(Protocol):
    def update_progress(self, loaded: int, total: int | None) -> Any:  # pragma: no cover
        ...

    def has_cancelled(self) -> bool:  # pragma: no cover
        ...


ProgressCallback = Callable[[int], Any]
ProgressArg = ProgressListener | ProgressCallback | None


class CallbackProgressListener:
    """Adapt a one-argument callback to :class:`ProgressListener`.

    The callback receives the cumulative byte count. Returning ``CANCEL``
    (directly, or from an awaited coroutine) stops the transfer.
    """

    def __init__(
        self,
        callback: ProgressCallback,
        should_cancel: Callable[[], bool] | None = None,
    ) -> None:
        self._callback = callback
        self._should_cancel = should_cancel
        self._cancelled = False

    def update_progress(self, loaded: int, total: int | None) -> Any:
        result = self._callback(loaded)
        if inspect.isawaitable(result):
            return self._finish(cast(Awaitable[Any], result))
        self._record(result)
        return None

    async def _finish(self, pending: Awaitable[Any]) -> None:
        self._record(await pending)

    def _record(self, result: Any) -> None:
        if result is CANCEL:
            self._cancelled = True

    def has_cancelled(self) -> bool:
        if self._should_cancel is not None and self._should_cancel():
            return True
        return self._cancelled


def as_progress_listener(progress: ProgressArg) -> ProgressListener | None:
    if progress is None or isinstance(progress, ProgressListener):
        return progress
    return CallbackProgressListener(progress)


async def emit_progress(
    listener: ProgressListener | None,
    loaded: int,
    total: int | None,
    *,
    await_callback: bool,
) -> None:
    """Report progress, then raise ``DiskRequestAbortedError`` if the listener cancelled."""
    if listener is None:
        return

    result = listener.update_progress(loaded, total)
    if await_callback and inspect.isawaitable(result):
        await cast(Awaitable[None], result)
    elif inspect.iscoroutine(result):
        result.close()
    if listener.has_cancelled():
        raise DiskRequestAbortedError(f"transfer cancelled after {loaded} bytes")


class FileBodyWithProgress:
    """Stream a file from ``offset`` to EOF, reporting absolute progress.

    Progress is reported after each chunk has been handed to the transport,
    counted from the start of the file. The listener is checked for
    cancellation at the same point, so no further bytes are read once it
    asks to stop.
    """

    def __init__(
        self,
        file: IO[bytes],
        *,
        offset: int,
        total: int,
        listener: ProgressListener | None,
        chunk_size: int,
    ) -> None:
        self._file = file
        self._offset = offset
        self._total = total
        self._listener = listener
        self._chunk_size = chunk_size
        self.sent = 0

    @property
    def remaining(self) -> int:
        return self._total - self._offset

    def _read_chunk(self) -> bytes:
        to_read = min(self._chunk_size, self.remaining - self.sent)
        if to_read <= 0:
            return b""
        return self._file.read(to_read)

    def __iter__(self) -> Iterator[bytes]:
        self._file.seek(self._offset)
        while True:
            chunk = self._read_chunk()
            if not chunk:
                break
            yield chunk
            self.sent += len(chunk)
            iter_coroutine(
                emit_progress(
                    self._listener,
                    self._offset + self.sent,
                    self._total,
                    await_callback=False,
                )
            )

    async def __aiter__(self) -> AsyncIterator[bytes]:
        self._file.seek(self._offset)
        while True:
            chunk = self._read_chunk()
            if not chunk:
                break
            yield chunk
            self.sent += len(chunk)
            await emit_progress(
                self._listener,
                self._offset + self.sent,
                self._total,
                await_callback=True,
            )
            await asyncio.sleep(0)


class SupportsWrite(Protocol):
    def write(self, data: bytes, /) -> Any:  # pragma: no cover - Protocol
        ...


class _ConsumerWriter:
    def __init__(self, consumer: Callable[[bytes], Any]) -> None:
        self._consumer = consumer

    def write(self, data: bytes) -> None:
        self._consumer(data)


class DownloadSink:
    """Where a download goes: a local path or a caller-provided stream.

    Use :meth:`to_path` or :meth:`to_stream`; the engine opens the sink only
    once the server has answered with a success status.
    """

    def __init__(
        self,
        opener: Callable[[], SupportsWrite],
        *,
        owns_handle: bool,
        progress: ProgressArg = None,
        description: str = "<stream>",
    ) -> None:
        self._opener = opener
        self._owns_handle = owns_handle
        self.listener = as_progress_listener(progress)
        self.description = description

    @classmethod
    def to_path(
        cls,
        path: str | os.PathLike,
        progress: ProgressArg = None,
        *,
        create_parents: bool = False,
    ) -> DownloadSink:
        dst = os.fspath(path)

        def opener() -> SupportsWrite:
            if create_parents:
                os.makedirs(os.path.dirname(dst) or ".", exist_ok=True)
            return open(dst, "wb")

        return cls(opener, owns_handle=True, progress=progress, description=dst)

    @classmethod
    def to_stream(
        cls,
        stream: SupportsWrite | Callable[[bytes], Any],
        progress: ProgressArg = None,
    ) -> DownloadSink:
        """Send chunks to a writable object or to a one-argument consumer."""
        writer: SupportsWrite
        if hasattr(stream, "write"):
            writer = cast(SupportsWrite, stream)
        else:
            writer = _ConsumerWriter(cast(Callable[[bytes], Any], stream))
        return cls(lambda: writer, owns_handle=False, progress=progress)

    def open(self) -> SupportsWrite:
        return self._opener()

    def close(self, handle: SupportsWrite) -> None:
        if self._owns_handle:
            cast(IO[bytes], handle).close()
        else:
            flush = getattr(handle, "flush", None)
            if flush is not None:
                flush()


__all__ = [
    "CANCEL",
    "ProgressListener",
    "ProgressCallback",
    "ProgressArg",
    "CallbackProgressListener",
    "as_progress_listener",
    "emit_progress",
    "FileBodyWithProgress",
    "SupportsWrite",
    "DownloadSink",
]
