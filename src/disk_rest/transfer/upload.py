"""Uploads of local files to a pre-obtained upload link, with optional resume."""

from __future__ import annotations

import os

import httpx

from .._http.transport import BaseTransport, RawBody
from ..errors import DiskError, DiskWrongMethodError
from ..models import Link
from ._helpers import debug, get_chunk_size, require_method, translate_errors
from .hashing import ContentDigest, digest_file
from .progress import (
    FileBodyWithProgress,
    ProgressArg,
    ProgressListener,
    as_progress_listener,
    emit_progress,
)
from .status import (
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
    build_http_error,
    classify_status,
    parse_api_error,
)

# Statuses with which the server says it holds nothing usable for this digest.
_NO_PRIOR_UPLOAD = {404, 409, 412}

FileSnapshot = tuple[int, int]


def _snapshot(stat: os.stat_result) -> FileSnapshot:
    return stat.st_size, stat.st_mtime_ns


def content_range(offset: int, size: int) -> str:
    if offset >= size:
        return f"bytes */{size}"
    return f"bytes {offset}-{size - 1}/{size}"


def _digest_mismatch(headers: httpx.Headers, digest: ContentDigest) -> bool:
    remote_sha256 = headers.get("sha256")
    if remote_sha256 and remote_sha256.strip().lower() != digest.sha256:
        return True
    remote_md5 = headers.get("etag")
    if remote_md5 and remote_md5.strip().strip('"').lower() != digest.md5:
        return True
    return False


class UploadEngine:
    """PUT a local file to an upload link.

    The engine is stateless between calls; run it over a ``BlockingTransport``
    (via ``iter_coroutine``) or an ``AsyncTransport``.
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

    async def upload(
        self,
        link: Link,
        local_file: str | os.PathLike,
        *,
        resume: bool = False,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        """Upload ``local_file`` to ``link``.

        Args:
            link: Upload link; its method must be PUT.
            local_file: Path of the file to upload.
            resume: Ask the server how many bytes it already holds for this
                content and send only the rest.
            progress: Listener or one-argument callback; receives the number of
                bytes counted from the start of the file.

        Returns:
            ``TransferSuccess`` on a 2xx final status, otherwise a
            ``TransferFailure`` with the classified error.
        """
        try:
            require_method(link, "PUT")
        except DiskWrongMethodError as exc:
            return TransferFailure(exc)

        listener = as_progress_listener(progress)
        path = os.fspath(local_file)
        try:
            with translate_errors(f"cannot read {path!r}"):
                snapshot = _snapshot(os.stat(path))
            offset = 0
            if resume:
                digest = digest_file(path, self._chunk_size)
                offset = await self.get_uploaded_size(link, digest)
                debug(f"head: startOffset={offset}")
            return await self._put(link, path, offset, snapshot, listener)
        except DiskError as exc:
            debug(f"upload of {path!r} failed", repr(exc))
            return TransferFailure(exc)

    async def get_uploaded_size(self, link: Link, digest: ContentDigest) -> int:
        """Ask the server for the number of bytes already held for ``digest``.

        Any answer other than a consistent 200 means "start from zero".
        """
        try:
            response = await self._transport.send(
                "HEAD",
                link.href,
                headers=digest.as_headers(),
                timeout=self._timeout,
            )
        except httpx.RequestError as exc:
            debug("resume check failed, uploading from the start", str(exc))
            return 0

        status = response.status_code
        if status != 200:
            if status not in _NO_PRIOR_UPLOAD:
                debug(f"resume check returned {status}, uploading from the start")
            return 0
        if _digest_mismatch(response.headers, digest):
            debug("resume check reported a different digest, uploading from the start")
            return 0
        try:
            offset = int(response.headers.get("content-length", "0"))
        except ValueError:
            return 0
        if offset < 0 or offset > digest.size:
            debug(f"resume check reported {offset} bytes for a {digest.size} byte file")
            return 0
        return offset

    async def _put(
        self,
        link: Link,
        path: str,
        offset: int,
        snapshot: FileSnapshot,
        listener: ProgressListener | None,
    ) -> TransferOutcome:
        with translate_errors(f"upload of {path!r} failed"), open(path, "rb") as f:
            stat = os.fstat(f.fileno())
            if offset and _snapshot(stat) != snapshot:
                debug(f"{path!r} changed after hashing, uploading from the start")
                offset = 0
            size = stat.st_size

            body = FileBodyWithProgress(
                f,
                offset=offset,
                total=size,
                listener=listener,
                chunk_size=self._chunk_size,
            )
            headers = {
                "content-type": "application/octet-stream",
                "content-length": str(body.remaining),
            }
            if offset:
                headers["content-range"] = content_range(offset, size)

            await emit_progress(listener, offset, size, await_callback=self._transport.is_async)
            content = body.__aiter__() if self._transport.is_async else iter(body)
            response = await self._transport.send(
                "PUT",
                link.href,
                headers=headers,
                body=RawBody(content),
                timeout=self._timeout,
            )

        if classify_status(response.status_code) != "success":
            raise build_http_error(
                response.status_code,
                parse_api_error(response.content),
                response.headers,
            )
        return TransferSuccess(
            bytes_transferred=body.sent,
            status_code=response.status_code,
            content_length=size,
            etag=response.headers.get("etag"),
        )


__all__ = ["UploadEngine", "content_range"]
