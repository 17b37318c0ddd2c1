"""Integration tests for the upload engine over mocked HTTP transports.

Tests both sync and async variants to ensure API parity.
"""

import hashlib

import httpx
import pytest

from disk_rest import CANCEL, Link
from disk_rest._http import iter_coroutine
from disk_rest.errors import (
    DiskFileTooBigError,
    DiskInsufficientStorageError,
    DiskLocalIOError,
    DiskRequestAbortedError,
    DiskTransportError,
    DiskWrongMethodError,
)
from disk_rest.transfer import TransferFailure, TransferSuccess, UploadEngine
from disk_rest.transfer.hashing import digest_file

CHUNK = 1024


def resume_server(held: int, *, head_status: int = 200, head_headers=None, on_head=None):
    """Server that answers the resume HEAD with ``held`` bytes and accepts the PUT."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            if on_head is not None:
                on_head()
            headers = {"content-length": str(held), **(head_headers or {})}
            return httpx.Response(head_status, headers=headers)
        assert request.method == "PUT"
        return httpx.Response(201, headers={"etag": '"stored"'})

    return handler


def accept_put(request: httpx.Request) -> httpx.Response:
    return httpx.Response(201)


class TestUploadFull:
    """Uploads without resume send the whole file."""

    def test_upload_sync(self, sync_transport_factory, make_file, payload, upload_link):
        transport, recorder = sync_transport_factory(accept_put)
        path = make_file(payload)
        events: list[int] = []

        engine = UploadEngine(transport, chunk_size=CHUNK)
        outcome = iter_coroutine(engine.upload(upload_link, path, progress=events.append))

        assert isinstance(outcome, TransferSuccess)
        assert outcome.ok
        assert outcome.status_code == 201
        assert outcome.bytes_transferred == len(payload)
        assert recorder.methods() == ["PUT"]

        request = recorder.requests[0]
        assert str(request.url) == upload_link.href
        assert request.content == payload
        assert request.headers["content-length"] == str(len(payload))
        assert "content-range" not in request.headers
        assert events == [0, 1024, 2048, 3072, 4096, 5000]

    @pytest.mark.asyncio
    async def test_upload_async(self, async_transport_factory, make_file, payload, upload_link):
        transport, recorder = async_transport_factory(accept_put)
        path = make_file(payload)
        events: list[int] = []

        engine = UploadEngine(transport, chunk_size=CHUNK)
        outcome = await engine.upload(upload_link, path, progress=events.append)

        assert isinstance(outcome, TransferSuccess)
        assert outcome.bytes_transferred == len(payload)
        assert recorder.requests[0].content == payload
        assert events[0] == 0
        assert events[-1] == len(payload)

    def test_upload_empty_file(self, sync_transport_factory, make_file, upload_link):
        transport, recorder = sync_transport_factory(accept_put)
        path = make_file(b"", name="empty.bin")
        events: list[int] = []

        outcome = iter_coroutine(
            UploadEngine(transport).upload(upload_link, path, progress=events.append)
        )

        assert outcome.ok
        assert outcome.bytes_transferred == 0
        assert recorder.requests[0].content == b""
        assert recorder.requests[0].headers["content-length"] == "0"
        assert events == [0]

    def test_upload_without_progress_listener(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = sync_transport_factory(accept_put)
        path = make_file(payload)

        engine = UploadEngine(transport, chunk_size=CHUNK)
        outcome = iter_coroutine(engine.upload(upload_link, path))

        assert outcome.ok
        assert recorder.requests[0].content == payload


class TestUploadResume:
    """Resumed uploads send only the bytes the server does not hold yet."""

    @pytest.mark.parametrize("held", [0, 1000, 2500, 4999, 5000])
    def test_resume_sync(self, sync_transport_factory, make_file, payload, upload_link, held):
        transport, recorder = sync_transport_factory(resume_server(held))
        path = make_file(payload)
        events: list[int] = []

        engine = UploadEngine(transport, chunk_size=CHUNK)
        outcome = iter_coroutine(
            engine.upload(upload_link, path, resume=True, progress=events.append)
        )

        assert isinstance(outcome, TransferSuccess)
        assert outcome.bytes_transferred == len(payload) - held
        assert outcome.content_length == len(payload)
        assert outcome.etag == '"stored"'
        assert recorder.methods() == ["HEAD", "PUT"]

        put = recorder.find("PUT")[0]
        assert put.content == payload[held:]
        assert put.headers["content-length"] == str(len(payload) - held)
        if held == 0:
            assert "content-range" not in put.headers
        elif held == len(payload):
            assert put.headers["content-range"] == "bytes */5000"
        else:
            assert put.headers["content-range"] == f"bytes {held}-4999/5000"

        assert events[0] == held
        assert events[-1] == len(payload)
        assert events == sorted(events)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("held", [0, 2500, 5000])
    async def test_resume_async(
        self, async_transport_factory, make_file, payload, upload_link, held
    ):
        transport, recorder = async_transport_factory(resume_server(held))
        path = make_file(payload)
        events: list[int] = []

        engine = UploadEngine(transport, chunk_size=CHUNK)
        outcome = await engine.upload(upload_link, path, resume=True, progress=events.append)

        assert outcome.ok
        assert outcome.bytes_transferred == len(payload) - held
        assert recorder.find("PUT")[0].content == payload[held:]
        assert events[0] == held
        assert events[-1] == len(payload)

    def test_head_carries_content_digest(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = sync_transport_factory(resume_server(0, head_status=404))
        path = make_file(payload)

        iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        head = recorder.find("HEAD")[0]
        assert head.headers["etag"] == hashlib.md5(payload).hexdigest()
        assert head.headers["sha256"] == hashlib.sha256(payload).hexdigest()
        assert head.headers["size"] == str(len(payload))

    @pytest.mark.parametrize(
        "head_headers",
        [
            {"sha256": "0" * 64},
            {"etag": '"' + "f" * 32 + '"'},
        ],
    )
    def test_digest_mismatch_restarts_from_zero(
        self, sync_transport_factory, make_file, payload, upload_link, head_headers
    ):
        transport, recorder = sync_transport_factory(
            resume_server(2500, head_headers=head_headers)
        )
        path = make_file(payload)

        outcome = iter_coroutine(
            UploadEngine(transport, chunk_size=CHUNK).upload(upload_link, path, resume=True)
        )

        assert outcome.ok
        assert outcome.bytes_transferred == len(payload)
        put = recorder.find("PUT")[0]
        assert put.content == payload
        assert "content-range" not in put.headers

    def test_matching_digest_headers_keep_offset(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        digest = digest_file(make_file(payload))
        head_headers = {"sha256": digest.sha256.upper(), "etag": f'"{digest.md5}"'}
        transport, recorder = sync_transport_factory(
            resume_server(2500, head_headers=head_headers)
        )
        path = make_file(payload)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        assert outcome.bytes_transferred == 2500
        assert recorder.find("PUT")[0].content == payload[2500:]

    @pytest.mark.parametrize("head_status", [404, 409, 412, 500, 204])
    def test_head_status_other_than_200_restarts_from_zero(
        self, sync_transport_factory, make_file, payload, upload_link, head_status
    ):
        transport, recorder = sync_transport_factory(
            resume_server(2500, head_status=head_status)
        )
        path = make_file(payload)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        assert outcome.ok
        assert recorder.find("PUT")[0].content == payload

    def test_held_count_larger_than_file_restarts_from_zero(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = sync_transport_factory(resume_server(len(payload) + 1))
        path = make_file(payload)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        assert outcome.bytes_transferred == len(payload)
        assert "content-range" not in recorder.find("PUT")[0].headers

    @pytest.mark.parametrize(
        "error",
        [httpx.ConnectError, httpx.ReadTimeout, httpx.DecodingError, httpx.TooManyRedirects],
    )
    def test_head_request_error_restarts_from_zero(
        self, sync_transport_factory, make_file, payload, upload_link, error
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "HEAD":
                raise error("HEAD failed", request=request)
            return httpx.Response(201)

        transport, recorder = sync_transport_factory(handler)
        path = make_file(payload)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        assert outcome.ok
        assert outcome.bytes_transferred == len(payload)

    def test_file_changed_after_head_restarts_from_zero(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        path = make_file(payload)
        extra = b"appended after hashing"

        def grow_file() -> None:
            with open(path, "ab") as f:
                f.write(extra)

        transport, recorder = sync_transport_factory(resume_server(2500, on_head=grow_file))

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, path, resume=True))

        assert outcome.ok
        put = recorder.find("PUT")[0]
        assert put.content == payload + extra
        assert "content-range" not in put.headers


class TestUploadFailures:
    """Failures are returned as classified outcomes, never raised."""

    @pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
    def test_wrong_method_sends_nothing(
        self, sync_transport_factory, make_file, payload, method
    ):
        transport, recorder = sync_transport_factory(accept_put)
        link = Link(href="https://uploader.disk.test/upload-target/abc123", method=method)

        outcome = iter_coroutine(UploadEngine(transport).upload(link, make_file(payload)))

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "protocol"
        assert isinstance(outcome.error, DiskWrongMethodError)
        assert recorder.requests == []

    def test_missing_local_file(self, sync_transport_factory, tmp_path, upload_link):
        transport, recorder = sync_transport_factory(accept_put)

        outcome = iter_coroutine(
            UploadEngine(transport).upload(upload_link, tmp_path / "missing.bin", resume=True)
        )

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "local_io"
        assert isinstance(outcome.error, DiskLocalIOError)
        assert not outcome.retriable
        assert recorder.requests == []

    def test_insufficient_storage_is_retriable_server_failure(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                507,
                json={
                    "error": "DiskInsufficientStorageError",
                    "description": "Not enough free space",
                },
            )

        transport, _ = sync_transport_factory(handler)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, make_file(payload)))

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "server"
        assert outcome.retriable
        assert isinstance(outcome.error, DiskInsufficientStorageError)
        assert outcome.error.status_code == 507
        assert outcome.error.code == "DiskInsufficientStorageError"

    def test_file_too_big_is_client_failure(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, _ = sync_transport_factory(lambda request: httpx.Response(413))

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, make_file(payload)))

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "client"
        assert not outcome.retriable
        with pytest.raises(DiskFileTooBigError):
            outcome.raise_for_failure()

    def test_connection_error_is_transport_failure(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport, _ = sync_transport_factory(handler)

        outcome = iter_coroutine(UploadEngine(transport).upload(upload_link, make_file(payload)))

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "transport"
        assert outcome.retriable
        assert isinstance(outcome.error, DiskTransportError)
        assert isinstance(outcome.error.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_server_error_async(
        self, async_transport_factory, make_file, payload, upload_link
    ):
        transport, _ = async_transport_factory(lambda request: httpx.Response(503))

        outcome = await UploadEngine(transport).upload(upload_link, make_file(payload))

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "server"
        assert outcome.error.status_code == 503


class TestUploadCancellation:
    """A listener can stop an upload between chunks."""

    def test_cancel_from_callback_sync(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = sync_transport_factory(accept_put)
        events: list[int] = []

        def on_progress(loaded: int):
            events.append(loaded)
            return CANCEL if loaded >= 2048 else None

        outcome = iter_coroutine(
            UploadEngine(transport, chunk_size=CHUNK).upload(
                upload_link, make_file(payload), progress=on_progress
            )
        )

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "cancelled"
        assert isinstance(outcome.error, DiskRequestAbortedError)
        assert events == [0, 1024, 2048]
        assert "PUT" not in recorder.methods()

    def test_cancel_before_first_byte(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = sync_transport_factory(accept_put)
        events: list[int] = []

        def on_progress(loaded: int):
            events.append(loaded)
            return CANCEL

        outcome = iter_coroutine(
            UploadEngine(transport).upload(upload_link, make_file(payload), progress=on_progress)
        )

        assert outcome.kind == "cancelled"
        assert events == [0]
        assert recorder.requests == []

    def test_cancel_through_listener_object(
        self, sync_transport_factory, make_file, payload, upload_link
    ):
        class Listener:
            def __init__(self) -> None:
                self.updates: list[tuple[int, int | None]] = []

            def update_progress(self, loaded: int, total: int | None) -> None:
                self.updates.append((loaded, total))

            def has_cancelled(self) -> bool:
                return len(self.updates) >= 2

        transport, _ = sync_transport_factory(accept_put)
        listener = Listener()

        outcome = iter_coroutine(
            UploadEngine(transport, chunk_size=CHUNK).upload(
                upload_link, make_file(payload), progress=listener
            )
        )

        assert outcome.kind == "cancelled"
        assert listener.updates == [(0, 5000), (1024, 5000)]

    @pytest.mark.asyncio
    async def test_cancel_from_async_callback(
        self, async_transport_factory, make_file, payload, upload_link
    ):
        transport, recorder = async_transport_factory(accept_put)
        events: list[int] = []

        async def on_progress(loaded: int):
            events.append(loaded)
            return CANCEL if loaded >= 3072 else None

        outcome = await UploadEngine(transport, chunk_size=CHUNK).upload(
            upload_link, make_file(payload), progress=on_progress
        )

        assert isinstance(outcome, TransferFailure)
        assert outcome.kind == "cancelled"
        assert events == [0, 1024, 2048, 3072]
        assert "PUT" not in recorder.methods()
