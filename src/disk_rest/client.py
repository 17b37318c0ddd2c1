"""Cloud disk REST client classes."""

from __future__ import annotations

import os

import httpx

from ._core import SaveTo, _BaseRestClient
from ._http import (
    DEFAULT_TIMEOUT,
    AsyncTransport,
    BlockingTransport,
    HTTPConfig,
    create_disk_async_client,
    create_disk_client,
    get_api_base_url,
    iter_coroutine,
)
from .models import Link, OperationStatus
from .transfer.operations import WaitStrategy
from .transfer.progress import ProgressArg
from .transfer.status import TransferOutcome


class RestClient(_BaseRestClient):
    """Synchronous client for the cloud disk REST API.

    Example:
        with RestClient(token="...") as disk:
            link = disk.get_upload_link("disk:/backup.tar", overwrite=True)
            outcome = disk.upload_file(link, "backup.tar", resume=True)
            outcome.raise_for_failure()
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
        chunk_size: int | None = None,
    ) -> None:
        effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._config = HTTPConfig(
            base_url=base_url or get_api_base_url(),
            timeout=effective_timeout,
            token=token,
        )
        http_client = create_disk_client(token=token, timeout=effective_timeout, client=client)
        self._transport = BlockingTransport(http_client)
        self._init_engines(chunk_size)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._transport.close()

    def __enter__(self) -> RestClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_upload_link(self, server_path: str, overwrite: bool = False) -> Link:
        """Request an upload link for ``server_path``.

        Raises:
            DiskWrongMethodError: If the server returns a link that is not PUT.
        """
        return iter_coroutine(self._get_upload_link(server_path, overwrite))

    def upload_file(
        self,
        link: Link,
        local_source: str | os.PathLike,
        *,
        resume: bool = False,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        """Upload a local file to a link returned by :meth:`get_upload_link`."""
        return iter_coroutine(
            self._upload_file(link, local_source, resume=resume, progress=progress)
        )

    def get_download_link(self, path: str) -> Link:
        return iter_coroutine(self._get_download_link(path))

    def download_file(
        self,
        path: str,
        save_to: SaveTo,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        """Download ``path`` into a local file or a :class:`DownloadSink`."""
        return iter_coroutine(self._download_file(path, save_to, progress))

    def download_public_resource(
        self,
        public_key: str,
        save_to: SaveTo,
        *,
        path: str | None = None,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        return iter_coroutine(
            self._download_public_resource(public_key, save_to, path=path, progress=progress)
        )

    def get_operation(self, link: Link) -> OperationStatus:
        return iter_coroutine(self._get_operation(link))

    def wait_progress(self, link: Link, waiting: WaitStrategy) -> OperationStatus:
        """Block until the operation behind ``link`` succeeds or fails.

        ``waiting`` is called between polls, e.g. ``fixed_delay(1.0)``.
        """
        return iter_coroutine(self._wait_progress(link, waiting))


class AsyncRestClient(_BaseRestClient):
    """Asynchronous client for the cloud disk REST API."""

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
        chunk_size: int | None = None,
    ) -> None:
        effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
        self._config = HTTPConfig(
            base_url=base_url or get_api_base_url(),
            timeout=effective_timeout,
            token=token,
        )
        http_client = create_disk_async_client(
            token=token, timeout=effective_timeout, client=client
        )
        self._transport = AsyncTransport(http_client)
        self._init_engines(chunk_size)

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._transport.aclose()

    async def __aenter__(self) -> AsyncRestClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def get_upload_link(self, server_path: str, overwrite: bool = False) -> Link:
        return await self._get_upload_link(server_path, overwrite)

    async def upload_file(
        self,
        link: Link,
        local_source: str | os.PathLike,
        *,
        resume: bool = False,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        return await self._upload_file(link, local_source, resume=resume, progress=progress)

    async def get_download_link(self, path: str) -> Link:
        return await self._get_download_link(path)

    async def download_file(
        self,
        path: str,
        save_to: SaveTo,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        return await self._download_file(path, save_to, progress)

    async def download_public_resource(
        self,
        public_key: str,
        save_to: SaveTo,
        *,
        path: str | None = None,
        progress: ProgressArg = None,
    ) -> TransferOutcome:
        return await self._download_public_resource(
            public_key, save_to, path=path, progress=progress
        )

    async def get_operation(self, link: Link) -> OperationStatus:
        return await self._get_operation(link)

    async def wait_progress(self, link: Link, waiting: WaitStrategy) -> OperationStatus:
        """Poll until the operation finishes; ``waiting`` may be ``async_fixed_delay(...)``."""
        return await self._wait_progress(link, waiting)


__all__ = [
    "RestClient",
    "AsyncRestClient",
]
