"""Core business logic shared by the sync and async REST clients."""

from __future__ import annotations

import os
from typing import Any

from pydantic import ValidationError

from ._http import BaseTransport, HTTPConfig
from .errors import DiskError, DiskProtocolError
from .models import Link, OperationStatus
from .transfer._helpers import require_method, translate_errors
from .transfer.download import DownloadEngine
from .transfer.operations import OperationPoller, WaitStrategy
from .transfer.progress import DownloadSink, ProgressArg
from .transfer.status import TransferOutcome, build_http_error, classify_status, parse_api_error
from .transfer.upload import UploadEngine

SaveTo = str | os.PathLike | DownloadSink


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


def _as_sink(save_to: SaveTo, progress: ProgressArg) -> DownloadSink:
    if isinstance(save_to, DownloadSink):
        return save_to
    return DownloadSink.to_path(save_to, progress)


class _BaseRestClient:
    """Base class for the REST client with shared async implementation.

    Metadata calls raise the classified ``DiskError``; transfers return a
    ``TransferOutcome``.
    """

    _transport: BaseTransport
    _config: HTTPConfig
    _closed: bool

    def _init_engines(self, chunk_size: int | None) -> None:
        self._uploader = UploadEngine(self._transport, chunk_size=chunk_size)
        self._downloader = DownloadEngine(self._transport, chunk_size=chunk_size)
        self._poller = OperationPoller(self._transport)
        self._closed = False

    def _ensure_open(self) -> None:
        if self._closed:
            raise DiskError("Client is closed")

    async def _request_link(self, path: str, params: dict[str, Any]) -> Link:
        self._ensure_open()
        with translate_errors(f"request to {path} failed"):
            resp = await self._transport.send(
                "GET",
                self._config.url(path),
                params=params,
                headers=self._config.get_headers(),
                timeout=self._config.timeout,
            )

        if classify_status(resp.status_code) != "success":
            raise build_http_error(resp.status_code, parse_api_error(resp.content), resp.headers)
        try:
            return Link.model_validate_json(resp.content)
        except ValidationError as exc:
            raise DiskProtocolError(f"{path} did not return a link: {resp.text[:200]!r}") from exc

    async def _get_upload_link(self, server_path: str, overwrite: bool) -> Link:
        link = await self._request_link(
            "/v1/disk/resources/upload",
            {"path": server_path, "overwrite": _bool_param(overwrite)},
        )
        require_method(link, "PUT")
        return link

    async def _get_download_link(self, path: str) -> Link:
        return await self._request_link("/v1/disk/resources/download", {"path": path})

    async def _get_public_download_link(self, public_key: str, path: str | None) -> Link:
        params = {"public_key": public_key}
        if path is not None:
            params["path"] = path
        return await self._request_link("/v1/disk/public/resources/download", params)

    async def _upload_file(
        self,
        link: Link,
        local_source: str | os.PathLike,
        *,
        resume: bool,
        progress: ProgressArg,
    ) -> TransferOutcome:
        self._ensure_open()
        return await self._uploader.upload(link, local_source, resume=resume, progress=progress)

    async def _download_file(
        self,
        path: str,
        save_to: SaveTo,
        progress: ProgressArg,
    ) -> TransferOutcome:
        link = await self._get_download_link(path)
        return await self._downloader.download(link, _as_sink(save_to, progress))

    async def _download_public_resource(
        self,
        public_key: str,
        save_to: SaveTo,
        *,
        path: str | None,
        progress: ProgressArg,
    ) -> TransferOutcome:
        link = await self._get_public_download_link(public_key, path)
        return await self._downloader.download(link, _as_sink(save_to, progress))

    async def _get_operation(self, link: Link) -> OperationStatus:
        self._ensure_open()
        return await self._poller.get_operation(link)

    async def _wait_progress(self, link: Link, waiting: WaitStrategy) -> OperationStatus:
        self._ensure_open()
        return await self._poller.wait_until_done(link, waiting)


__all__ = ["SaveTo"]
