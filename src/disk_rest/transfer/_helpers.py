from __future__ import annotations

import inspect
import os
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from typing import Any, cast

import httpx

from ..errors import DiskLocalIOError, DiskProtocolError, DiskTransportError, DiskWrongMethodError
from ..models import Link

DEFAULT_CHUNK_SIZE = 64 * 1024
MIN_CHUNK_SIZE = 1024


def debug(message: str, *args: Any) -> None:
    try:
        debug_env = os.getenv("DEBUG", "")
        if "disk" in debug_env:
            print(f"disk-rest: {message}", *args)
    except Exception:
        pass


def get_chunk_size(chunk_size: int | None = None) -> int:
    if chunk_size is None:
        value = os.getenv("DISK_TRANSFER_CHUNK_SIZE")
        try:
            chunk_size = int(value) if value is not None else DEFAULT_CHUNK_SIZE
        except ValueError:
            chunk_size = DEFAULT_CHUNK_SIZE
    return max(MIN_CHUNK_SIZE, chunk_size)


def require_method(link: Link, expected: str) -> None:
    if link.method.upper() != expected:
        raise DiskWrongMethodError(expected, link.method)


async def await_if_necessary(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await cast(Awaitable[Any], value)
    return value


@contextmanager
def translate_errors(context: str) -> Iterator[None]:
    """Re-raise httpx request errors and local OSErrors as classified DiskErrors.

    A redirect loop is a protocol error; any other failed request (connection,
    timeout, body decoding) is a transport error.
    """
    try:
        yield
    except httpx.TooManyRedirects as exc:
        raise DiskProtocolError(f"{context}: {exc}") from exc
    except httpx.RequestError as exc:
        raise DiskTransportError(f"{context}: {exc}") from exc
    except OSError as exc:
        raise DiskLocalIOError(f"{context}: {exc}") from exc
