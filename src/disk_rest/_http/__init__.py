"""Shared HTTP infrastructure for cloud disk API clients."""

from .clients import (
    create_disk_async_client,
    create_disk_client,
)
from .config import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT, USER_AGENT, HTTPConfig, get_api_base_url
from .iter_coroutine import iter_coroutine
from .transport import (
    AsyncTransport,
    BaseTransport,
    BlockingTransport,
    BytesBody,
    JSONBody,
    RawBody,
    RequestBody,
)

__all__ = [
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "HTTPConfig",
    "get_api_base_url",
    "iter_coroutine",
    "BaseTransport",
    "BlockingTransport",
    "AsyncTransport",
    "JSONBody",
    "BytesBody",
    "RawBody",
    "RequestBody",
    "create_disk_client",
    "create_disk_async_client",
]
