"""Python client for the cloud disk REST API with resumable transfers."""

from .client import AsyncRestClient, RestClient
from .errors import (
    DiskClientRequestError,
    DiskConflictError,
    DiskError,
    DiskHttpCodeError,
    DiskLocalIOError,
    DiskNotFoundError,
    DiskProtocolError,
    DiskRequestAbortedError,
    DiskServerError,
    DiskTimeoutError,
    DiskTransportError,
    DiskWrongMethodError,
)
from .models import ApiError, Link, OperationState, OperationStatus
from .transfer import (
    CANCEL,
    ContentDigest,
    DownloadEngine,
    DownloadSink,
    OperationPoller,
    ProgressListener,
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
    UploadEngine,
    async_fixed_delay,
    digest_file,
    exponential_backoff,
    fixed_delay,
    no_wait,
)

__version__ = "0.1.0"

__all__ = [
    "RestClient",
    "AsyncRestClient",
    "Link",
    "ApiError",
    "OperationState",
    "OperationStatus",
    "UploadEngine",
    "DownloadEngine",
    "OperationPoller",
    "DownloadSink",
    "ProgressListener",
    "CANCEL",
    "ContentDigest",
    "digest_file",
    "TransferSuccess",
    "TransferFailure",
    "TransferOutcome",
    "no_wait",
    "fixed_delay",
    "exponential_backoff",
    "async_fixed_delay",
    "DiskError",
    "DiskTransportError",
    "DiskLocalIOError",
    "DiskRequestAbortedError",
    "DiskTimeoutError",
    "DiskProtocolError",
    "DiskWrongMethodError",
    "DiskHttpCodeError",
    "DiskClientRequestError",
    "DiskNotFoundError",
    "DiskConflictError",
    "DiskServerError",
]
