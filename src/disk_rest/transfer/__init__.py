"""Resumable transfers and long-running operation polling."""

from .download import DownloadEngine
from .hashing import ContentDigest, digest_file
from .operations import (
    BlockingWait,
    OperationPoller,
    WaitStrategy,
    async_fixed_delay,
    exponential_backoff,
    fixed_delay,
    no_wait,
)
from .progress import (
    CANCEL,
    CallbackProgressListener,
    DownloadSink,
    ProgressListener,
    as_progress_listener,
)
from .status import (
    TransferFailure,
    TransferOutcome,
    TransferSuccess,
    build_http_error,
    classify_status,
)
from .upload import UploadEngine

__all__ = [
    "UploadEngine",
    "DownloadEngine",
    "OperationPoller",
    "ContentDigest",
    "digest_file",
    "DownloadSink",
    "ProgressListener",
    "CallbackProgressListener",
    "as_progress_listener",
    "CANCEL",
    "TransferSuccess",
    "TransferFailure",
    "TransferOutcome",
    "build_http_error",
    "classify_status",
    "WaitStrategy",
    "BlockingWait",
    "no_wait",
    "fixed_delay",
    "exponential_backoff",
    "async_fixed_delay",
]
