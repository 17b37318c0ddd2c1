"""Classification of HTTP statuses and the result type returned by transfers.

Transfers never raise for an expected failure. They return a
``TransferOutcome`` which is either ``TransferSuccess`` or a
``TransferFailure`` wrapping one classified ``DiskError``:

    outcome = engine.upload(...)
    if isinstance(outcome, TransferFailure) and outcome.kind == "server":
        schedule_retry()
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from pydantic import ValidationError

from ..errors import (
    DiskBadRequestError,
    DiskClientRequestError,
    DiskConflictError,
    DiskError,
    DiskFileTooBigError,
    DiskForbiddenError,
    DiskHttpCodeError,
    DiskInsufficientStorageError,
    DiskIntermediateFolderNotExistError,
    DiskLocalIOError,
    DiskLockedError,
    DiskMethodNotAllowedError,
    DiskNotAcceptableError,
    DiskNotFoundError,
    DiskPreconditionFailedError,
    DiskProtocolError,
    DiskRangeNotSatisfiableError,
    DiskRequestAbortedError,
    DiskResourceAlreadyExistsError,
    DiskServerError,
    DiskServiceUnavailableError,
    DiskTooManyRequestsError,
    DiskTransportError,
    DiskUnauthorizedError,
    DiskUnsupportedMediaTypeError,
)
from ..models import ApiError

StatusClass = Literal["success", "client", "server", "protocol"]
FailureKind = Literal["transport", "client", "server", "protocol", "local_io", "cancelled"]

_CLIENT_ERRORS: dict[int, type[DiskClientRequestError]] = {
    400: DiskBadRequestError,
    401: DiskUnauthorizedError,
    403: DiskForbiddenError,
    404: DiskNotFoundError,
    405: DiskMethodNotAllowedError,
    406: DiskNotAcceptableError,
    409: DiskConflictError,
    412: DiskPreconditionFailedError,
    413: DiskFileTooBigError,
    415: DiskUnsupportedMediaTypeError,
    416: DiskRangeNotSatisfiableError,
    423: DiskLockedError,
}

_SERVER_ERRORS: dict[int, type[DiskServerError]] = {
    503: DiskServiceUnavailableError,
    507: DiskInsufficientStorageError,
}

_CONFLICT_CODES: dict[str, type[DiskConflictError]] = {
    "DiskResourceAlreadyExistsError": DiskResourceAlreadyExistsError,
    "DiskPathPointsToExistentDirectoryError": DiskResourceAlreadyExistsError,
    "DiskPathDoesntExistsError": DiskIntermediateFolderNotExistError,
}


def classify_status(status_code: int) -> StatusClass:
    if 200 <= status_code < 300:
        return "success"
    if 400 <= status_code < 500:
        return "client"
    if 500 <= status_code < 600:
        return "server"
    return "protocol"


def parse_api_error(content: bytes | None) -> ApiError | None:
    if not content:
        return None
    try:
        return ApiError.model_validate_json(content)
    except (ValidationError, ValueError):
        return None


def _parse_retry_after(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def build_http_error(
    status_code: int,
    error: ApiError | None = None,
    headers: Mapping[str, str] | None = None,
) -> DiskError:
    """Map a non-2xx status (and its parsed error body) to an exception instance."""
    status_class = classify_status(status_code)
    if status_class == "client":
        if status_code == 429:
            retry_after = _parse_retry_after((headers or {}).get("retry-after"))
            return DiskTooManyRequestsError(status_code, error, retry_after=retry_after)
        if status_code == 409 and error is not None and error.error in _CONFLICT_CODES:
            return _CONFLICT_CODES[error.error](status_code, error)
        return _CLIENT_ERRORS.get(status_code, DiskClientRequestError)(status_code, error)
    if status_class == "server":
        return _SERVER_ERRORS.get(status_code, DiskServerError)(status_code, error)
    if status_class == "success":
        return DiskProtocolError(f"unexpected success status {status_code}")
    return DiskProtocolError(f"unexpected status {status_code}")


def failure_kind(error: DiskError) -> FailureKind:
    if isinstance(error, DiskRequestAbortedError):
        return "cancelled"
    if isinstance(error, DiskTransportError):
        return "transport"
    if isinstance(error, DiskLocalIOError):
        return "local_io"
    if isinstance(error, DiskServerError):
        return "server"
    if isinstance(error, DiskHttpCodeError):
        return "client"
    return "protocol"


@dataclass(frozen=True, slots=True)
class TransferSuccess:
    bytes_transferred: int
    status_code: int
    content_length: int | None = None
    content_type: str | None = None
    etag: str | None = None

    @property
    def ok(self) -> bool:
        return True

    def raise_for_failure(self) -> TransferSuccess:
        return self


@dataclass(frozen=True, slots=True)
class TransferFailure:
    error: DiskError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> FailureKind:
        return failure_kind(self.error)

    @property
    def retriable(self) -> bool:
        return self.kind in ("transport", "server")

    def raise_for_failure(self) -> TransferSuccess:
        raise self.error


TransferOutcome = TransferSuccess | TransferFailure


__all__ = [
    "StatusClass",
    "FailureKind",
    "classify_status",
    "parse_api_error",
    "build_http_error",
    "failure_kind",
    "TransferSuccess",
    "TransferFailure",
    "TransferOutcome",
]
