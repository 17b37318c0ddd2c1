"""Exceptions raised (or carried in transfer outcomes) by the cloud disk client."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ApiError


class DiskError(Exception):
    """Base class for every error produced by this package."""


class DiskTransportError(DiskError):
    """The connection could not be established or broke mid-transfer."""


class DiskLocalIOError(DiskError):
    """A local file could not be opened, read or written."""


class DiskRequestAbortedError(DiskError):
    """The caller cancelled the transfer or the pending wait."""

    def __init__(self, message: str = "The request was aborted") -> None:
        super().__init__(message)


class DiskTimeoutError(DiskError):
    """A wait strategy deadline elapsed while an operation was still running."""


class DiskProtocolError(DiskError):
    """The server or a link does not match the documented contract."""


class DiskWrongMethodError(DiskProtocolError):
    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Method in Link object is not {expected} (got {actual})")
        self.expected = expected
        self.actual = actual


class DiskHttpCodeError(DiskError):
    """A response with a status the operation does not accept."""

    retriable = False

    def __init__(
        self,
        status_code: int,
        error: ApiError | None = None,
        message: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.code = error.error if error is not None else None
        if message is None:
            message = f"HTTP {status_code}"
            detail = error.description or error.message if error is not None else None
            if detail:
                message = f"{message}: {detail}"
            if self.code:
                message = f"{message} (code={self.code})"
        super().__init__(message)


class DiskClientRequestError(DiskHttpCodeError):
    """4xx: the request has to be corrected by the caller."""


class DiskBadRequestError(DiskClientRequestError):
    pass


class DiskUnauthorizedError(DiskClientRequestError):
    pass


class DiskForbiddenError(DiskClientRequestError):
    pass


class DiskNotFoundError(DiskClientRequestError):
    pass


class DiskMethodNotAllowedError(DiskClientRequestError):
    pass


class DiskNotAcceptableError(DiskClientRequestError):
    pass


class DiskConflictError(DiskClientRequestError):
    pass


class DiskResourceAlreadyExistsError(DiskConflictError):
    pass


class DiskIntermediateFolderNotExistError(DiskConflictError):
    pass


class DiskPreconditionFailedError(DiskClientRequestError):
    pass


class DiskFileTooBigError(DiskClientRequestError):
    pass


class DiskUnsupportedMediaTypeError(DiskClientRequestError):
    pass


class DiskRangeNotSatisfiableError(DiskClientRequestError):
    pass


class DiskLockedError(DiskClientRequestError):
    pass


class DiskTooManyRequestsError(DiskClientRequestError):
    def __init__(
        self,
        status_code: int,
        error: ApiError | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(status_code, error)
        self.retry_after = retry_after


class DiskServerError(DiskHttpCodeError):
    """5xx: the request may succeed if the caller retries it later."""

    retriable = True


class DiskServiceUnavailableError(DiskServerError):
    pass


class DiskInsufficientStorageError(DiskServerError):
    pass


__all__ = [
    "DiskError",
    "DiskTransportError",
    "DiskLocalIOError",
    "DiskRequestAbortedError",
    "DiskTimeoutError",
    "DiskProtocolError",
    "DiskWrongMethodError",
    "DiskHttpCodeError",
    "DiskClientRequestError",
    "DiskBadRequestError",
    "DiskUnauthorizedError",
    "DiskForbiddenError",
    "DiskNotFoundError",
    "DiskMethodNotAllowedError",
    "DiskNotAcceptableError",
    "DiskConflictError",
    "DiskResourceAlreadyExistsError",
    "DiskIntermediateFolderNotExistError",
    "DiskPreconditionFailedError",
    "DiskFileTooBigError",
    "DiskUnsupportedMediaTypeError",
    "DiskRangeNotSatisfiableError",
    "DiskLockedError",
    "DiskTooManyRequestsError",
    "DiskServerError",
    "DiskServiceUnavailableError",
    "DiskInsufficientStorageError",
]
