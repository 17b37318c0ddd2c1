"""Polling of long-running server operations (bulk copy, move, delete...)."""

from __future__ import annotations

import asyncio
import itertools
import threading
import time
from collections.abc import Awaitable, Callable, Iterator
from urllib.parse import urlparse

from pydantic import ValidationError

from .._http.transport import BaseTransport
from ..errors import DiskProtocolError, DiskRequestAbortedError, DiskTimeoutError
from ..models import Link, OperationBody, OperationState, OperationStatus
from ._helpers import await_if_necessary, debug, require_method, translate_errors
from .status import build_http_error, classify_status, parse_api_error

WaitStrategy = Callable[[], Awaitable[None] | None]


def operation_id_from_href(href: str) -> str:
    path = urlparse(href).path.rstrip("/")
    return path.rsplit("/", 1)[-1]


class OperationPoller:
    """Query an operation link until the operation leaves ``in-progress``.

    There is no built-in limit on the number of polls. Bound the total wait
    with a strategy that enforces a deadline (``fixed_delay(..., max_wait=)``)
    or by cancelling it.
    """

    def __init__(self, transport: BaseTransport, *, timeout: float | None = None) -> None:
        self._transport = transport
        self._timeout = timeout

    async def get_operation(self, link: Link) -> OperationStatus:
        require_method(link, "GET")
        with translate_errors("operation status request failed"):
            response = await self._transport.send(
                "GET",
                link.href,
                headers={"accept": "application/json"},
                timeout=self._timeout,
            )

        if classify_status(response.status_code) != "success":
            raise build_http_error(
                response.status_code,
                parse_api_error(response.content),
                response.headers,
            )
        try:
            body = OperationBody.model_validate_json(response.content)
            state = OperationState(body.status)
        except (ValidationError, ValueError) as exc:
            raise DiskProtocolError(f"malformed operation status: {response.text[:200]!r}") from exc
        operation = OperationStatus(id=operation_id_from_href(link.href), state=state)
        debug(f"getOperation: {operation}")
        return operation

    async def wait_until_done(self, link: Link, wait_strategy: WaitStrategy) -> OperationStatus:
        """Poll ``link`` until the operation succeeds or fails.

        ``wait_strategy`` is called between polls; it may block, return an
        awaitable (async transports), or raise ``DiskRequestAbortedError`` /
        ``DiskTimeoutError`` to stop waiting. A failed operation is returned,
        not raised. Strategies with a ``reset()`` method (``fixed_delay``,
        ``exponential_backoff``) are reset first, so one instance can be reused
        across waits.

        Raises:
            DiskWrongMethodError: If the link is not a GET link; nothing is sent.
        """
        require_method(link, "GET")
        reset = getattr(wait_strategy, "reset", None)
        if reset is not None:
            reset()
        while True:
            operation = await self.get_operation(link)
            if not operation.is_in_progress:
                return operation
            await await_if_necessary(wait_strategy())


def no_wait() -> WaitStrategy:
    """Re-poll immediately."""
    return lambda: None


class BlockingWait:
    """Blocking wait strategy driven by a sequence of delays.

    A set ``cancel_event`` interrupts a pending wait with
    ``DiskRequestAbortedError``; once ``max_wait`` seconds have passed since
    the first wait, the next call raises ``DiskTimeoutError``. ``reset()``
    restarts both the delay sequence and the deadline.
    """

    def __init__(
        self,
        delays: Callable[[], Iterator[float]],
        *,
        cancel_event: threading.Event | None = None,
        max_wait: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._make_delays = delays
        self._cancel_event = cancel_event
        self._max_wait = max_wait
        self._clock = clock
        self.reset()

    def reset(self) -> None:
        self._delays = self._make_delays()
        self._started: float | None = None
        self.calls = 0

    def __call__(self) -> None:
        now = self._clock()
        if self._started is None:
            self._started = now
        self.calls += 1
        delay = next(self._delays)
        if self._max_wait is not None:
            remaining = self._started + self._max_wait - now
            if remaining <= 0:
                raise DiskTimeoutError(f"operation still in progress after {self._max_wait}s")
            delay = min(delay, remaining)

        if self._cancel_event is None:
            time.sleep(delay)
        elif self._cancel_event.wait(delay):
            raise DiskRequestAbortedError("wait for operation cancelled")


def fixed_delay(
    seconds: float,
    *,
    cancel_event: threading.Event | None = None,
    max_wait: float | None = None,
) -> BlockingWait:
    return BlockingWait(
        lambda: itertools.repeat(seconds),
        cancel_event=cancel_event,
        max_wait=max_wait,
    )


def backoff_delays(initial: float, maximum: float, factor: float) -> Iterator[float]:
    delay = min(initial, maximum)
    while True:
        yield delay
        delay = min(delay * factor, maximum)


def exponential_backoff(
    initial: float = 0.1,
    maximum: float = 2.0,
    factor: float = 2.0,
    *,
    cancel_event: threading.Event | None = None,
    max_wait: float | None = None,
) -> BlockingWait:
    return BlockingWait(
        lambda: backoff_delays(initial, maximum, factor),
        cancel_event=cancel_event,
        max_wait=max_wait,
    )


def async_fixed_delay(
    seconds: float,
    *,
    cancel_event: asyncio.Event | None = None,
) -> WaitStrategy:
    """Non-blocking fixed delay for ``AsyncRestClient.wait_progress``."""

    async def wait() -> None:
        if cancel_event is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise DiskRequestAbortedError("wait for operation cancelled")

    return wait


__all__ = [
    "WaitStrategy",
    "OperationPoller",
    "BlockingWait",
    "operation_id_from_href",
    "no_wait",
    "fixed_delay",
    "backoff_delays",
    "exponential_backoff",
    "async_fixed_delay",
]
