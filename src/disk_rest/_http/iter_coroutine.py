"""Drive never-suspending coroutines from synchronous code."""

from __future__ import annotations

import typing

_T = typing.TypeVar("_T")


def iter_coroutine(coro: typing.Coroutine[None, None, _T]) -> _T:
    """
    Run a coroutine to completion with a single ``send(None)``.

    The transfer engines are written once as coroutines. Over a
    ``BlockingTransport`` nothing inside them ever yields to an event loop,
    so the sync API steps them here instead of starting a loop.

    Raises:
        RuntimeError: If the coroutine suspends instead of finishing.
    """
    try:
        coro.send(None)
    except StopIteration as ex:
        return ex.value  # type: ignore [no-any-return]
    else:
        raise RuntimeError(f"coroutine {coro!r} did not stop after one iteration!")
    finally:
        coro.close()


__all__ = ["iter_coroutine"]
