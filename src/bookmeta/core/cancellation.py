# ABOUTME: Explicit cancellation support for awaits inside the resolution pipeline.
# ABOUTME: Races an awaitable against an asyncio.Event and raises RequestCancelledError if the event wins.

import asyncio
import contextlib
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class RequestCancelledError(Exception):
    """Raised when a caller's cancel event fires while a request is suspended."""


def raise_if_cancelled(cancel: asyncio.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise RequestCancelledError("request cancelled")


async def run_cancellable(aw: Awaitable[T], cancel: asyncio.Event | None) -> T:
    """Await ``aw`` unless ``cancel`` is set first.

    When the event fires, the pending work is cancelled and
    RequestCancelledError is raised; any result it produced in the same
    instant is discarded. Native task cancellation of the caller cancels the
    pending work as well.
    """
    if cancel is None:
        return await aw
    if cancel.is_set():
        if asyncio.iscoroutine(aw):
            aw.close()
        raise RequestCancelledError("request cancelled")

    work = asyncio.ensure_future(aw)
    waiter = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        waiter.cancel()
        raise

    if work in done:
        waiter.cancel()
        return work.result()

    work.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await work
    raise RequestCancelledError("request cancelled")
