"""Cooperative cancellation for in-flight extractions."""

import asyncio
import threading
from typing import Any

from textify.exceptions import ExtractionCancelledError


class CancellationToken:
    """Flag checked by the extractor between suspension points.

    Cancelling does not interrupt an engine call already running; the
    extraction stops at the next step boundary, releases what it holds and
    raises ExtractionCancelledError.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise ExtractionCancelledError()


async def finish_uncancelled(future: "asyncio.Future[Any]") -> Any:
    """Wait for a worker-thread future even if the caller gets cancelled.

    Used for releasing resources: the release must be over before the
    caller's task resolves. A cancellation received while waiting is
    re-raised once the future is done.
    """
    cancelled = False
    while not future.done():
        try:
            await asyncio.shield(future)
        except asyncio.CancelledError:
            if not future.cancelled():
                cancelled = True
        except Exception:
            break

    if cancelled:
        raise asyncio.CancelledError()
    return future.result()
