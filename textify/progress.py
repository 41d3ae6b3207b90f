"""Progress reporting for extractions.

Observers receive ``ExtractionProgress`` pairs in order. Every extraction
that got past classification ends with exactly one idle ``(0, "")`` event,
whatever the outcome.
"""

import asyncio
import contextlib
import math
from typing import Callable, Optional, Protocol

from textify.logger import get_logger
from textify.models import IDLE, ExtractionProgress

logger = get_logger(__name__)


class ProgressObserver(Protocol):
    def on_progress(self, progress: ExtractionProgress) -> None: ...

    def on_notice(self, title: str, description: str) -> None: ...


class NullObserver:
    """Observer that ignores every event."""

    def on_progress(self, progress: ExtractionProgress) -> None:
        pass

    def on_notice(self, title: str, description: str) -> None:
        pass


class CallbackObserver:
    """Adapts plain callables to the observer interface."""

    def __init__(
        self,
        on_progress: Optional[Callable[[int, str], None]] = None,
        on_notice: Optional[Callable[[str, str], None]] = None,
    ):
        self._on_progress = on_progress
        self._on_notice = on_notice

    def on_progress(self, progress: ExtractionProgress) -> None:
        if self._on_progress:
            self._on_progress(progress.percent, progress.message)

    def on_notice(self, title: str, description: str) -> None:
        if self._on_notice:
            self._on_notice(title, description)


class ProgressTracker:
    """Holds the current progress of one extraction and forwards changes."""

    def __init__(self, observer: Optional[ProgressObserver] = None):
        self._observer = observer or NullObserver()
        self.percent = 0
        self.message = ""

    def report(self, percent: Optional[float] = None, message: Optional[str] = None) -> None:
        """Update percent and/or message and emit the resulting pair.

        The percent is rounded half up, clamped to [0, 100] and never
        decreases; only ``reset`` brings it back to zero.
        """
        if percent is not None:
            clamped = min(100, max(0, math.floor(percent + 0.5)))
            self.percent = max(self.percent, clamped)
        if message is not None:
            self.message = message
        self._emit(ExtractionProgress(self.percent, self.message))

    def notice(self, title: str, description: str) -> None:
        try:
            self._observer.on_notice(title, description)
        except Exception as exc:
            logger.warning(
                "Progress observer failed on notice",
                extra_data={"error_type": type(exc).__name__, "error": str(exc)},
            )

    def reset(self) -> None:
        self.percent = 0
        self.message = ""
        self._emit(IDLE)

    def _emit(self, progress: ExtractionProgress) -> None:
        try:
            self._observer.on_progress(progress)
        except Exception as exc:
            logger.warning(
                "Progress observer failed",
                extra_data={
                    "percent": progress.percent,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )


class SyntheticProgress:
    """Advances progress at a fixed cadence while an opaque call runs.

    Tesseract reports no progress of its own, so the percentage is an
    estimate: it climbs by ``step`` every ``interval`` seconds and stops at
    ``cap``. Use as an async context manager around the awaited call; the
    ticker is stopped on every exit path.
    """

    def __init__(self, tracker: ProgressTracker, interval: float, step: int, cap: int):
        self.tracker = tracker
        self.interval = interval
        self.step = step
        self.cap = cap
        self._task: Optional[asyncio.Task] = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            if self.tracker.percent < self.cap:
                self.tracker.report(min(self.tracker.percent + self.step, self.cap))

    async def __aenter__(self) -> "SyntheticProgress":
        self._task = asyncio.create_task(self._run())
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
