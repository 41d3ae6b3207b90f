"""Unit tests for progress reporting."""

import asyncio

from fakes import RecordingObserver
from textify.models import IDLE, ExtractionProgress
from textify.progress import CallbackObserver, NullObserver, ProgressTracker, SyntheticProgress


class TestProgressTracker:
    def test_report_emits_current_pair(self) -> None:
        observer = RecordingObserver()
        tracker = ProgressTracker(observer)

        tracker.report(message="Loading PDF...")
        tracker.report(percent=40)

        assert observer.events == [
            ExtractionProgress(0, "Loading PDF..."),
            ExtractionProgress(40, "Loading PDF..."),
        ]

    def test_rounds_half_up(self) -> None:
        tracker = ProgressTracker()

        tracker.report(percent=12.5)

        assert tracker.percent == 13

    def test_clamps_to_bounds(self) -> None:
        tracker = ProgressTracker()

        tracker.report(percent=250)
        assert tracker.percent == 100

        tracker.reset()
        tracker.report(percent=-10)
        assert tracker.percent == 0

    def test_never_goes_backwards(self) -> None:
        tracker = ProgressTracker()

        tracker.report(percent=60)
        tracker.report(percent=30)

        assert tracker.percent == 60

    def test_reset_emits_idle(self) -> None:
        observer = RecordingObserver()
        tracker = ProgressTracker(observer)
        tracker.report(percent=70, message="Processing page 2 of 3")

        tracker.reset()

        assert observer.events[-1] == IDLE
        assert (tracker.percent, tracker.message) == (0, "")

    def test_notice_forwarded(self) -> None:
        observer = RecordingObserver()

        ProgressTracker(observer).notice("Title", "Body")

        assert observer.notices == [("Title", "Body")]

    def test_defaults_to_null_observer(self) -> None:
        tracker = ProgressTracker()

        tracker.report(percent=10, message="x")
        tracker.notice("a", "b")
        tracker.reset()


class TestCallbackObserver:
    def test_forwards_plain_values(self) -> None:
        calls = []
        observer = CallbackObserver(
            on_progress=lambda percent, message: calls.append((percent, message)),
            on_notice=lambda title, description: calls.append((title, description)),
        )

        observer.on_progress(ExtractionProgress(25, "Processing page 1 of 4"))
        observer.on_notice("Scanned PDF detected", "Trying OCR")

        assert calls == [(25, "Processing page 1 of 4"), ("Scanned PDF detected", "Trying OCR")]

    def test_missing_callbacks_are_ignored(self) -> None:
        observer = CallbackObserver()

        observer.on_progress(ExtractionProgress(1, "x"))
        observer.on_notice("a", "b")

    def test_null_observer(self) -> None:
        NullObserver().on_progress(IDLE)


class TestSyntheticProgress:
    def test_climbs_to_cap_and_stops(self) -> None:
        observer = RecordingObserver()
        tracker = ProgressTracker(observer)

        async def scenario() -> None:
            async with SyntheticProgress(tracker, interval=0.001, step=5, cap=90):
                await asyncio.sleep(0.2)

        asyncio.run(scenario())

        assert max(observer.percents) == 90
        assert observer.percents == sorted(observer.percents)
        assert all(percent % 5 == 0 for percent in observer.percents)

    def test_stops_emitting_on_exit(self) -> None:
        observer = RecordingObserver()
        tracker = ProgressTracker(observer)

        async def scenario() -> int:
            async with SyntheticProgress(tracker, interval=0.001, step=1, cap=100):
                await asyncio.sleep(0.01)
            count = len(observer.events)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(scenario())

        assert len(observer.events) == count

    def test_stops_on_error(self) -> None:
        observer = RecordingObserver()
        tracker = ProgressTracker(observer)

        async def scenario() -> int:
            try:
                async with SyntheticProgress(tracker, interval=0.001, step=1, cap=100):
                    await asyncio.sleep(0.01)
                    raise RuntimeError("boom")
            except RuntimeError:
                pass
            count = len(observer.events)
            await asyncio.sleep(0.05)
            return count

        count = asyncio.run(scenario())

        assert len(observer.events) == count
