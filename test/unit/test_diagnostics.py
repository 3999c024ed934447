from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from domain.services import DiagnosticsRecorder
from test.mocks import FakeRecruiterUi, FixedClock, InMemoryLogger, InMemoryScreenshotStore

CLOCK = FixedClock(datetime(2025, 6, 1, tzinfo=timezone.utc))


def _recorder(ui: FakeRecruiterUi) -> tuple[DiagnosticsRecorder, InMemoryScreenshotStore, InMemoryLogger]:
    store = InMemoryScreenshotStore()
    logger = InMemoryLogger()
    return DiagnosticsRecorder(ui=ui, store=store, clock=CLOCK, logger=logger), store, logger


def test_capture_stores_screenshot() -> None:
    ui = FakeRecruiterUi()
    ui.connected = True
    recorder, store, _ = _recorder(ui)

    path = asyncio.run(recorder.capture("after-login"))

    assert path == f"screenshots/after-login-{int(CLOCK.now().timestamp() * 1000)}.png"
    assert store.saved == [("after-login", b"PNG_FAKE")]


def test_capture_without_browser_is_a_no_op() -> None:
    recorder, store, _ = _recorder(FakeRecruiterUi())

    assert asyncio.run(recorder.capture("after-login")) is None
    assert store.saved == []


def test_capture_failure_is_logged_not_raised() -> None:
    ui = FakeRecruiterUi(screenshot_error=RuntimeError("Target closed"))
    ui.connected = True
    recorder, store, logger = _recorder(ui)

    assert asyncio.run(recorder.capture("error-1")) is None
    assert store.saved == []
    assert logger.events[-1] == ("warning", "screenshot_failed", {"label": "error-1", "error": "Target closed"})
