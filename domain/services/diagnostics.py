from __future__ import annotations

from domain.ports import ClockPort, LoggerPort, RecruiterUiPort, ScreenshotStorePort


class DiagnosticsRecorder:
    """Captures labelled screenshots of the live page for post-hoc diagnosis."""

    def __init__(
        self,
        *,
        ui: RecruiterUiPort,
        store: ScreenshotStorePort,
        clock: ClockPort,
        logger: LoggerPort,
    ) -> None:
        self._ui = ui
        self._store = store
        self._clock = clock
        self._logger = logger

    async def capture(self, label: str) -> str | None:
        """Return the stored path, or ``None`` when nothing could be captured."""
        if not self._ui.is_connected:
            return None
        try:
            image = await self._ui.take_screenshot()
            return self._store.save_screenshot(label, image, self._clock.now())
        except Exception as exc:
            self._logger.warning("screenshot_failed", label=label, error=str(exc))
            return None
