from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Awaitable, Callable

from domain.errors import LoginTimeout, SessionError
from domain.ports import EventSinkPort, LoggerPort

_LOGIN_URL_MARKERS = ("login", "authwall", "checkpoint")
_AUTHENTICATED_URL_MARKER = "/talent/"

_LAUNCH_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]
_HIDE_WEBDRIVER_SCRIPT = (
    "Object.defineProperty(navigator, 'webdriver', { get: () => false });"
)


def is_login_url(url: str) -> bool:
    return any(marker in url for marker in _LOGIN_URL_MARKERS)


def is_authenticated_url(url: str) -> bool:
    return _AUTHENTICATED_URL_MARKER in url and not is_login_url(url)


class PlaywrightSessionController:
    """
    Owns the single persistent Chromium context and its page.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``. The profile directory survives
    restarts, so a completed login is reused by later runs. Other
    components borrow ``page`` but never close or replace it.
    """

    def __init__(
        self,
        *,
        user_data_dir: str | Path,
        events: EventSinkPort,
        logger: LoggerPort,
        headless: bool = False,
        login_timeout_seconds: float = 300.0,
        poll_interval_seconds: float = 3.0,
        settle_seconds: float = 3.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._user_data_dir = Path(user_data_dir)
        self._events = events
        self._logger = logger
        self._headless = headless
        self._login_timeout_seconds = login_timeout_seconds
        self._poll_interval_seconds = poll_interval_seconds
        self._settle_seconds = settle_seconds
        self._sleep = sleep
        self._monotonic = monotonic
        self._playwright: Any = None
        self._context: Any = None
        self._page: Any = None

    @property
    def is_live(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> Any:
        if self._page is None:
            raise SessionError("Browser not launched. Call launch() first.")
        return self._page

    async def launch(self) -> Any:
        if self._page is not None:
            return self._page

        from playwright.async_api import async_playwright

        self._user_data_dir.mkdir(parents=True, exist_ok=True)
        self._logger.info("browser_launching", user_data_dir=str(self._user_data_dir.resolve()))
        try:
            self._playwright = await async_playwright().start()
            self._context = await self._playwright.chromium.launch_persistent_context(
                str(self._user_data_dir.resolve()),
                headless=self._headless,
                viewport={"width": 1440, "height": 900},
                args=_LAUNCH_ARGS,
                ignore_default_args=["--enable-automation"],
                locale="en-US",
                timezone_id="America/New_York",
            )
            pages = self._context.pages
            page = pages[0] if pages else await self._context.new_page()
            await page.add_init_script(_HIDE_WEBDRIVER_SCRIPT)
        except Exception as exc:
            self._logger.error("browser_launch_failed", error=str(exc))
            await self.close()
            raise SessionError(f"Browser launch failed: {exc}") from exc

        self._page = page
        self._logger.info("browser_launched")
        return page

    def attach(self, page: Any) -> None:
        """Adopt an already-open page (used by tests and diagnostics)."""
        self._page = page

    async def goto(self, url: str, *, timeout_ms: int = 60_000) -> None:
        page = self.page
        try:
            await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except Exception as exc:
            raise SessionError(f"Navigation to {url} failed: {exc}") from exc

    async def ensure_authenticated(self, target_url: str) -> None:
        """Navigate to ``target_url``, waiting for a manual login when one is required."""
        self._events.publish("status", message="Navigating to LinkedIn Recruiter...")
        await self.goto(target_url)
        await self._sleep(self._settle_seconds)

        url = self.page.url
        if is_login_url(url):
            self._logger.info("login_required", url=url)
            self._events.publish(
                "login_required",
                message="Please log in to LinkedIn Recruiter in the browser window...",
            )
            await self._wait_for_login()
            self._logger.info("login_succeeded")
            self._events.publish("login_success", message="Login successful!")
        elif is_authenticated_url(url):
            self._logger.info("already_logged_in")
            self._events.publish("login_success", message="Already logged in")
        else:
            self._logger.warning("unexpected_url", url=url)

        project_key = target_url.rstrip("/").split("/")[-1]
        if project_key not in self.page.url:
            await self.goto(target_url)
            await self._sleep(self._settle_seconds)

    async def _wait_for_login(self) -> None:
        deadline = self._monotonic() + self._login_timeout_seconds
        while self._monotonic() < deadline:
            await self._sleep(self._poll_interval_seconds)
            if is_authenticated_url(self.page.url):
                return
        raise LoginTimeout(
            f"Login timed out after {int(self._login_timeout_seconds)} seconds",
        )

    async def screenshot(self) -> bytes:
        return await self.page.screenshot(full_page=False)

    async def close(self) -> None:
        context, playwright = self._context, self._playwright
        self._context = None
        self._playwright = None
        self._page = None
        try:
            if context:
                await context.close()
        except Exception as exc:
            self._logger.warning("browser_context_close_failed", error=str(exc))
        finally:
            if playwright:
                try:
                    await playwright.stop()
                except Exception as exc:
                    self._logger.warning("playwright_stop_failed", error=str(exc))
        self._logger.info("browser_closed")
