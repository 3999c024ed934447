from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from playwright.async_api import Error as PlaywrightError

from domain.models import CandidateInfo, ListPage
from domain.ports import LoggerPort
from infra.browser.candidate_extractor import CandidateExtractor
from infra.browser.compose_pipeline import ComposePipeline
from infra.browser.list_loader import ListLoader
from infra.browser.playwright_session import PlaywrightSessionController
from infra.browser.selectors import SelectorResolver


class PlaywrightRecruiterUi:
    """
    Playwright implementation of ``RecruiterUiPort``.

    All page access goes through the session controller, which remains the
    only owner of the browser. The helpers below borrow its page.
    """

    def __init__(
        self,
        *,
        session: PlaywrightSessionController,
        resolver: SelectorResolver,
        loader: ListLoader,
        extractor: CandidateExtractor,
        composer: ComposePipeline,
        logger: LoggerPort,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._session = session
        self._resolver = resolver
        self._loader = loader
        self._extractor = extractor
        self._composer = composer
        self._logger = logger
        self._sleep = sleep

    @classmethod
    def create(
        cls,
        *,
        session: PlaywrightSessionController,
        logger: LoggerPort,
    ) -> "PlaywrightRecruiterUi":
        resolver = SelectorResolver(logger=logger)
        return cls(
            session=session,
            resolver=resolver,
            loader=ListLoader(resolver=resolver, logger=logger),
            extractor=CandidateExtractor(resolver=resolver, logger=logger),
            composer=ComposePipeline(session=session, resolver=resolver, logger=logger),
            logger=logger,
        )

    @property
    def is_connected(self) -> bool:
        return self._session.is_live

    async def ensure_session(self) -> None:
        await self._session.launch()

    async def ensure_authenticated(self, target_url: str) -> None:
        await self._session.ensure_authenticated(target_url)

    async def apply_uncontacted_filter(self) -> bool:
        tab = await self._resolver.resolve("uncontactedTab", self._session.page, timeout_ms=10_000)
        if tab is None:
            self._logger.info("uncontacted_filter_missing")
            return False
        await tab.click()
        await self._sleep(2.0)
        self._logger.info("uncontacted_filter_applied")
        return True

    async def load_candidates(self) -> ListPage:
        page = self._session.page
        items = await self._loader.load_all(page)
        indicator = await self._loader.page_indicator(page)
        self._logger.info("candidates_loaded", items=len(items), indicator=indicator)
        return ListPage(items=tuple(items), indicator=indicator)

    async def go_to_next_page(self) -> bool:
        page = self._session.page
        try:
            await page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
            await self._sleep(1.0)

            button = await self._loader.next_page(page)
            if button is None:
                return False
            await button.click()
        except PlaywrightError as exc:
            self._logger.warning("next_page_click_failed", error=str(exc))
            return False
        await self._sleep(3.0)
        try:
            await page.evaluate("() => window.scrollTo(0, 0)")
        except PlaywrightError as exc:
            self._logger.warning("scroll_to_top_failed", error=str(exc))
        await self._sleep(1.0)
        return True

    async def extract_candidate(self, item: Any) -> CandidateInfo:
        return await self._extractor.extract(item)

    async def open_composer(self, item: Any, expected_name: str | None) -> None:
        await self._composer.open_composer(item, expected_name)

    async def open_composer_for_profile(
        self,
        profile_url: str | None,
        expected_name: str | None,
    ) -> None:
        if profile_url:
            await self._session.goto(profile_url, timeout_ms=30_000)
            await self._sleep(2.0)
        await self._composer.open_composer(None, expected_name)

    async def fill_subject(self, text: str) -> bool:
        return await self._composer.fill_subject(text)

    async def fill_body(self, text: str) -> None:
        await self._composer.fill_body(text)

    async def send(self) -> None:
        await self._composer.send()

    async def close_any_dialog(self) -> None:
        await self._composer.close_any_dialog()

    async def reset_to_list(self, project_url: str) -> ListPage:
        """Return to a freshly loaded, filtered candidate list."""
        await self._composer.close_any_dialog()
        page = self._session.page
        for _ in range(2):
            await page.keyboard.press("Escape")
            await self._sleep(0.5)

        await self._session.goto(project_url, timeout_ms=30_000)
        await self._sleep(3.0)
        await self.apply_uncontacted_filter()
        return await self.load_candidates()

    async def take_screenshot(self) -> bytes:
        return await self._session.screenshot()

    async def close(self) -> None:
        await self._session.close()
