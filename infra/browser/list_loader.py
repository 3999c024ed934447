from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from domain.ports import LoggerPort
from infra.browser.selectors import SelectorResolver

STABLE_THRESHOLD = 4
MAX_SCROLL_ATTEMPTS = 40
SCROLL_STEP_PX = 800

_INCREMENTAL_SCROLL_SCRIPT = """
(step) => {
  const containers = [
    document.querySelector('.hiring-pipeline-candidates'),
    document.querySelector('[class*="pipeline-candidates"]'),
    document.querySelector('[class*="hiring-pipeline"] [class*="list"]'),
    document.querySelector('[class*="manage-candidates"]'),
    document.querySelector('.scaffold-layout__main'),
    document.querySelector('[class*="scaffold"] [class*="main"]'),
    document.querySelector('main'),
    document.querySelector('[role="main"]'),
  ].filter(Boolean);
  for (const el of containers) {
    el.scrollTop += step;
  }
  window.scrollBy(0, step);
}
"""


class ListLoader:
    """
    Loads a lazily rendered candidate list by scrolling until it settles.

    The item count is sampled once per round. The list counts as fully
    loaded after ``stable_threshold`` consecutive rounds without a change,
    or when ``max_attempts`` rounds have run.
    """

    def __init__(
        self,
        *,
        resolver: SelectorResolver,
        logger: LoggerPort,
        stable_threshold: int = STABLE_THRESHOLD,
        max_attempts: int = MAX_SCROLL_ATTEMPTS,
        initial_settle_seconds: float = 2.0,
        settle_seconds: float = 3.0,
        empty_retry_seconds: float = 5.0,
        scroll_step_px: int = SCROLL_STEP_PX,
        item_timeout_ms: int = 10_000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._resolver = resolver
        self._logger = logger
        self._stable_threshold = stable_threshold
        self._max_attempts = max_attempts
        self._initial_settle_seconds = initial_settle_seconds
        self._settle_seconds = settle_seconds
        self._empty_retry_seconds = empty_retry_seconds
        self._scroll_step_px = scroll_step_px
        self._item_timeout_ms = item_timeout_ms
        self._sleep = sleep

    async def load_all(self, scope: Any) -> list[Any]:
        await self._sleep(self._initial_settle_seconds)
        previous_count = 0
        stable_rounds = 0
        items: list[Any] = []

        for attempt in range(self._max_attempts):
            items = await self._items(scope)
            current_count = len(items)
            self._logger.info("list_scroll_round", attempt=attempt + 1, items=current_count)

            if current_count == 0 and attempt == 0:
                self._logger.info("list_empty_retrying", wait_seconds=self._empty_retry_seconds)
                await self._sleep(self._empty_retry_seconds)
                items = await self._items(scope)
                if not items:
                    self._logger.warning("list_empty")
                    return []
                previous_count = len(items)
                continue

            if current_count == previous_count:
                stable_rounds += 1
                if stable_rounds >= self._stable_threshold:
                    self._logger.info("list_stable", items=current_count, rounds=attempt + 1)
                    break
            else:
                stable_rounds = 0
            previous_count = current_count

            await self._scroll_step(scope, items)
            await self._sleep(self._settle_seconds)
        else:
            self._logger.warning("list_scroll_limit_reached", items=len(items))

        return items

    async def next_page(self, scope: Any) -> Any | None:
        """The "next page" control, or ``None`` when absent or disabled."""
        return await self._resolver.resolve(
            "nextPageButton",
            scope,
            timeout_ms=0,
            accept=_is_enabled_control,
        )

    async def page_indicator(self, scope: Any) -> str:
        element = await self._resolver.resolve("pageIndicator", scope, timeout_ms=0, require_visible=False)
        if element is None:
            return "unknown"
        try:
            text = (await element.text_content() or "").strip()
        except Exception as exc:
            self._logger.warning("page_indicator_unreadable", error=str(exc))
            return "unknown"
        return text or "unknown"

    async def _items(self, scope: Any) -> list[Any]:
        return await self._resolver.resolve_all(
            "candidateCards",
            scope,
            timeout_ms=self._item_timeout_ms,
        )

    async def _scroll_step(self, scope: Any, items: list[Any]) -> None:
        try:
            await scope.evaluate(_INCREMENTAL_SCROLL_SCRIPT, self._scroll_step_px)
        except Exception as exc:
            self._logger.warning("list_scroll_failed", error=str(exc))
        if items:
            try:
                await items[-1].scroll_into_view_if_needed()
            except Exception as exc:
                self._logger.info("scroll_into_view_failed", error=str(exc))


async def _is_enabled_control(element: Any) -> bool:
    if not await element.is_visible():
        return False
    if await element.get_attribute("disabled") is not None:
        return False
    return await element.get_attribute("aria-disabled") != "true"
