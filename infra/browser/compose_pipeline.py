from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, Protocol, Tuple

from playwright.async_api import Error as PlaywrightError

from domain.errors import ComposeError, SelectorNotFound, WrongCandidatePanel
from domain.ports import LoggerPort
from infra.browser.selectors import SelectorResolver
from infra.browser.strategies import Strategy, first_match

# (clickable handle, label used for the name check or None)
Trigger = Tuple[Any, Optional[str]]

_FIND_ARCHIVE_SIBLING = """
() => {
  const buttons = Array.from(document.querySelectorAll('button'));
  const archive = buttons.find(b => b.textContent.trim() === 'Archive');
  if (!archive) return null;
  let next = archive.nextElementSibling;
  while (next) {
    if (next.tagName === 'BUTTON' || next.tagName === 'A') return next;
    next = next.nextElementSibling;
  }
  return null;
}
"""

_FIND_VISIBLE_MESSAGE_BUTTON = """
() => {
  const buttons = Array.from(document.querySelectorAll('button'));
  return buttons.find(b => {
    const text = b.textContent.trim();
    return text.startsWith('Message ') && b.offsetParent !== null;
  }) || null;
}
"""

_NAMED_LABEL_PREFIXES = ("message ", "inmail ")

_IS_DISABLED = """
(el) => el.disabled
  || el.getAttribute('aria-disabled') === 'true'
  || el.classList.contains('artdeco-button--disabled')
"""

_FILL_RICH_TEXT = """
(el, text) => {
  el.focus();
  el.innerText = text;
  el.dispatchEvent(new Event('input', { bubbles: true }));
  el.dispatchEvent(new Event('change', { bubbles: true }));
}
"""


class PageOwner(Protocol):
    @property
    def page(self) -> Any:
        ...


class ComposePipeline:
    """
    Opens the message composer for a candidate, fills it in and sends it.

    The composer is reached through a ranked list of approaches; the first
    one that produces a clickable trigger is used. When an expected name is
    given and the trigger carries a label, the label must mention the
    candidate's first name, otherwise the open is retried once before
    giving up with ``WrongCandidatePanel``.
    """

    def __init__(
        self,
        *,
        session: PageOwner,
        resolver: SelectorResolver,
        logger: LoggerPort,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        panel_settle_seconds: float = 4.0,
        open_settle_seconds: float = 3.0,
        send_poll_attempts: int = 20,
        send_poll_interval_seconds: float = 0.5,
    ) -> None:
        self._session = session
        self._resolver = resolver
        self._logger = logger
        self._sleep = sleep
        self._panel_settle_seconds = panel_settle_seconds
        self._open_settle_seconds = open_settle_seconds
        self._send_poll_attempts = send_poll_attempts
        self._send_poll_interval_seconds = send_poll_interval_seconds

    @property
    def _page(self) -> Any:
        return self._session.page

    # -- opening -------------------------------------------------------------

    async def open_composer(self, card: Any | None, expected_name: str | None) -> None:
        """Open the composer from a list item, or from the current profile view when ``card`` is None."""
        first_name = _first_name(expected_name)

        for attempt in (1, 2):
            match = await first_match(self._strategies(card))
            if match is None:
                raise ComposeError("All message compose approaches failed")
            approach, (handle, label) = match
            self._logger.info("compose_trigger_found", approach=approach, label=label, attempt=attempt)

            if first_name and label and first_name.lower() not in label.lower():
                self._logger.warning(
                    "compose_name_mismatch",
                    expected=first_name,
                    label=label,
                    attempt=attempt,
                )
                if attempt == 2:
                    raise WrongCandidatePanel(first_name, label)
                await self._sleep(self._panel_settle_seconds)
                continue

            await self._click(handle)
            break

        await self._sleep(self._open_settle_seconds)
        await self._verify_open()

    def _strategies(self, card: Any | None) -> list[tuple[str, Strategy[Trigger]]]:
        strategies: list[tuple[str, Strategy[Trigger]]] = []
        if card is not None:
            strategies.append(("card_message_button", lambda: self._card_message_button(card)))
            strategies.append(("archive_sibling", self._archive_sibling))
            strategies.append(("profile_view", lambda: self._profile_view_button(card)))
        else:
            strategies.append(("profile_message_button", self._visible_message_button))
            strategies.append(("page_message_button", self._page_message_button))
        strategies.append(("messages_tab", self._messages_tab))
        return strategies

    async def _card_message_button(self, card: Any) -> Trigger | None:
        handle = await self._resolver.resolve("messageButton", card, timeout_ms=0)
        if handle is None:
            return None
        return handle, await _label(handle)

    async def _archive_sibling(self) -> Trigger | None:
        handle = await self._evaluate_element(_FIND_ARCHIVE_SIBLING)
        if handle is None:
            return None
        return handle, await _label(handle)

    async def _profile_view_button(self, card: Any) -> Trigger | None:
        link = await self._resolver.resolve("candidateLink", card, timeout_ms=0, require_visible=False)
        if link is None:
            try:
                link = await card.query_selector("a")
            except PlaywrightError:
                link = None
        if link is None:
            return None
        try:
            await link.click(force=True)
        except PlaywrightError as exc:
            self._logger.info("profile_link_click_failed", error=str(exc))
            return None
        await self._sleep(self._panel_settle_seconds)
        return await self._visible_message_button()

    async def _visible_message_button(self) -> Trigger | None:
        handle = await self._evaluate_element(_FIND_VISIBLE_MESSAGE_BUTTON)
        if handle is None:
            return None
        return handle, await _label(handle)

    async def _page_message_button(self) -> Trigger | None:
        handle = await self._resolver.resolve("messageButton", self._page, timeout_ms=3000)
        if handle is None:
            return None
        return handle, await _label(handle)

    async def _messages_tab(self) -> Trigger | None:
        handle = await self._resolver.resolve("messagesTab", self._page, timeout_ms=5000)
        if handle is None:
            return None
        return handle, None

    async def _evaluate_element(self, script: str) -> Any | None:
        try:
            result = await self._page.evaluate_handle(script)
        except PlaywrightError as exc:
            self._logger.info("compose_probe_failed", error=str(exc))
            return None
        return result.as_element()

    async def _click(self, handle: Any) -> None:
        try:
            await handle.evaluate("(el) => el.scrollIntoView({ block: 'center' })")
            await self._sleep(0.5)
            await handle.evaluate("(el) => el.click()")
        except PlaywrightError as exc:
            self._logger.info("js_click_failed", error=str(exc))
            await handle.click(force=True, timeout=5000)

    async def _verify_open(self) -> None:
        opened = await self._resolver.resolve("subjectInput", self._page, timeout_ms=8000)
        if opened is None:
            opened = await self._resolver.resolve("messageBody", self._page, timeout_ms=5000)
        if opened is None:
            raise ComposeError("Compose dialog did not open")
        self._logger.info("compose_open")

    # -- filling ---------------------------------------------------------------

    async def fill_subject(self, text: str) -> bool:
        field = await self._resolver.resolve("subjectInput", self._page, timeout_ms=5000)
        if field is None:
            self._logger.info("subject_input_missing")
            return False
        await field.click()
        await field.fill("")
        await field.fill(text)
        _check_complete("subject", text, await field.input_value())
        return True

    async def fill_body(self, text: str) -> None:
        try:
            field = await self._resolver.require("messageBody", self._page, timeout_ms=8000)
        except SelectorNotFound as exc:
            raise ComposeError("Could not find message body field") from exc

        await field.click()
        await self._sleep(0.5)
        tag = await field.evaluate("(el) => el.tagName.toLowerCase()")
        if tag in ("input", "textarea"):
            await field.fill("")
            await field.fill(text)
            written = await field.input_value()
        else:
            await field.evaluate(_FILL_RICH_TEXT, text)
            written = await field.inner_text()
        _check_complete("body", text, written)
        self._logger.info("message_body_filled", chars=len(text))

    # -- sending -------------------------------------------------------------

    async def send(self) -> None:
        try:
            button = await self._resolver.require("sendButton", self._page, timeout_ms=5000)
        except SelectorNotFound as exc:
            raise ComposeError("Could not find Send button") from exc

        for _ in range(self._send_poll_attempts):
            if not await button.evaluate(_IS_DISABLED):
                break
            await self._sleep(self._send_poll_interval_seconds)
        else:
            self._logger.warning("send_button_still_disabled")

        try:
            await button.evaluate("(el) => el.click()")
        except PlaywrightError as exc:
            self._logger.info("js_click_failed", error=str(exc))
            await button.click(timeout=10_000)
        await self._sleep(2.0)

    async def close_any_dialog(self) -> None:
        """Dismiss the composer and any overlay. Never raises."""
        page = self._page
        try:
            close = await self._resolver.resolve("closeMessageDialog", page, timeout_ms=3000)
            if close is not None:
                await close.click()
                await self._sleep(1.0)
        except Exception as exc:
            self._logger.info("close_dialog_failed", error=str(exc))

        for locator in self._resolver.locators("dismissOverlay"):
            try:
                control = await page.query_selector(locator)
                if control is not None and await control.is_visible():
                    await control.click()
                    await self._sleep(0.5)
            except Exception as exc:
                self._logger.info("dismiss_overlay_failed", locator=locator, error=str(exc))

        try:
            await page.keyboard.press("Escape")
            await self._sleep(1.0)
        except Exception as exc:
            self._logger.info("escape_failed", error=str(exc))


def _first_name(name: str | None) -> str:
    if not name or name == "Unknown":
        return ""
    parts = name.split()
    return parts[0] if parts else ""


async def _label(handle: Any) -> str | None:
    """The control's "Message <name>" style label, when it carries one."""
    try:
        label = await handle.get_attribute("aria-label")
        if not label:
            label = await handle.text_content()
    except PlaywrightError:
        return None
    label = " ".join((label or "").split())[:80]
    if label.lower().startswith(_NAMED_LABEL_PREFIXES) and len(label.split()) > 1:
        return label
    return None


def _check_complete(field: str, expected: str, written: str | None) -> None:
    if " ".join((written or "").split()) != " ".join(expected.split()):
        raise ComposeError(
            f"The {field} field holds {len(written or '')} of {len(expected)} characters",
        )
