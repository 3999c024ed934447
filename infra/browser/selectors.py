"""Logical element roles and the resolver that maps them onto the live DOM.

Each role is an ordered list of locator expressions, most specific first.
Every locator must be safe to try blindly: a miss is never an error.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Sequence

from playwright.async_api import Error as PlaywrightError

from domain.errors import SelectorNotFound
from domain.ports import LoggerPort
from infra.browser.strategies import first_match

Accept = Callable[[Any], Awaitable[bool]]

SELECTORS: dict[str, list[str]] = {
    "candidateCards": [
        "div.row__top-card",
        '[class*="row__top-card"]',
        "[data-test-pipeline-kanban] .pipeline-card",
        ".hire-pipeline-card",
        '[class*="pipeline"] [class*="card"]',
        ".artdeco-list__item",
        "[data-test-row]",
        'li[class*="candidate"]',
    ],
    "candidateLink": [
        'a[href*="/talent/profile/"]',
        'a[href*="linkedin.com/in/"]',
        'a[href*="/talent/hire/"]',
        'a[class*="profile-link"]',
    ],
    "profileLinkPublic": [
        'a[href*="/in/"]',
    ],
    "candidateName": [
        'a[href*="/talent/profile/"]',
        "[data-test-candidate-name]",
        ".artdeco-entity-lockup__title",
        '[class*="candidate-name"]',
        'span[class*="name"]',
        'a[href*="/in/"]',
    ],
    "candidateHeadline": [
        "[data-test-candidate-headline]",
        ".artdeco-entity-lockup__subtitle",
        '[class*="headline"]',
        'span[class*="title"]',
    ],
    "messageButton": [
        "button[data-test-send-inmail]",
        '[class*="message-icon"]',
        'button[aria-label*="Message"]',
        'button[aria-label*="InMail"]',
        'a[aria-label*="Message"]',
        'a[aria-label*="InMail"]',
        '[class*="mail"] button',
        '[class*="mail"] a',
        'button:has-text("Message")',
        'button:has-text("InMail")',
        '[class*="inmail"] button',
        'button:has-text("Send message")',
    ],
    "messagesTab": [
        'a:has-text("Messages")',
        'button:has-text("Messages")',
        '[role="tab"]:has-text("Messages")',
    ],
    "subjectInput": [
        'input[name="subject"]',
        "[data-test-inmail-subject]",
        'input[placeholder*="Subject"]',
        'input[placeholder*="subject"]',
        '[class*="subject"] input',
        'input[aria-label*="Subject"]',
        'input[aria-label*="subject"]',
    ],
    "messageBody": [
        "[data-test-inmail-body]",
        'div[contenteditable="true"][role="textbox"]',
        'div[contenteditable="true"]',
        'textarea[name="body"]',
        'textarea[name="message"]',
        "textarea",
        '[class*="message-body"] [contenteditable]',
        '[role="textbox"]',
        '[aria-label*="message body"]',
        '[aria-label*="Write a message"]',
        '[placeholder*="Write a message"]',
        '[class*="msg-form"] [contenteditable]',
        '[class*="compose"] [contenteditable]',
        '[class*="inmail"] [contenteditable]',
        '[class*="compose"] textarea',
    ],
    "sendButton": [
        "button[data-test-send-inmail-button]",
        'button:has-text("Send")',
        '[class*="send"] button',
        'button[aria-label*="Send"]',
    ],
    "uncontactedTab": [
        '[data-test-pipeline-stage="UNCONTACTED"]',
        '[data-test-pipeline-filter="UNCONTACTED"]',
        'button:has-text("Uncontacted")',
        '[class*="stage"]:has-text("Uncontacted")',
        'div[role="tab"]:has-text("Uncontacted")',
    ],
    "closeMessageDialog": [
        "button[data-test-modal-close-btn]",
        'button:has-text("Discard")',
        '[class*="close"] button',
        'button[aria-label="Close"]',
    ],
    "dismissOverlay": [
        'button[aria-label="Close"]',
        'button[aria-label="Dismiss"]',
        "button[data-test-modal-close-btn]",
        '[class*="artdeco-modal__dismiss"]',
    ],
    "nextPageButton": [
        'a:has-text("Next")',
        'button:has-text("Next")',
        "li.artdeco-pagination__indicator--number:last-child a",
        '[class*="pagination"] a:has-text("Next")',
        '[class*="pagination"] button:has-text("Next")',
        'a[aria-label*="Next"]',
        'button[aria-label*="Next"]',
        '[class*="pagination"] li:last-child a',
    ],
    "pageIndicator": [
        '[class*="results-context"]',
        '[class*="displaying"]',
        '[class*="pagination-text"]',
        '[class*="page-range"]',
    ],
}

DEFAULT_TIMEOUT_MS = 5000


class SelectorResolver:
    """
    Resolves a role to the first matching element under a scope.

    ``scope`` is a Playwright ``Page`` or ``ElementHandle``. Locators are
    tried in order and resolution stops at the first hit, so later
    locators are only evaluated when every earlier one missed.
    """

    def __init__(
        self,
        *,
        logger: LoggerPort,
        selectors: Mapping[str, Sequence[str]] | None = None,
        default_timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> None:
        self._logger = logger
        self._selectors = selectors if selectors is not None else SELECTORS
        self._default_timeout_ms = default_timeout_ms

    def locators(self, role: str) -> Sequence[str]:
        try:
            return self._selectors[role]
        except KeyError:
            raise ValueError(f"Unknown selector role: {role}") from None

    def roles(self) -> list[str]:
        return list(self._selectors)

    async def resolve(
        self,
        role: str,
        scope: Any,
        *,
        timeout_ms: int | None = None,
        require_visible: bool = True,
        accept: Accept | None = None,
    ) -> Any | None:
        """First element matching ``role`` under ``scope``, or ``None``.

        ``timeout_ms <= 0`` probes the current DOM without waiting.
        ``accept`` can reject a matched element, in which case the next
        locator is tried.
        """
        timeout = self._default_timeout_ms if timeout_ms is None else timeout_ms
        state = "visible" if require_visible else "attached"

        def probe(locator: str):
            async def run() -> Any | None:
                element = await self._find_one(scope, locator, timeout, state)
                if element is None:
                    return None
                if accept is not None and not await _safe_accept(accept, element):
                    return None
                return element

            return run

        match = await first_match((locator, probe(locator)) for locator in self.locators(role))
        if match is None:
            self._logger.info("selector_miss", role=role)
            return None
        return match[1]

    async def resolve_all(
        self,
        role: str,
        scope: Any,
        *,
        timeout_ms: int | None = None,
    ) -> list[Any]:
        """All elements matched by the first locator of ``role`` that matches anything."""
        timeout = self._default_timeout_ms if timeout_ms is None else timeout_ms

        def probe(locator: str):
            async def run() -> list[Any] | None:
                elements = await self._find_all(scope, locator, timeout)
                return elements or None

            return run

        match = await first_match((locator, probe(locator)) for locator in self.locators(role))
        if match is None:
            self._logger.info("selector_miss", role=role, all=True)
            return []
        return match[1]

    async def require(
        self,
        role: str,
        scope: Any,
        *,
        timeout_ms: int | None = None,
        require_visible: bool = True,
    ) -> Any:
        element = await self.resolve(
            role,
            scope,
            timeout_ms=timeout_ms,
            require_visible=require_visible,
        )
        if element is None:
            raise SelectorNotFound(role)
        return element

    async def _find_one(
        self,
        scope: Any,
        locator: str,
        timeout_ms: int,
        state: str,
    ) -> Any | None:
        try:
            if timeout_ms <= 0:
                element = await scope.query_selector(locator)
                if element is not None and state == "visible" and not await element.is_visible():
                    return None
                return element
            return await scope.wait_for_selector(locator, timeout=timeout_ms, state=state)
        except PlaywrightError:
            return None

    async def _find_all(self, scope: Any, locator: str, timeout_ms: int) -> list[Any]:
        try:
            if timeout_ms > 0:
                await scope.wait_for_selector(locator, timeout=timeout_ms, state="attached")
            return list(await scope.query_selector_all(locator))
        except PlaywrightError:
            return []


async def _safe_accept(accept: Accept, element: Any) -> bool:
    try:
        return await accept(element)
    except PlaywrightError:
        return False
